"""Locate and validate special tokens in raw text."""

import logging
from collections.abc import Set
from typing import NamedTuple

import regex as re

from .errors import DisallowedSpecialTokenError, UndeclaredSpecialTokenError
from .types import Token
from .vocab import SpecialTokenTable

log = logging.getLogger(__name__)


class SpecialMatch(NamedTuple):
    """A special token occurrence; ``length == 0`` marks the end of text."""

    start: int
    length: int
    token: Token | None = None


class SpecialTokenScanner:
    """
    Find special tokens in text using one alternation over all registered strings.

    The alternation follows registration order, so when two special strings
    match at the same position the one registered first wins.
    """

    def __init__(self, special_toks: SpecialTokenTable) -> None:
        self._table = special_toks
        if len(special_toks):
            # escape regex metachars like "|" in special tokens
            self._pattern: re.Pattern[str] | None = re.compile(
                "|".join(re.escape(seq) for seq in special_toks)
            )
        else:
            self._pattern = None

    def scan(
        self,
        text: str,
        allowed_special: Set[str],
        disallowed_special: Set[str],
    ) -> list[SpecialMatch]:
        """
        Return the allowed special token matches in ``text`` plus an end marker.

        Every match is validated before anything is returned, so a failing
        call never yields partial output.

        :param text: Raw text to scan.
        :param allowed_special: Special strings to keep as single tokens.
        :param disallowed_special: Special strings that must not appear.
        :returns: Non-overlapping matches in text order, terminated by
            ``SpecialMatch(len(text), 0)``.
        :raises DisallowedSpecialTokenError: If a disallowed special string is found.
        :raises UndeclaredSpecialTokenError: If a special string is in neither set.
        """
        matches: list[SpecialMatch] = []
        if self._pattern is not None:
            for m in self._pattern.finditer(text):
                seq = m.group(0)
                if seq in disallowed_special:
                    raise DisallowedSpecialTokenError(seq)
                if seq not in allowed_special:
                    raise UndeclaredSpecialTokenError(seq)
                matches.append(
                    SpecialMatch(m.start(), len(seq), self._table.token_for(seq))
                )

        if matches:
            log.debug(f"found {len(matches)} special tokens in text")
        matches.append(SpecialMatch(len(text), 0))
        return matches


__all__ = ["SpecialMatch", "SpecialTokenScanner"]
