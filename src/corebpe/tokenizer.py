"""
Byte-level BPE tokenizer over a fixed, pretrained vocabulary.
"""

import logging
import os
from collections.abc import Iterator, Mapping, Sequence
from concurrent.futures import ThreadPoolExecutor
from math import ceil

import regex as re

from ._bpe import byte_pair_count, byte_pair_encode, byte_pair_explore
from ._cache import PieceCache
from ._config import _is_cache_enabled
from ._decorators import log_elapsed
from ._utf8 import group_utf8_safe
from .errors import ConstructionError, SpecialTokenError, UnknownTokenError
from .pattern import TokenPattern, compile_pattern
from .scanner import SpecialMatch, SpecialTokenScanner
from .strategy import SpecialPolicy, SpecialTokenStrategy
from .types import SpecialSet, Token, TokenBytes
from .vocab import SpecialTokenTable, Vocabulary

log = logging.getLogger(__name__)


class Tokenizer:
    """
    Encode text to token ids and back with a pretrained byte pair vocabulary.

    Text is first split around special tokens, then each run of ordinary text
    is split into pieces by the segmentation pattern. Every piece is resolved
    by the cheapest route that works: a whole-piece vocabulary lookup, the
    piece cache, a lookup of the piece bytes, and finally the merge loop.

    Vocabulary and special tokens are read-only after construction and the
    piece cache only ever grows, so one instance can be shared across threads.
    """

    def __init__(
        self,
        vocab: Vocabulary | Mapping[TokenBytes, Token],
        special_tokens: SpecialTokenTable | Mapping[str, Token],
        pattern: "str | TokenPattern | re.Pattern[str]",
        *,
        enable_cache: bool | None = None,
    ) -> None:
        """
        Validate inputs and prepare the scanner and caches.

        :param vocab: Byte-level vocabulary, or a ``bytes -> id`` mapping to build one from.
        :param special_tokens: Special token table, or a ``str -> id`` mapping; may be empty.
        :param pattern: Segmentation pattern as a string, built-in pattern or compiled regex.
        :param enable_cache: Memoize merge results per piece; ``None`` uses the process default.
        :raises ConstructionError: If an argument is missing, empty or invalid.
        """
        if vocab is None:
            raise ConstructionError("vocabulary is required", argument="vocab")
        if special_tokens is None:
            raise ConstructionError(
                "special token table is required", argument="special_tokens"
            )

        self._vocab = vocab if isinstance(vocab, Vocabulary) else Vocabulary(vocab)
        self._special = (
            special_tokens
            if isinstance(special_tokens, SpecialTokenTable)
            else SpecialTokenTable(special_tokens)
        )
        self._pattern = compile_pattern(pattern)
        self._scanner = SpecialTokenScanner(self._special)
        self._enable_cache = (
            _is_cache_enabled() if enable_cache is None else bool(enable_cache)
        )
        self._cache = PieceCache()

        # decoding prefers the vocabulary, so a shared id never decodes as the special token
        collisions = sorted(
            seq for seq, tok in self._special.encoder.items() if tok in self._vocab.decoder
        )
        if collisions:
            log.warning(f"special token ids collide with vocabulary ids: {collisions}")

        log.debug(
            f"tokenizer ready: {len(self._vocab)} tokens, "
            f"{len(self._special)} special tokens, cache {'on' if self._enable_cache else 'off'}"
        )

    # Properties
    # ---------------------------------------------------------------------------

    @property
    def vocab(self) -> Vocabulary:
        return self._vocab

    @property
    def special_tokens(self) -> SpecialTokenTable:
        return self._special

    @property
    def n_vocab(self) -> int:
        """Number of ids known to the tokenizer, special tokens included."""
        return len(self._vocab) + len(self._special)

    @property
    def cache_enabled(self) -> bool:
        return self._enable_cache

    @property
    def cache(self) -> PieceCache:
        """The instance's piece cache; grows for the lifetime of the tokenizer."""
        return self._cache

    # Encoding
    # ---------------------------------------------------------------------------

    def encode(
        self,
        text: str,
        allowed_special: SpecialSet = frozenset(),
        disallowed_special: SpecialSet = frozenset(),
        *,
        strategy: SpecialTokenStrategy | None = None,
    ) -> list[Token]:
        """
        Encode text into a sequence of tokens.

        Special tokens in ``allowed_special`` become their own id. Any other
        registered special string in the text is an error, so the whole call
        fails before a single token is produced.

        :param text: Text to encode.
        :param allowed_special: Special strings to encode as special tokens, or ``"all"``.
        :param disallowed_special: Special strings that must not appear, or ``"all"``
            for every registered special token not allowed.
        :param strategy: Strategy that overrides both sets when given.
        :returns: Token ids in text order.
        :raises DisallowedSpecialTokenError: If a disallowed special token is found.
        :raises UndeclaredSpecialTokenError: If a special token is in neither set.
        """
        policy = self._resolve_policy(allowed_special, disallowed_special, strategy)

        tokens: list[Token] = []
        for run, match in self._split(text, policy):
            for piece in self._pieces(run):
                tokens.extend(self._encode_piece(piece))
            if match.length:
                tokens.append(match.token)
        return tokens

    def encode_ordinary(self, text: str) -> list[Token]:
        """Encode text treating special token strings as ordinary text."""
        tokens: list[Token] = []
        for piece in self._pieces(text):
            tokens.extend(self._encode_piece(piece))
        return tokens

    def count_tokens(
        self,
        text: str,
        allowed_special: SpecialSet | None = None,
        disallowed_special: SpecialSet | None = None,
        *,
        strategy: SpecialTokenStrategy | None = None,
    ) -> int:
        """
        Count the tokens ``text`` encodes to without building the token list.

        With no special token arguments the text is counted as ordinary text.
        Otherwise special tokens are validated exactly like ``encode`` and each
        allowed one counts as a single token.
        """
        if allowed_special is None and disallowed_special is None and strategy is None:
            return sum(self._count_piece(piece) for piece in self._pieces(text))

        policy = self._resolve_policy(allowed_special, disallowed_special, strategy)
        n_tokens = 0
        for run, match in self._split(text, policy):
            for piece in self._pieces(run):
                n_tokens += self._count_piece(piece)
            if match.length:
                n_tokens += 1
        return n_tokens

    @log_elapsed("batch encode")
    def encode_batch(
        self,
        texts: list[str],
        allowed_special: SpecialSet = frozenset(),
        disallowed_special: SpecialSet = frozenset(),
        *,
        strategy: SpecialTokenStrategy | None = None,
        num_workers: int | None = None,
    ) -> list[list[Token]]:
        """
        Encode many texts on a thread pool.

        :param texts: Text inputs to encode.
        :param num_workers: Worker count; defaults to the CPU count, ``0`` means one.
        :returns: Encoded token sequences in input order.
        """
        policy = self._resolve_policy(allowed_special, disallowed_special, strategy)

        def encode_one(text: str) -> list[Token]:
            return self.encode(text, policy.allowed, policy.disallowed)

        return self._map_batch(encode_one, texts, num_workers)

    # Introspection
    # ---------------------------------------------------------------------------

    def explore(
        self,
        text: str,
        allowed_special: SpecialSet = frozenset(),
        disallowed_special: SpecialSet = frozenset(),
        *,
        strategy: SpecialTokenStrategy | None = None,
    ) -> list[str]:
        """
        Return the text of every token ``encode`` would produce.

        Fragments that split a multi-byte character decode with replacement
        characters; use ``explore_utf8_safe`` to keep characters whole.
        """
        policy = self._resolve_policy(allowed_special, disallowed_special, strategy)

        values: list[str] = []
        for run, match in self._split(text, policy):
            for piece in self._pieces(run):
                fragments = self._explore_piece(piece)
                if fragments is None:
                    values.append(piece)
                else:
                    values.extend(
                        frag.decode("utf-8", errors="replace") for frag in fragments
                    )
            if match.length:
                values.append(text[match.start : match.start + match.length])
        return values

    def explore_utf8_safe(
        self,
        text: str,
        allowed_special: SpecialSet = frozenset(),
        disallowed_special: SpecialSet = frozenset(),
        *,
        strategy: SpecialTokenStrategy | None = None,
    ) -> list[tuple[str, int]]:
        """
        Like ``explore`` but group tokens so every entry is whole UTF-8 text.

        Each entry is ``(text, n_tokens)`` where ``n_tokens`` counts the tokens
        merged into that entry.
        """
        policy = self._resolve_policy(allowed_special, disallowed_special, strategy)

        values: list[tuple[str, int]] = []
        for run, match in self._split(text, policy):
            for piece in self._pieces(run):
                fragments = self._explore_piece(piece)
                if fragments is None:
                    values.append((piece, 1))
                else:
                    values.extend(group_utf8_safe(fragments))
            if match.length:
                values.append((text[match.start : match.start + match.length], 1))
        return values

    # Decoding
    # ---------------------------------------------------------------------------

    def decode(self, tokens: Sequence[Token], *, strict: bool = False) -> bytes:
        """
        Decode tokens into the raw bytes they stand for.

        Tokens are resolved first from the vocabulary and then from the special
        tokens. Unknown tokens contribute nothing unless ``strict`` is set.

        :param tokens: Token sequence to decode.
        :param strict: Raise on unknown tokens instead of skipping them.
        :raises UnknownTokenError: If ``strict`` and a token is unknown.
        """
        txt_bytes: list[bytes] = []
        for tok in tokens:
            seq = self._vocab.bytes_for_token(tok)
            if seq is None:
                special = self._special.string_for(tok)
                if special is None:
                    if strict:
                        raise UnknownTokenError(
                            "token not found in vocabulary", invalid_tok=tok
                        )
                    log.debug(f"skipping unknown token {tok}")
                    continue
                seq = special.encode("utf-8")
            txt_bytes.append(seq)
        return b"".join(txt_bytes)

    def decode_text(self, tokens: Sequence[Token], errors: str = "replace") -> str:
        """
        Decode tokens into text.

        :param errors: How to handle invalid UTF-8: "strict", "replace" (default) or "ignore".
        """
        return self.decode(tokens).decode("utf-8", errors=errors)

    @log_elapsed("batch decode")
    def decode_batch(
        self,
        token_batch: list[Sequence[Token]],
        num_workers: int | None = None,
    ) -> list[bytes]:
        """Decode many token sequences on a thread pool, in input order."""
        return self._map_batch(self.decode, token_batch, num_workers)

    # Internals
    # ---------------------------------------------------------------------------

    def _resolve_policy(
        self,
        allowed_special: SpecialSet | None,
        disallowed_special: SpecialSet | None,
        strategy: SpecialTokenStrategy | None,
    ) -> SpecialPolicy:
        """Turn the per-call special token arguments into concrete sets."""
        if strategy is not None:
            return strategy.handle(self._special)

        for name, value in (
            ("allowed_special", allowed_special),
            ("disallowed_special", disallowed_special),
        ):
            if isinstance(value, str) and value != "all":
                raise SpecialTokenError(
                    f"{name} must be a set of strings or \"all\"", token=value
                )

        registered = frozenset(self._special)
        if allowed_special == "all":
            allowed = registered
        else:
            allowed = frozenset(allowed_special or ())
        if disallowed_special == "all":
            disallowed = registered - allowed
        else:
            disallowed = frozenset(disallowed_special or ())
        return SpecialPolicy(allowed, disallowed)

    def _split(
        self, text: str, policy: SpecialPolicy
    ) -> Iterator[tuple[str, SpecialMatch]]:
        """Yield each run of ordinary text together with the special match closing it."""
        # scan everything up front: a bad special token fails before any output
        matches = self._scanner.scan(text, policy.allowed, policy.disallowed)
        start = 0
        for match in matches:
            yield text[start : match.start], match
            start = match.start + match.length

    def _pieces(self, run: str) -> Iterator[str]:
        """Split a run of ordinary text into pieces with the segmentation pattern."""
        for m in self._pattern.finditer(run):
            piece = m.group(0)
            if piece:
                yield piece

    def _encode_piece(self, piece: str) -> Sequence[Token]:
        tok = self._vocab.token_for_text(piece)
        if tok is not None:
            return (tok,)

        if self._enable_cache:
            cached = self._cache.get_tokens(piece)
            if cached is not None:
                return cached

        piece_bytes = _to_bytes(piece)
        tok = self._vocab.token_for_bytes(piece_bytes)
        if tok is not None:
            return (tok,)

        tokens = byte_pair_encode(piece_bytes, self._vocab.encoder)
        if self._enable_cache:
            return self._cache.put_tokens(piece, tokens)
        return tokens

    def _count_piece(self, piece: str) -> int:
        if self._vocab.token_for_text(piece) is not None:
            return 1

        if self._enable_cache:
            cached = self._cache.get_count(piece)
            if cached is not None:
                return cached

        piece_bytes = _to_bytes(piece)
        if piece_bytes in self._vocab:
            return 1

        n_tokens = byte_pair_count(piece_bytes, self._vocab.encoder)
        if self._enable_cache:
            return self._cache.put_count(piece, n_tokens)
        return n_tokens

    def _explore_piece(self, piece: str) -> list[TokenBytes] | None:
        """Return the merged fragments of ``piece``, or ``None`` if it is one token."""
        if self._vocab.token_for_text(piece) is not None:
            return None
        piece_bytes = _to_bytes(piece)
        if piece_bytes in self._vocab:
            return None
        return byte_pair_explore(piece_bytes, self._vocab.encoder)

    def _map_batch(self, func, items: list, num_workers: int | None) -> list:
        """Apply ``func`` to every item on a thread pool, preserving order."""
        if not items:
            return []

        if num_workers is None:
            workers = os.cpu_count() or 1
        else:
            workers = max(1, num_workers)  # "0" interpreted as 1 worker

        if workers == 1 or len(items) <= 1:
            return [func(item) for item in items]

        # group items to reduce task-scheduling overhead for many small inputs
        target_tasks = min(len(items), workers * 2)
        group_size = max(1, ceil(len(items) / target_tasks))
        groups = [items[idx : idx + group_size] for idx in range(0, len(items), group_size)]

        def run_group(group: list) -> list:
            return [func(item) for item in group]

        with ThreadPoolExecutor(max_workers=workers) as pool:
            results = list(pool.map(run_group, groups))
        return [res for group in results for res in group]

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}(n_vocab={self.n_vocab}, "
            f"n_special={len(self._special)}, cache_enabled={self._enable_cache})"
        )


def _to_bytes(piece: str) -> bytes:
    # lone surrogates keep their bytes so decoding reproduces them
    return piece.encode("utf-8", errors="surrogatepass")


__all__ = ["Tokenizer"]
