"""
Immutable token tables: the byte-level BPE vocabulary and the special token table.
"""

import logging
from collections.abc import Iterator, Mapping
from types import MappingProxyType

from .errors import ConstructionError, VocabularyError
from .types import Encoding, Token, TokenBytes

log = logging.getLogger(__name__)


class Vocabulary:
    """
    Bijection between byte sequences and token ids.

    A token id doubles as the merge rank of its byte sequence: lower ids are
    merged first. Every single byte value must be present so that any input
    can be resolved into tokens.

    Besides the byte view, a text view maps every entry whose bytes are valid
    UTF-8 to its id, so whole pieces of text can be looked up without being
    encoded first.
    """

    __slots__ = ("_encoder", "_decoder", "_text_encoder")

    def __init__(self, ranks: Mapping[TokenBytes, Token]) -> None:
        """
        Validate ``ranks`` and build the byte, id and text views.

        :param ranks: Mapping from byte sequences to token ids.
        :raises ConstructionError: If ``ranks`` is missing or empty.
        :raises VocabularyError: If an entry is malformed, an id is shared by two
            byte sequences, or a base byte is missing.
        """
        if ranks is None:
            raise ConstructionError("vocabulary is required", argument="ranks")
        if not ranks:
            raise ConstructionError("vocabulary must not be empty", argument="ranks")

        encoder: dict[TokenBytes, Token] = {}
        decoder: dict[Token, TokenBytes] = {}
        for seq, tok in ranks.items():
            if not isinstance(seq, (bytes, bytearray)) or not seq:
                raise VocabularyError(
                    "vocabulary keys must be non-empty bytes", invalid_tok=tok
                )
            if not isinstance(tok, int) or isinstance(tok, bool):
                raise VocabularyError(
                    "vocabulary ids must be integers", invalid_bytes=bytes(seq)
                )
            if tok in decoder:
                raise VocabularyError(
                    "token id shared by two byte sequences", invalid_tok=tok
                )
            seq = bytes(seq)
            encoder[seq] = tok
            decoder[tok] = seq

        # the merge loop starts from single bytes and would stall on a missing one
        for b in range(256):
            if bytes([b]) not in encoder:
                raise VocabularyError(
                    "vocabulary is missing a base byte", invalid_bytes=bytes([b])
                )

        text_encoder: dict[str, Token] = {}
        for seq, tok in encoder.items():
            try:
                text_encoder[seq.decode("utf-8")] = tok
            except UnicodeDecodeError:
                # partial utf-8 sequences can never equal a whole piece of text
                continue

        self._encoder = MappingProxyType(encoder)
        self._decoder = MappingProxyType(decoder)
        self._text_encoder = MappingProxyType(text_encoder)

        log.debug(
            f"built vocabulary with {len(encoder)} tokens "
            f"({len(text_encoder)} valid utf-8 entries)"
        )

    @classmethod
    def from_merges(cls, merges: Encoding) -> "Vocabulary":
        """
        Build a vocabulary from a merge table over the 256 base byte tokens.

        Base byte ``b`` gets id ``b``; each merged token gets the bytes of its
        two children. Merges are applied in id order so children always exist
        before their parent.

        :param merges: Mapping from ``(left, right)`` token pairs to merged token ids.
        :raises VocabularyError: If a merge references a token that does not exist.
        """
        vocab: dict[Token, TokenBytes] = {btok: bytes([btok]) for btok in range(256)}
        for (tok0, tok1), mtok in sorted(merges.items(), key=lambda x: x[1]):
            if tok0 not in vocab or tok1 not in vocab:
                raise VocabularyError(
                    "merge references an unknown token", invalid_tok=mtok
                )
            vocab[mtok] = vocab[tok0] + vocab[tok1]
        return cls({seq: tok for tok, seq in vocab.items()})

    @property
    def encoder(self) -> Mapping[TokenBytes, Token]:
        """Read-only ``bytes -> id`` view, also used as the merge rank table."""
        return self._encoder

    @property
    def decoder(self) -> Mapping[Token, TokenBytes]:
        """Read-only ``id -> bytes`` view."""
        return self._decoder

    def token_for_text(self, text: str) -> Token | None:
        """Return the id whose bytes are exactly the UTF-8 encoding of ``text``."""
        return self._text_encoder.get(text)

    def token_for_bytes(self, seq: bytes) -> Token | None:
        """Return the id of ``seq``, or ``None`` if it is not a single token."""
        return self._encoder.get(seq)

    def bytes_for_token(self, tok: Token) -> TokenBytes | None:
        """Return the byte sequence for ``tok``, or ``None`` if unknown."""
        return self._decoder.get(tok)

    def __len__(self) -> int:
        return len(self._encoder)

    def __contains__(self, seq: object) -> bool:
        return seq in self._encoder

    def __iter__(self) -> Iterator[TokenBytes]:
        return iter(self._encoder)


class SpecialTokenTable:
    """
    Bijection between reserved strings and token ids.

    Registration order is preserved: when two special strings can match at the
    same position, the one registered first wins.
    """

    __slots__ = ("_encoder", "_decoder")

    def __init__(self, special_toks: Mapping[str, Token]) -> None:
        """
        Validate ``special_toks`` and build the string and id views.

        :param special_toks: Mapping from special strings to ids; may be empty.
        :raises ConstructionError: If ``special_toks`` is ``None``.
        :raises VocabularyError: If a key is not a non-empty string or an id is
            shared by two strings.
        """
        if special_toks is None:
            raise ConstructionError(
                "special token table is required", argument="special_tokens"
            )

        encoder: dict[str, Token] = {}
        decoder: dict[Token, str] = {}
        for seq, tok in special_toks.items():
            if not isinstance(seq, str) or not seq:
                raise VocabularyError(
                    "special tokens must be non-empty strings", invalid_tok=tok
                )
            if not isinstance(tok, int) or isinstance(tok, bool):
                raise VocabularyError(
                    f"special token id must be an integer: {seq!r}"
                )
            if tok in decoder:
                raise VocabularyError(
                    "token id shared by two special tokens", invalid_tok=tok
                )
            encoder[seq] = tok
            decoder[tok] = seq

        self._encoder = MappingProxyType(encoder)
        self._decoder = MappingProxyType(decoder)

    @property
    def encoder(self) -> Mapping[str, Token]:
        """Read-only ``string -> id`` view in registration order."""
        return self._encoder

    @property
    def decoder(self) -> Mapping[Token, str]:
        """Read-only ``id -> string`` view."""
        return self._decoder

    def token_for(self, seq: str) -> Token | None:
        return self._encoder.get(seq)

    def string_for(self, tok: Token) -> str | None:
        return self._decoder.get(tok)

    def __len__(self) -> int:
        return len(self._encoder)

    def __contains__(self, seq: object) -> bool:
        return seq in self._encoder

    def __iter__(self) -> Iterator[str]:
        return iter(self._encoder)
