"""Memoization of merge results keyed by piece text."""

from .types import Token


class PieceCache:
    """
    Two additive maps: piece text to token ids and piece text to token count.

    Entries are never updated or evicted. Reads and inserts go straight to
    plain dicts, whose single-key operations are atomic, so concurrent
    callers need no extra locking. Two threads missing on the same piece both
    compute it and the first insert wins; the values are identical anyway.
    """

    __slots__ = ("_tokens", "_counts")

    def __init__(self) -> None:
        self._tokens: dict[str, tuple[Token, ...]] = {}
        self._counts: dict[str, int] = {}

    def get_tokens(self, piece: str) -> tuple[Token, ...] | None:
        return self._tokens.get(piece)

    def put_tokens(self, piece: str, tokens: list[Token]) -> tuple[Token, ...]:
        """Insert ``tokens`` for ``piece`` if absent and return the stored value."""
        return self._tokens.setdefault(piece, tuple(tokens))

    def get_count(self, piece: str) -> int | None:
        return self._counts.get(piece)

    def put_count(self, piece: str, count: int) -> int:
        """Insert ``count`` for ``piece`` if absent and return the stored value."""
        return self._counts.setdefault(piece, count)

    @property
    def n_tokens(self) -> int:
        """Number of memoized token lists."""
        return len(self._tokens)

    @property
    def n_counts(self) -> int:
        """Number of memoized token counts."""
        return len(self._counts)

    def __len__(self) -> int:
        return len(self._tokens) + len(self._counts)

    def __repr__(self) -> str:
        return f"PieceCache(tokens={self.n_tokens}, counts={self.n_counts})"
