"""
Core Byte Pair Encoding (BPE) merge operations for a single piece.

Merging starts with one fragment per byte. At every step the adjacent pair
whose concatenation has the lowest id in the rank table is merged; ties go to
the leftmost pair. Merging stops when no adjacent pair is in the table.

The cost is O(n^2) in the piece length, which is fine because segmentation
keeps pieces short.
"""

from itertools import pairwise
from math import inf

from .types import Ranks, Token, TokenBytes


def byte_pair_split(piece: bytes, ranks: Ranks) -> list[int]:
    """
    Run the merge loop and return the fragment boundaries of ``piece``.

    The result holds the start offset of every final fragment followed by
    ``len(piece)``, so fragment ``k`` is ``piece[bounds[k]:bounds[k + 1]]``.

    :param piece: Raw bytes of one piece.
    :param ranks: Byte sequence to token id mapping used as merge priority.
    :returns: Sorted fragment boundaries, ``[0]`` for an empty piece.
    """
    bounds = list(range(len(piece) + 1))
    # pair_ranks[i] is the rank of merging fragment i with fragment i + 1
    pair_ranks: list[float] = [
        ranks.get(piece[i : i + 2], inf) for i in range(len(piece) - 1)
    ]

    def rank_at(i: int) -> float:
        return ranks.get(piece[bounds[i] : bounds[i + 2]], inf)

    while pair_ranks:
        best = min(pair_ranks)
        if best == inf:
            break
        # index() returns the leftmost position on ties
        i = pair_ranks.index(best)

        # fragments i and i + 1 become one
        del bounds[i + 1]
        del pair_ranks[i]

        # only the pairs touching the merged fragment change rank
        if i < len(pair_ranks):
            pair_ranks[i] = rank_at(i)
        if i > 0:
            pair_ranks[i - 1] = rank_at(i - 1)

    return bounds


def byte_pair_encode(piece: bytes, ranks: Ranks) -> list[Token]:
    """Merge ``piece`` and return the token id of every final fragment."""
    if len(piece) == 1:
        return [ranks[piece]]
    bounds = byte_pair_split(piece, ranks)
    return [ranks[piece[start:end]] for start, end in pairwise(bounds)]


def byte_pair_count(piece: bytes, ranks: Ranks) -> int:
    """Merge ``piece`` and return only the number of final fragments."""
    if len(piece) <= 1:
        return len(piece)
    return len(byte_pair_split(piece, ranks)) - 1


def byte_pair_explore(piece: bytes, ranks: Ranks) -> list[TokenBytes]:
    """Merge ``piece`` and return the raw bytes of every final fragment."""
    bounds = byte_pair_split(piece, ranks)
    return [piece[start:end] for start, end in pairwise(bounds)]


__all__ = [
    "byte_pair_split",
    "byte_pair_encode",
    "byte_pair_count",
    "byte_pair_explore",
]
