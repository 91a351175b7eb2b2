"""
Core types for tokenization.
"""

from collections.abc import Mapping, Set
from typing import Literal

type Token = int
type TokenBytes = bytes
type TokenPair = tuple[Token, Token]
# merge table: (left token, right token) -> merged token
type Encoding = dict[TokenPair, Token]
# byte sequence -> token id, the id doubling as merge rank
type Ranks = Mapping[TokenBytes, Token]
type SpecialSet = Set[str] | Literal["all"]
