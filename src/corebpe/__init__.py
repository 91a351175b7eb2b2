"""corebpe: byte pair encoding against a fixed, pretrained vocabulary."""

from ._cache import PieceCache
from ._config import disable_cache, enable_cache
from .errors import (
    ConstructionError,
    CoreBPEError,
    DisallowedSpecialTokenError,
    PatternError,
    SpecialTokenError,
    StrategyError,
    UndeclaredSpecialTokenError,
    UnknownTokenError,
    VocabularyError,
)
from .factory import get_pattern, get_tokenizer, list_patterns
from .pattern import TokenPattern, compile_pattern
from .scanner import SpecialMatch, SpecialTokenScanner
from .strategy import (
    AllowAllStrategy,
    AllowCustomStrategy,
    AllowNoneRaiseStrategy,
    SpecialPolicy,
    SpecialTokenStrategy,
    get_strategy,
    list_strategies,
)
from .tokenizer import Tokenizer
from .vocab import SpecialTokenTable, Vocabulary

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("corebpe")
except PackageNotFoundError:
    __version__ = "dev"

__all__ = [
    "Tokenizer",
    "Vocabulary",
    "SpecialTokenTable",
    "SpecialTokenScanner",
    "SpecialMatch",
    "PieceCache",
    "TokenPattern",
    "SpecialPolicy",
    "SpecialTokenStrategy",
    "AllowAllStrategy",
    "AllowNoneRaiseStrategy",
    "AllowCustomStrategy",
    "CoreBPEError",
    "ConstructionError",
    "VocabularyError",
    "PatternError",
    "SpecialTokenError",
    "DisallowedSpecialTokenError",
    "UndeclaredSpecialTokenError",
    "UnknownTokenError",
    "StrategyError",
    "compile_pattern",
    "get_tokenizer",
    "get_strategy",
    "get_pattern",
    "list_patterns",
    "list_strategies",
    "enable_cache",
    "disable_cache",
]
