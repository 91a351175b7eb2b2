"""Special token handling for tokenization."""

from typing import Final, Literal, NamedTuple, overload, override
from abc import ABC, abstractmethod
import logging

from .errors import StrategyError
from .vocab import SpecialTokenTable

log = logging.getLogger(__name__)

# =========================================================================================

# special token handling strategies


class SpecialPolicy(NamedTuple):
    """Special strings kept as single tokens and special strings that must not appear."""

    allowed: frozenset[str]
    disallowed: frozenset[str]


class SpecialTokenStrategy(ABC):
    """Base strategy for handling special tokens during encoding."""

    @abstractmethod
    def handle(self, special_toks: SpecialTokenTable) -> SpecialPolicy:
        """Return the allowed and disallowed special tokens for one call."""


class AllowAllStrategy(SpecialTokenStrategy):
    """Strategy that allows all registered special tokens."""

    @override
    def handle(self, special_toks: SpecialTokenTable) -> SpecialPolicy:
        """Allow every registered special token."""
        if not len(special_toks):
            log.warning("no special tokens registered")
        return SpecialPolicy(frozenset(special_toks), frozenset())


class AllowNoneRaiseStrategy(SpecialTokenStrategy):
    """Strategy that raises if special tokens are found in text to be encoded."""

    @override
    def handle(self, special_toks: SpecialTokenTable) -> SpecialPolicy:
        """Disallow every registered special token."""
        return SpecialPolicy(frozenset(), frozenset(special_toks))


class AllowCustomStrategy(SpecialTokenStrategy):
    """Strategy that allows only specified special tokens and rejects the rest."""

    def __init__(self, allowed_subset: set[str]) -> None:
        """Store the special token subset allowed during encoding."""
        super().__init__()
        self.allowed_subset = frozenset(allowed_subset)

    @override
    def handle(self, special_toks: SpecialTokenTable) -> SpecialPolicy:
        """Allow the registered tokens in the subset and disallow all others."""
        unknown = self.allowed_subset.difference(special_toks)
        if unknown:
            log.warning(f"allowed subset names unregistered special tokens: {sorted(unknown)}")
        allowed = frozenset(seq for seq in special_toks if seq in self.allowed_subset)
        disallowed = frozenset(special_toks).difference(allowed)
        return SpecialPolicy(allowed, disallowed)


StrategyName = Literal["all", "none-raise", "custom"]

_SPECIAL_TOKEN_STRATEGIES: Final[dict[str, type[SpecialTokenStrategy]]] = {
    "all": AllowAllStrategy,
    "none-raise": AllowNoneRaiseStrategy,
    "custom": AllowCustomStrategy,
}


def list_strategies() -> list[str]:
    """Return available special token strategy names."""
    return list(_SPECIAL_TOKEN_STRATEGIES.keys())


@overload
def get_strategy(
    name: Literal["all", "none-raise"],
) -> SpecialTokenStrategy:
    """Return a built-in strategy that does not need extra arguments."""
    ...


@overload
def get_strategy(
    name: Literal["custom"], allowed_subset: set[str]
) -> AllowCustomStrategy:
    """Return a custom strategy limited to ``allowed_subset``."""
    ...


def get_strategy(
    name: StrategyName = "none-raise", allowed_subset: set[str] | None = None
) -> SpecialTokenStrategy:
    """
    Create a special token strategy by name.

    :param name: Strategy identifier: "all", "none-raise", or "custom".
    :param allowed_subset: Required for "custom"; tokens allowed during encoding.
    :raises StrategyError: If name is unknown or allowed_subset is missing for custom.
    """
    if name not in _SPECIAL_TOKEN_STRATEGIES:
        raise StrategyError(
            "unknown strategy name",
            invalid_name=name,
            available_strats=list(_SPECIAL_TOKEN_STRATEGIES.keys()),
        )

    if name == "custom":
        if allowed_subset is None:
            raise StrategyError("allowed_subset is required for custom strategy")
        return AllowCustomStrategy(allowed_subset)

    return _SPECIAL_TOKEN_STRATEGIES[name]()


__all__ = [
    "StrategyName",
    "SpecialPolicy",
    "SpecialTokenStrategy",
    "AllowAllStrategy",
    "AllowNoneRaiseStrategy",
    "AllowCustomStrategy",
    "list_strategies",
    "get_strategy",
]
