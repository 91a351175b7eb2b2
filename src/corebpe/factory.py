"""Factory functions for creating tokenizers."""

from collections.abc import Mapping
from typing import Literal, overload

from .pattern import TokenPattern
from .tokenizer import Tokenizer
from .types import Token, TokenBytes
from .vocab import SpecialTokenTable, Vocabulary


Pattern = Literal["gpt2", "gpt4", "gpt4o", "llama3"]


def list_patterns() -> list[str]:
    """Return names of all available built-in segmentation patterns."""
    return [pat.name for pat in TokenPattern]


def get_pattern(name: Pattern) -> str:
    """Return the regex of a built-in segmentation pattern (case-insensitive)."""
    return TokenPattern.get(name)


@overload
def get_tokenizer(
    vocab: Vocabulary | Mapping[TokenBytes, Token],
    special_tokens: SpecialTokenTable | Mapping[str, Token] | None = None,
    pattern: Pattern = "gpt4",
    *,
    enable_cache: bool | None = None,
) -> Tokenizer: ...


@overload
def get_tokenizer(
    vocab: Vocabulary | Mapping[TokenBytes, Token],
    special_tokens: SpecialTokenTable | Mapping[str, Token] | None = None,
    *,
    custom_pattern: str,
    enable_cache: bool | None = None,
) -> Tokenizer: ...


def get_tokenizer(
    vocab: Vocabulary | Mapping[TokenBytes, Token],
    special_tokens: SpecialTokenTable | Mapping[str, Token] | None = None,
    pattern: Pattern = "gpt4",
    *,
    custom_pattern: str | None = None,
    enable_cache: bool | None = None,
) -> Tokenizer:
    """
    Create a tokenizer with a built-in or custom segmentation pattern.

    :param vocab: Byte-level vocabulary or ``bytes -> id`` mapping.
    :param special_tokens: Special token table or ``str -> id`` mapping; ``None`` means none.
    :param pattern: Built-in pattern name (e.g., "gpt2", "gpt4", "gpt4o").
                    Ignored if custom_pattern is provided.
    :param custom_pattern: Custom regex pattern string. Overrides pattern parameter.
    :param enable_cache: Memoize merge results per piece; ``None`` uses the process default.
    :return: Configured tokenizer instance.
    :raises PatternError: If the pattern name is unknown or custom_pattern is invalid regex.

    .. code-block:: python

        # Use built-in pattern
        tokenizer = get_tokenizer(vocab, {"<|endoftext|>": 100257}, "gpt4")

        # Use custom pattern
        tokenizer = get_tokenizer(vocab, custom_pattern=r"\\S+|\\s+")
    """
    if special_tokens is None:
        special_tokens = {}

    # tokenizer initializer handles invalid custom patterns
    if custom_pattern is not None:
        return Tokenizer(vocab, special_tokens, custom_pattern, enable_cache=enable_cache)

    # get() handles invalid pattern names
    pat_str = TokenPattern.get(pattern)
    return Tokenizer(vocab, special_tokens, pat_str, enable_cache=enable_cache)


__all__ = ["Pattern", "list_patterns", "get_pattern", "get_tokenizer"]
