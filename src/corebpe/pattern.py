"""Segmentation patterns that split text into pieces before byte pair merging."""

import re as std_re
from enum import Enum

import regex as re

from .errors import ConstructionError, PatternError

_STD_FLAGS = (
    (std_re.IGNORECASE, re.IGNORECASE),
    (std_re.MULTILINE, re.MULTILINE),
    (std_re.DOTALL, re.DOTALL),
    (std_re.VERBOSE, re.VERBOSE),
    (std_re.ASCII, re.ASCII),
)


class TokenPattern(str, Enum):
    """
    Pre-defined regex patterns matching published BPE vocabularies.

    Sources:
    - GPT2, GPT4 and GPT4O: https://github.com/openai/tiktoken/blob/main/tiktoken_ext/openai_public.py
    - LLAMA3: https://github.com/ggerganov/llama.cpp
    """

    # r50k_base
    GPT2 = (
        r"'(?:[sdmt]|ll|ve|re)|"
        r" ?\p{L}+|"
        r" ?\p{N}+|"
        r" ?[^\s\p{L}\p{N}]+|"
        r"\s+(?!\S)|"
        r"\s+"
    )

    # cl100k_base
    GPT4 = (
        r"'(?i:[sdmt]|ll|ve|re)|"
        r"[^\r\n\p{L}\p{N}]?+\p{L}+|"
        r"\p{N}{1,3}|"
        r" ?[^\s\p{L}\p{N}]++[\r\n]*|"
        r"\s*[\r\n]|"
        r"\s+(?!\S)|"
        r"\s+"
    )

    # o200k_base
    GPT4O = (
        r"[^\r\n\p{L}\p{N}]?[\p{Lu}\p{Lt}\p{Lm}\p{Lo}\p{M}]*[\p{Ll}\p{Lm}\p{Lo}\p{M}]+(?i:'s|'t|'re|'ve|'m|'ll|'d)?|"
        r"[^\r\n\p{L}\p{N}]?[\p{Lu}\p{Lt}\p{Lm}\p{Lo}\p{M}]+[\p{Ll}\p{Lm}\p{Lo}\p{M}]*(?i:'s|'t|'re|'ve|'m|'ll|'d)?|"
        r"\p{N}{1,3}|"
        r" ?[^\s\p{L}\p{N}]+[\r\n/]*|"
        r"\s*[\r\n]+|"
        r"\s+(?!\S)|"
        r"\s+"
    )

    # Meta models
    LLAMA3 = (
        r"(?:'[sS]|'[tT]|'[rR][eE]|'[vV][eE]|'[mM]|'[lL][lL]|'[dD])|"
        r"[^\r\n\p{L}\p{N}]?\p{L}+|"
        r"\p{N}{1,3}|"
        r" ?[^\s\p{L}\p{N}]+[\r\n]*|"
        r"\s*[\r\n]+|"
        r"\s+(?!\S)|"
        r"\s+"
    )

    @classmethod
    def get(cls, name: str) -> str:
        """Get patterns by name (case-insensitive)."""
        try:
            return cls[name.upper().replace("-", "_")].value
        except KeyError:
            raise PatternError(
                f"Unknown pattern: {name!r}. "
                f"Valid patterns: {', '.join(pat.name for pat in cls)}"
            )


def compile_pattern(pattern: "str | TokenPattern | re.Pattern[str]") -> re.Pattern[str]:
    """
    Compile and validate a segmentation pattern.

    Patterns compiled with the regex module are returned unchanged; patterns
    compiled with the standard library are recompiled with the regex module.

    :param pattern: Regex pattern string, built-in pattern or compiled pattern.
    :return: Compiled regex pattern.
    :raises ConstructionError: If pattern is missing or empty.
    :raises PatternError: If pattern is not a valid regex.
    """
    if pattern is None:
        raise ConstructionError("segmentation pattern is required", argument="pattern")
    if isinstance(pattern, re.Pattern):
        return pattern
    if isinstance(pattern, std_re.Pattern):
        if not isinstance(pattern.pattern, str):
            raise PatternError(
                "segmentation pattern must match text, not bytes",
                pattern=repr(pattern.pattern),
            )
        # standard library flags differ from the regex module's
        flags = 0
        for std_flag, flag in _STD_FLAGS:
            if pattern.flags & std_flag:
                flags |= flag
        try:
            return re.compile(pattern.pattern, flags)
        except re.error as e:
            raise PatternError(
                "invalid regex pattern", pattern=pattern.pattern, regex_err=e
            ) from e
    if isinstance(pattern, TokenPattern):
        pattern = pattern.value
    if not pattern:
        raise ConstructionError(
            "segmentation pattern must not be empty", argument="pattern"
        )
    try:
        return re.compile(pattern)
    except re.error as e:
        raise PatternError("invalid regex pattern", pattern=pattern, regex_err=e) from e


__all__ = ["TokenPattern", "compile_pattern"]
