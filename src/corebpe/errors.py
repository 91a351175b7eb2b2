"""Custom exception hierarchy for corebpe errors."""

import regex as re

from .types import Token


class CoreBPEError(Exception):
    """Base exception for all corebpe errors."""


class ConstructionError(CoreBPEError):
    """Raised when a tokenizer is built from missing or invalid inputs."""

    def __init__(self, message: str, *, argument: str | None = None) -> None:
        if argument:
            message = f"{message} (argument: {argument})"
        super().__init__(message)
        self.argument = argument


class VocabularyError(ConstructionError):
    """Raised when a vocabulary or special token table fails validation."""

    def __init__(
        self,
        message: str,
        *,
        invalid_tok: Token | None = None,
        invalid_bytes: bytes | None = None,
    ) -> None:
        """Initialize with optional token and byte sequence appended to the message."""
        extra = ""
        # duplicate id
        if invalid_tok is not None:
            extra += f" (invalid token: {invalid_tok})"
        # bad or missing byte sequence
        if invalid_bytes is not None:
            extra += f" (invalid bytes: {invalid_bytes!r})"
        super().__init__(message + extra)
        self.invalid_tok = invalid_tok
        self.invalid_bytes = invalid_bytes


class PatternError(ConstructionError):
    """Raised when compiling and/or validating regex patterns."""

    def __init__(
        self,
        message: str,
        *,
        pattern: str | None = None,
        regex_err: re.error | None = None,
    ) -> None:
        """
        Initialize PatternError with pattern details.

        Args:
            message: Error message.
            pattern: The regex pattern that failed.
            regex_err: The underlying regex error from the regex library.
        """
        extra = ""
        if pattern:
            extra += f" (pattern: {pattern!r})"
        if regex_err:
            extra += f" (reason: {regex_err})"
        super().__init__(message + extra)
        self.pattern = pattern
        self.regex_err = regex_err


class SpecialTokenError(CoreBPEError):
    """Raised when a special token found in text is not acceptable for the call."""

    def __init__(self, message: str, *, token: str) -> None:
        super().__init__(f"{message} (token: {token!r})")
        self.token = token


class DisallowedSpecialTokenError(SpecialTokenError):
    """Raised when text contains a special token the caller explicitly disallowed."""

    def __init__(self, token: str) -> None:
        super().__init__("disallowed special token found in text", token=token)


class UndeclaredSpecialTokenError(SpecialTokenError):
    """Raised when text contains a special token that is neither allowed nor disallowed."""

    def __init__(self, token: str) -> None:
        super().__init__(
            "special token found in text but not declared as allowed or disallowed",
            token=token,
        )


class UnknownTokenError(CoreBPEError):
    """Raised by strict decoding when a token id is in neither vocabulary."""

    def __init__(self, message: str, *, invalid_tok: Token) -> None:
        super().__init__(f"{message} (invalid token: {invalid_tok})")
        self.invalid_tok = invalid_tok


class StrategyError(CoreBPEError):
    """Raised when strategy operations fail."""

    def __init__(
        self,
        message: str,
        *,
        invalid_name: str | None = None,
        available_strats: list[str] | None = None,
    ) -> None:
        extra = ""
        if invalid_name:
            extra += f" (available: {available_strats}) (got {invalid_name})"
        super().__init__(message + extra)
        self.invalid_name = invalid_name
        self.available_strats = available_strats
