import os

_cache_enabled: bool = True


def enable_cache() -> None:
    """Enable piece memoization for tokenizers created without an explicit choice."""
    global _cache_enabled
    _cache_enabled = True


def disable_cache() -> None:
    """Disable piece memoization for tokenizers created without an explicit choice."""
    global _cache_enabled
    _cache_enabled = False


def _is_cache_enabled() -> bool:
    """Check if caching is enabled by default (respects env var override)."""
    if os.environ.get("COREBPE_DISABLE_CACHE", "").strip() == "1":
        return False
    return _cache_enabled
