"""Shared fixtures: a small hand-made merge vocabulary over the 256 base bytes."""

import pytest

import corebpe as cb


ENDOFTEXT = "<|endoftext|>"
ENDOFTEXT_ID = 1000
FIM_PREFIX = "<|fim_prefix|>"
FIM_PREFIX_ID = 1001

# (left, right) -> merged, base byte b has id b
MERGES = {
    (104, 101): 256,  # "he"
    (108, 108): 257,  # "ll"
    (256, 257): 258,  # "hell"
    (258, 111): 259,  # "hello"
    (32, 119): 260,  # " w"
    (111, 114): 261,  # "or"
    (260, 261): 262,  # " wor"
    (108, 100): 263,  # "ld"
    (262, 263): 264,  # " world"
    (0xC3, 0xA9): 265,  # "é"
    (0xF0, 0x9F): 266,  # first half of a 4-byte emoji
    (116, 104): 267,  # "th"
    (267, 101): 268,  # "the"
}


@pytest.fixture
def vocab():
    return cb.Vocabulary.from_merges(MERGES)


@pytest.fixture
def special_tokens():
    return {ENDOFTEXT: ENDOFTEXT_ID, FIM_PREFIX: FIM_PREFIX_ID}


@pytest.fixture
def tokenizer(vocab, special_tokens):
    """Return a GPT-2 pattern tokenizer with caching on."""
    return cb.Tokenizer(vocab, special_tokens, cb.TokenPattern.GPT2, enable_cache=True)


@pytest.fixture
def uncached_tokenizer(vocab, special_tokens):
    """Return the same tokenizer with caching off."""
    return cb.Tokenizer(vocab, special_tokens, cb.TokenPattern.GPT2, enable_cache=False)
