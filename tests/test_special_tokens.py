"""Unit tests for special token scanning, validation and strategies."""

import pytest

import corebpe as cb


ENDOFTEXT = "<|endoftext|>"
ENDOFTEXT_ID = 1000
FIM_PREFIX = "<|fim_prefix|>"
FIM_PREFIX_ID = 1001


# Allowed / disallowed / undeclared
# ---------------------------------------------------------------------------


def test_allowed_special_token_is_one_token(tokenizer):
    tokens = tokenizer.encode(f"{ENDOFTEXT}hello", allowed_special={ENDOFTEXT})
    assert tokens == [ENDOFTEXT_ID] + tokenizer.encode("hello")


def test_special_tokens_keep_their_position(tokenizer):
    text = f"hello{FIM_PREFIX} world{ENDOFTEXT}hellos"
    tokens = tokenizer.encode(text, allowed_special="all")
    assert tokens == [259, FIM_PREFIX_ID, 264, ENDOFTEXT_ID, 259, ord("s")]
    assert tokenizer.decode(tokens) == text.encode("utf-8")


def test_disallowed_special_token_raises(tokenizer):
    with pytest.raises(cb.DisallowedSpecialTokenError) as exc_info:
        tokenizer.encode(f"{ENDOFTEXT}hello", disallowed_special={ENDOFTEXT})
    assert exc_info.value.token == ENDOFTEXT
    assert ENDOFTEXT in str(exc_info.value)


def test_undeclared_special_token_raises(tokenizer):
    with pytest.raises(cb.UndeclaredSpecialTokenError) as exc_info:
        tokenizer.encode(f"{ENDOFTEXT}hello")
    assert exc_info.value.token == ENDOFTEXT


def test_disallowed_wins_over_allowed(tokenizer):
    with pytest.raises(cb.DisallowedSpecialTokenError):
        tokenizer.encode(
            ENDOFTEXT, allowed_special={ENDOFTEXT}, disallowed_special={ENDOFTEXT}
        )


def test_disallowed_all_excludes_allowed(tokenizer):
    """"all" disallows every registered token that is not allowed."""
    assert tokenizer.encode(
        ENDOFTEXT, allowed_special={ENDOFTEXT}, disallowed_special="all"
    ) == [ENDOFTEXT_ID]
    with pytest.raises(cb.DisallowedSpecialTokenError) as exc_info:
        tokenizer.encode(
            f"{ENDOFTEXT}{FIM_PREFIX}",
            allowed_special={ENDOFTEXT},
            disallowed_special="all",
        )
    assert exc_info.value.token == FIM_PREFIX


def test_failure_produces_no_partial_work(tokenizer):
    """Validation runs before any piece is merged or cached."""
    with pytest.raises(cb.UndeclaredSpecialTokenError):
        tokenizer.encode(f"hellos worlds{ENDOFTEXT}")
    assert len(tokenizer.cache) == 0


def test_explore_validates_special_tokens(tokenizer):
    with pytest.raises(cb.UndeclaredSpecialTokenError):
        tokenizer.explore(ENDOFTEXT)
    with pytest.raises(cb.DisallowedSpecialTokenError):
        tokenizer.explore_utf8_safe(ENDOFTEXT, disallowed_special="all")


def test_explore_reports_special_tokens(tokenizer):
    text = f"hellos{ENDOFTEXT}"
    assert tokenizer.explore(text, allowed_special="all") == ["hello", "s", ENDOFTEXT]
    assert tokenizer.explore_utf8_safe(text, allowed_special="all") == [
        ("hello", 1),
        ("s", 1),
        (ENDOFTEXT, 1),
    ]


def test_text_without_special_tokens_needs_no_sets(tokenizer):
    assert tokenizer.encode("hello <|not special|>") == tokenizer.encode_ordinary(
        "hello <|not special|>"
    )


# Scanner
# ---------------------------------------------------------------------------


def test_first_registered_wins_on_shared_prefix(vocab):
    """When special strings overlap at one position, registration order decides."""
    prefix_first = cb.Tokenizer(
        vocab, {"<|end": 2000, ENDOFTEXT: 2001}, cb.TokenPattern.GPT2
    )
    tokens = prefix_first.encode(ENDOFTEXT, allowed_special="all")
    assert tokens == [2000] + prefix_first.encode_ordinary("oftext|>")

    full_first = cb.Tokenizer(
        vocab, {ENDOFTEXT: 2001, "<|end": 2000}, cb.TokenPattern.GPT2
    )
    assert full_first.encode(ENDOFTEXT, allowed_special="all") == [2001]


def test_scanner_appends_end_marker():
    scanner = cb.SpecialTokenScanner(cb.SpecialTokenTable({"<s>": 5000}))
    matches = scanner.scan("a<s>b<s>", {"<s>"}, set())
    assert matches == [
        cb.SpecialMatch(1, 3, 5000),
        cb.SpecialMatch(5, 3, 5000),
        cb.SpecialMatch(8, 0),
    ]


def test_scanner_without_special_tokens():
    scanner = cb.SpecialTokenScanner(cb.SpecialTokenTable({}))
    assert scanner.scan("<|endoftext|>", set(), set()) == [cb.SpecialMatch(13, 0)]


def test_scanner_escapes_metacharacters():
    scanner = cb.SpecialTokenScanner(cb.SpecialTokenTable({"[a|b]+": 5000}))
    assert scanner.scan("ab[a|b]+", {"[a|b]+"}, set())[0] == cb.SpecialMatch(2, 6, 5000)
    assert scanner.scan("aab", {"[a|b]+"}, set()) == [cb.SpecialMatch(3, 0)]


# Strategies
# ---------------------------------------------------------------------------


def test_allow_all_strategy(tokenizer):
    strategy = cb.get_strategy("all")
    assert tokenizer.encode(f"{ENDOFTEXT}{FIM_PREFIX}", strategy=strategy) == [
        ENDOFTEXT_ID,
        FIM_PREFIX_ID,
    ]


def test_none_raise_strategy(tokenizer):
    strategy = cb.get_strategy("none-raise")
    assert tokenizer.encode("hello", strategy=strategy) == [259]
    with pytest.raises(cb.DisallowedSpecialTokenError):
        tokenizer.encode(ENDOFTEXT, strategy=strategy)


def test_custom_strategy(tokenizer):
    strategy = cb.get_strategy("custom", allowed_subset={FIM_PREFIX})
    policy = strategy.handle(tokenizer.special_tokens)
    assert policy.allowed == frozenset({FIM_PREFIX})
    assert policy.disallowed == frozenset({ENDOFTEXT})
    assert tokenizer.encode(FIM_PREFIX, strategy=strategy) == [FIM_PREFIX_ID]
    with pytest.raises(cb.DisallowedSpecialTokenError):
        tokenizer.count_tokens(ENDOFTEXT, strategy=strategy)


def test_strategy_errors():
    with pytest.raises(cb.StrategyError):
        cb.get_strategy("bogus")
    with pytest.raises(cb.StrategyError):
        cb.get_strategy("custom")
    assert cb.list_strategies() == ["all", "none-raise", "custom"]


def test_plain_string_sets_are_rejected(tokenizer):
    """A single special string must be wrapped in a set; only "all" is accepted bare."""
    with pytest.raises(cb.SpecialTokenError) as exc_info:
        tokenizer.encode(ENDOFTEXT, allowed_special=ENDOFTEXT)
    assert exc_info.value.token == ENDOFTEXT
    with pytest.raises(cb.SpecialTokenError):
        tokenizer.count_tokens("hello", disallowed_special="none")
    assert tokenizer.encode(ENDOFTEXT, allowed_special={ENDOFTEXT}) == [ENDOFTEXT_ID]
