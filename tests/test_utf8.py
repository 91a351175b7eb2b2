"""Unit tests for UTF-8 safe fragment grouping."""

from corebpe._utf8 import group_utf8_safe


def test_ascii_fragments_pass_through():
    """Every valid fragment is its own group."""
    assert list(group_utf8_safe([b"he", b"llo"])) == [("he", 1), ("llo", 1)]


def test_split_character_is_regrouped():
    """Fragments splitting a multi-byte character are joined."""
    groups = list(group_utf8_safe([b"n", b"\xc3", b"\xaf", b"ve"]))
    assert groups == [("n", 1), ("ï", 2), ("ve", 1)]


def test_four_byte_character():
    """A 4-byte character split three ways becomes one group of three."""
    emoji = "\U0001f389".encode("utf-8")
    groups = list(group_utf8_safe([emoji[:2], emoji[2:3], emoji[3:]]))
    assert groups == [("\U0001f389", 3)]


def test_counts_and_bytes_are_preserved():
    """Group counts sum to the fragment count and group bytes rebuild the input."""
    frags = [b"caf", b"\xc3", b"\xa9", b" \xe6\x97", b"\xa5", b"!"]
    groups = list(group_utf8_safe(frags))
    assert sum(n for _, n in groups) == len(frags)
    assert "".join(text for text, _ in groups).encode("utf-8") == b"".join(frags)


def test_trailing_surrogate_keeps_its_bytes():
    """A lone surrogate never decodes strictly but is emitted byte for byte."""
    frags = [b"a", b"\xed\xa0", b"\x80"]
    groups = list(group_utf8_safe(frags))
    assert groups == [("a", 1), ("\ud800", 2)]
    rejoined = "".join(text for text, _ in groups).encode("utf-8", errors="surrogatepass")
    assert rejoined == b"".join(frags)


def test_truncated_trailing_sequence_is_emitted():
    """An incomplete trailing sequence is still emitted with its fragment count."""
    groups = list(group_utf8_safe([b"a", b"\xe6\x97"]))
    assert groups[0] == ("a", 1)
    assert groups[1][1] == 1
    assert sum(n for _, n in groups) == 2


def test_no_fragments():
    assert list(group_utf8_safe([])) == []
