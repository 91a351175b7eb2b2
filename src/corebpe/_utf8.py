"""
Regroup merge fragments into chunks that decode as whole UTF-8 text.
"""

from collections.abc import Iterable, Iterator


def group_utf8_safe(fragments: Iterable[bytes]) -> Iterator[tuple[str, int]]:
    """
    Join consecutive fragments until the buffered bytes are valid UTF-8.

    Yields ``(text, n_fragments)`` for every group. Fragments that split a
    multi-byte character are held back and emitted together with the
    fragments completing it. A trailing buffer that never becomes valid is
    emitted anyway: surrogate code points keep their bytes, other invalid
    bytes are replaced.

    :param fragments: Raw byte fragments of one piece, in order.
    """
    buf = bytearray()
    count = 0
    for frag in fragments:
        buf += frag
        count += 1
        try:
            text = buf.decode("utf-8")
        except UnicodeDecodeError:
            continue
        yield text, count
        buf.clear()
        count = 0

    # only reachable with malformed input; lone surrogates keep their bytes
    if buf:
        try:
            text = buf.decode("utf-8", errors="surrogatepass")
        except UnicodeDecodeError:
            text = buf.decode("utf-8", errors="replace")
        yield text, count
