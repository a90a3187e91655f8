"""Low-level helpers shared by the repair stages and the validator.

The stages never rewrite anything inside a double-quoted string literal, so
they all need the same notion of where such a literal ends.
"""

from __future__ import annotations


def skip_string(text: str, start: int) -> tuple[int, bool]:
    """Return the index just past the double-quoted literal opening at ``start``.

    The second element is False when the literal runs to the end of the text
    without a closing quote.
    """
    n = len(text)
    k = start + 1
    while k < n:
        ch = text[k]
        if ch == "\\":
            k += 2
            continue
        if ch == '"':
            return k + 1, True
        k += 1
    return n, False


def skip_whitespace(text: str, start: int) -> int:
    n = len(text)
    k = start
    while k < n and text[k].isspace():
        k += 1
    return k


def skip_whitespace_backwards(text: str, end: int) -> tuple[int, bool]:
    """Walk left from ``end`` (exclusive) over whitespace.

    Returns the index of the previous non-whitespace character (-1 at the
    start of the text) and whether a line break was crossed on the way.
    """
    k = end - 1
    crossed_newline = False
    while k >= 0 and text[k].isspace():
        if text[k] in "\r\n":
            crossed_newline = True
        k -= 1
    return k, crossed_newline


def find_outside_strings(text: str, token: str) -> int | None:
    """Offset of the first occurrence of ``token`` that is not inside a string."""
    n = len(text)
    k = 0
    while k < n:
        if text[k] == '"':
            k, _ = skip_string(text, k)
            continue
        if text.startswith(token, k):
            return k
        k += 1
    return None


def line_and_column(text: str, offset: int) -> tuple[int, int]:
    """1-based line and column for ``offset``, counted the way ``json`` does."""
    line = text.count("\n", 0, offset) + 1
    if line == 1:
        column = offset + 1
    else:
        column = offset - text.rindex("\n", 0, offset)
    return line, column
