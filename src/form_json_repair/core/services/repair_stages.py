"""
Text-to-text repair stages for operator-typed JSON.

Each stage is a pure, total function: it never raises, only ever inserts or
removes ASCII punctuation, and leaves the content of double-quoted string
literals alone. Stages are single-pass scanners that track whether they are
inside a string literal, so quotes and commas that are part of a value are
never mistaken for structure.
"""

from __future__ import annotations

import re
from collections.abc import Callable
from dataclasses import dataclass

from form_json_repair.core.services.text_scanner import (
    skip_string,
    skip_whitespace,
    skip_whitespace_backwards,
)

# Characters after which a single quote can only be opening a string
_QUOTE_OPENERS = "{[,:"
# Characters that may follow the single quote that closes a string
_QUOTE_CLOSERS = ",:}]"
_CLOSING_BRACKETS = "}]"

_IDENTIFIER_KEY = re.compile(r'"[A-Za-z_][A-Za-z0-9_]*"')
_BARE_SCALAR = re.compile(
    r"-?(?:0|[1-9][0-9]*)(?:\.[0-9]+)?(?:[eE][+-]?[0-9]+)?|true|false|null"
)
_SCALAR_START = "-0123456789tfn"
_WORD_CHARS = "_.+-"


@dataclass(frozen=True)
class Stage:
    """A named repair transformation."""

    name: str
    description: str
    transform: Callable[[str], str]

    def __call__(self, text: str) -> str:
        return self.transform(text)


# --- NormalizeQuotes ---------------------------------------------------------


def _opens_single_quoted(text: str, index: int) -> bool:
    prev, crossed_newline = skip_whitespace_backwards(text, index)
    if prev < 0:
        return True
    return text[prev] in _QUOTE_OPENERS or crossed_newline


def _find_closing_single_quote(text: str, start: int) -> int | None:
    n = len(text)
    k = start
    while k < n:
        ch = text[k]
        if ch == "\\":
            k += 2
            continue
        if ch in "\r\n":
            # JSON strings cannot span lines; treat the quote as unpaired
            return None
        if ch == "'":
            after = k + 1
            while after < n and text[after] in " \t":
                after += 1
            if after >= n or text[after] in _QUOTE_CLOSERS or text[after] in "\r\n":
                return k
        k += 1
    return None


def _requote(content: str) -> str:
    out: list[str] = []
    k = 0
    n = len(content)
    while k < n:
        ch = content[k]
        if ch == "\\" and k + 1 < n:
            nxt = content[k + 1]
            # \' is not a JSON escape; inside double quotes it is just '
            out.append("'" if nxt == "'" else ch + nxt)
            k += 2
            continue
        if ch == '"':
            out.append('\\"')
        else:
            out.append(ch)
        k += 1
    return "".join(out)


def normalize_quotes(text: str) -> str:
    """Rewrite single-quote string delimiters into double quotes.

    A single quote opens a string only at the start of the text, at the start
    of a line, or after ``{ [ , :``; it closes one only before ``, : } ]``, a
    line break or the end of the text. Any other single quote is apostrophe
    content and is kept as typed.
    """
    out: list[str] = []
    n = len(text)
    i = 0
    while i < n:
        ch = text[i]
        if ch == '"':
            end, _ = skip_string(text, i)
            out.append(text[i:end])
            i = end
            continue
        if ch == "'" and _opens_single_quoted(text, i):
            close = _find_closing_single_quote(text, i + 1)
            if close is not None:
                out.append('"')
                out.append(_requote(text[i + 1 : close]))
                out.append('"')
                i = close + 1
                continue
        out.append(ch)
        i += 1
    return "".join(out)


# --- StripTrailingCommas -----------------------------------------------------


def _strip_trailing_commas_once(text: str) -> str:
    out: list[str] = []
    n = len(text)
    i = 0
    while i < n:
        ch = text[i]
        if ch == '"':
            end, _ = skip_string(text, i)
            out.append(text[i:end])
            i = end
            continue
        if ch == ",":
            nxt = skip_whitespace(text, i + 1)
            if nxt < n and text[nxt] in _CLOSING_BRACKETS:
                i = nxt
                continue
            if nxt >= n:
                # last non-whitespace character of the text
                out.append(text[i + 1 :])
                break
        out.append(ch)
        i += 1
    return "".join(out)


def strip_trailing_commas(text: str) -> str:
    """Remove commas that directly precede ``}``/``]`` or end the text.

    Runs to a fixed point because removing one comma can expose another
    (``[1,,]``); every pass that changes anything removes at least one comma,
    so the loop is bounded by the number of commas in the text.
    """
    current = text
    while True:
        stripped = _strip_trailing_commas_once(current)
        if stripped == current:
            return current
        current = stripped


# --- InsertMissingCommas -----------------------------------------------------


def _starts_key(text: str, index: int) -> bool:
    return _IDENTIFIER_KEY.match(text, index) is not None


def _scalar_at(text: str, index: int) -> re.Match[str] | None:
    if index > 0 and (text[index - 1].isalnum() or text[index - 1] in _WORD_CHARS):
        return None
    match = _BARE_SCALAR.match(text, index)
    if match is None:
        return None
    end = match.end()
    if end < len(text) and (text[end].isalnum() or text[end] in _WORD_CHARS):
        return None
    return match


def insert_missing_commas(text: str) -> str:
    """Insert the comma an operator forgot between two members.

    Recognised transitions, all outside string literals:
    a closing quote before a key or ``}``; a closing ``}``/``]`` before a key
    or ``{``; a bare number/true/false/null before a key.
    """
    out: list[str] = []
    n = len(text)
    i = 0
    while i < n:
        ch = text[i]
        if ch == '"':
            end, terminated = skip_string(text, i)
            out.append(text[i:end])
            i = end
            if terminated:
                nxt = skip_whitespace(text, i)
                if nxt < n and (text[nxt] == "}" or _starts_key(text, nxt)):
                    out.append(",")
            continue
        if ch in _CLOSING_BRACKETS:
            out.append(ch)
            i += 1
            nxt = skip_whitespace(text, i)
            if nxt < n and (text[nxt] == "{" or _starts_key(text, nxt)):
                out.append(",")
            continue
        if ch in _SCALAR_START:
            match = _scalar_at(text, i)
            if match is not None:
                out.append(match.group())
                i = match.end()
                nxt = skip_whitespace(text, i)
                if nxt < n and _starts_key(text, nxt):
                    out.append(",")
                continue
        out.append(ch)
        i += 1
    return "".join(out)


NORMALIZE_QUOTES = Stage(
    name="NormalizeQuotes",
    description="Single-quoted keys and strings are rewritten with double quotes",
    transform=normalize_quotes,
)
STRIP_TRAILING_COMMAS = Stage(
    name="StripTrailingCommas",
    description="Commas before a closing bracket or at the end are removed",
    transform=strip_trailing_commas,
)
INSERT_MISSING_COMMAS = Stage(
    name="InsertMissingCommas",
    description="Commas are inserted between members typed on separate lines",
    transform=insert_missing_commas,
)

STAGES: dict[str, Stage] = {
    stage.name: stage
    for stage in (NORMALIZE_QUOTES, STRIP_TRAILING_COMMAS, INSERT_MISSING_COMMAS)
}
