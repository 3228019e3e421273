"""Text normalizers applied before fingerprinting.

Two stages:

- ``apply_normalizers`` cleans text line by line and keeps line structure, so
  that match locations can be reported as line ranges.
- ``apply_aggressive`` collapses a block of normalized lines into a single
  matching-ready string (comment syntax, case, copyright lines, punctuation
  and whitespace all removed).

Every transform is a pure ``str -> str`` function and never raises.
"""

from __future__ import annotations

import re
import unicodedata
from collections import Counter
from collections.abc import Callable

# Fraction of non-blank lines that must share a leading token before it is
# treated as comment syntax and stripped.
COMMON_TOKEN_THRESHOLD = 0.8

_URL_RE = re.compile(r"https?://\S+")
_HORIZONTAL_WS_RE = re.compile(
    r"[ \t\u00a0\u1680\u2000-\u200a\u202f\u205f\u3000\\/|\u2044]+"
)
_QUOTES_RE = re.compile(r"'{2,}")
_DASHES_RE = re.compile(r"-{2,}")
_CONNECTORS_RE = re.compile(r"_{2,}")
_VERTICAL_WS_RE = re.compile(r"\n{3,}")
_COPYRIGHT_RE = re.compile(r"^[ \t]*(?:copyright\b|\(c\)).*$", re.MULTILINE)
_PUNCTUATION_RE = re.compile(r"[^\w\s]+")
_TITLE_LINE_RE = re.compile(r"\A[^\n]*\blicense\b(?: version \S+)?\n\n")
_WHITESPACE_RE = re.compile(r"\s+")

_QUOTE_CHARS = frozenset("\"'`´")
_COPYRIGHT_CHARS = frozenset("©Ⓒⓒ")


# ---------------------------------------------------------------------------
# Line normalizers
# ---------------------------------------------------------------------------


def normalize_unicode(text: str) -> str:
    return unicodedata.normalize("NFC", text)


def blackbox_urls(text: str) -> str:
    """Replace URLs with a fixed token; links vary between copies of a text."""
    return _URL_RE.sub("http://blackboxed", text)


def normalize_punctuation(text: str) -> str:
    """Fold quote, dash and connector variants onto one ASCII form each.

    Runs of the folded character are collapsed (``''`` -> ``'``).
    """
    out: list[str] = []
    for ch in text:
        if ch in _COPYRIGHT_CHARS:
            out.append("(c)")
            continue
        category = unicodedata.category(ch)
        if ch in _QUOTE_CHARS or category in ("Pi", "Pf"):
            out.append("'")
        elif category == "Pd":
            out.append("-")
        elif category == "Pc":
            out.append("_")
        else:
            out.append(ch)
    folded = "".join(out)
    folded = _QUOTES_RE.sub("'", folded)
    folded = _DASHES_RE.sub("-", folded)
    return _CONNECTORS_RE.sub("_", folded)


def _is_kept(ch: str) -> bool:
    if ch.isalnum() or ch == "_" or ch.isspace():
        return True
    category = unicodedata.category(ch)
    # combining marks belong to the word they decorate
    return category[0] in ("P", "M")


def remove_junk(text: str) -> str:
    """Drop symbols, control characters and anything else that is not a word
    character, whitespace or punctuation."""
    return "".join(ch for ch in text if _is_kept(ch))


def normalize_horizontal_whitespace(text: str) -> str:
    """Collapse spaces, tabs, Unicode spaces and slash/pipe separators."""
    return _HORIZONTAL_WS_RE.sub(" ", text)


def trim(text: str) -> str:
    return text.strip()


_LINE_NORMALIZERS: tuple[Callable[[str], str], ...] = (
    normalize_unicode,
    blackbox_urls,
    normalize_punctuation,
    remove_junk,
    normalize_horizontal_whitespace,
    trim,
)


def apply_normalizers(text: str) -> list[str]:
    """Split ``text`` into lines and normalize each one.

    CRLF and bare CR are treated as line breaks. The result always holds at
    least one line; empty input yields ``[""]``.
    """
    text = text.replace("\r\n", "\n").replace("\r", "\n")
    lines: list[str] = []
    for line in text.split("\n"):
        for normalizer in _LINE_NORMALIZERS:
            line = normalizer(line)
        lines.append(line)
    return lines


# ---------------------------------------------------------------------------
# Aggressive normalizers
# ---------------------------------------------------------------------------


def _leading_token(line: str) -> str | None:
    parts = line.split(None, 1)
    if not parts:
        return None
    token = parts[0]
    # only punctuation-only tokens look like comment syntax
    if any(ch.isalnum() for ch in token):
        return None
    return token


def remove_common_tokens(text: str) -> str:
    """Strip a comment prefix (``#``, ``*``, ``--``, ...) shared by most lines.

    The most common non-alphanumeric leading token is removed when it starts
    more than ``COMMON_TOKEN_THRESHOLD`` of the non-blank lines and at least
    two of them.
    """
    lines = text.split("\n")
    non_blank = [line for line in lines if line.strip()]
    if len(non_blank) < 2:
        return text

    counts: Counter[str] = Counter()
    for line in non_blank:
        token = _leading_token(line)
        if token is not None:
            counts[token] += 1
    if not counts:
        return text

    token, count = counts.most_common(1)[0]
    if count < 2 or count / len(non_blank) <= COMMON_TOKEN_THRESHOLD:
        return text

    out: list[str] = []
    for line in lines:
        stripped = line.lstrip()
        if _leading_token(stripped) == token:
            line = stripped[len(token):].lstrip()
        out.append(line)
    return "\n".join(out)


def normalize_vertical_whitespace(text: str) -> str:
    return _VERTICAL_WS_RE.sub("\n\n", text)


def lowercaseify(text: str) -> str:
    return text.lower()


def remove_copyright_statements(text: str) -> str:
    """Blank out copyright lines; holders and years never match a reference."""
    return _COPYRIGHT_RE.sub("", text)


def remove_punctuation(text: str) -> str:
    return _PUNCTUATION_RE.sub("", text)


def remove_title_line(text: str) -> str:
    """Drop a leading ``<name> license [version X]`` title and its blank line."""
    return _TITLE_LINE_RE.sub("", text, count=1)


def collapse_whitespace(text: str) -> str:
    return _WHITESPACE_RE.sub(" ", text).strip()


_AGGRESSIVE: tuple[Callable[[str], str], ...] = (
    remove_common_tokens,
    normalize_vertical_whitespace,
    lowercaseify,
    remove_copyright_statements,
    remove_punctuation,
    remove_title_line,
    collapse_whitespace,
)


def apply_aggressive(text: str) -> str:
    """Reduce a block of normalized lines to a single matching-ready string."""
    for transform in _AGGRESSIVE:
        text = transform(text)
    return text
