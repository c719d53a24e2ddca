"""Line splitting and position-aware tokenization of extracted report text."""

from __future__ import annotations

import re
import unicodedata
from typing import List

from .models import Token

__all__ = [
    "normalize_text",
    "split_lines",
    "tokenize_line",
    "split_words",
    "clean_token",
]

# Map a few visually-similar punctuation marks to ASCII for stability
PUNCT_MAP = {
    "\u2018": "'", "\u2019": "'", "\u201B": "'",
    "\u201C": '"', "\u201D": '"',
    "\u2010": "-", "\u2011": "-",
    "\u2013": "-", "\u2014": "-", "\u2212": "-",  # en/em/fraction minus
    "\u00B7": ".", "\u2027": ".",                 # middle dot variants
}

SPACE_CHARS = {
    "\u00A0",  # NBSP
    "\u2007",  # Figure space
    "\u202F",  # Narrow NBSP
    "\u2009",  # Thin space
    "\u2008",  # Punctuation space
    "\u200A",  # Hair space
}

ZERO_WIDTH = {"\u200B", "\u200C", "\u200D", "\uFEFF", "\u00AD"}  # ZWSP/ZWNJ/ZWJ/BOM/soft hyphen

_LINE_BREAK = re.compile(r"\r\n|\r|\n")
_TOKEN = re.compile(r"\S+")
_NON_ALNUM = re.compile(r"[^0-9A-Z]")


def normalize_text(text: str) -> str:
    """Character-level cleanup that keeps column offsets intact.

    Unlike NFKC normalization this never merges or expands characters, so a
    size label printed above a quantity stays above it after normalization.
    Only zero-width characters are removed.
    """
    if not text:
        return ""
    out = []
    for ch in text:
        if ch in ZERO_WIDTH:
            continue
        if ch in SPACE_CHARS:
            out.append(" ")
            continue
        out.append(PUNCT_MAP.get(ch, ch))
    return "".join(out)


def split_lines(text: str) -> List[str]:
    """Split text into lines, keeping leading whitespace (column positions)."""
    if not isinstance(text, str):
        return []
    normalized = normalize_text(text)
    return [line.expandtabs(8).rstrip() for line in _LINE_BREAK.split(normalized)]


def tokenize_line(line: str) -> List[Token]:
    if not line:
        return []
    return [Token(m.group(0), m.start(), m.end()) for m in _TOKEN.finditer(line)]


def split_words(text: str) -> List[str]:
    if not text:
        return []
    return _TOKEN.findall(normalize_text(text))


def clean_token(text: str) -> str:
    """Strip accents and anything but letters/digits, uppercased ('Grade:' -> 'GRADE')."""
    if not isinstance(text, str):
        return ""
    decomposed = unicodedata.normalize("NFD", text)
    stripped = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    return _NON_ALNUM.sub("", stripped.upper())
