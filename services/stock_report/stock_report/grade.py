"""Size label (grade) normalization and inference."""

from __future__ import annotations

import re
from typing import Iterable, List

from .tokenizer import clean_token

__all__ = [
    "UNIQUE_SIZE",
    "normalize_label",
    "normalize_grade",
    "infer_grade",
    "is_size_label",
    "is_unique_size",
    "is_total_label",
]

# Reserved one-element grade for items produced in a single size
UNIQUE_SIZE = "UN"

LETTER_SIZES = {
    "PP", "P", "M", "G", "GG", "XG", "EG", "EGG", "XGG", "G1", "G2", "G3", "G4",
    "XS", "S", "L", "XL", "XXL",
}
UNIQUE_SIZE_WORDS = {"U", "UN", "UNI", "UNICA", "UNICO", "TU"}

_NUMERIC_SIZE = re.compile(r"^\d{1,3}$")
_TOTAL_WORDS = {"TOT", "TOTAL", "TOTAIS", "TOTALGERAL", "SUBTOTAL", "TG"}


def normalize_label(label: str) -> str:
    """Uppercase a size label; 1-2 digit numbers are zero-padded to two digits."""
    text = str(label).strip().upper()
    if text.isdigit() and len(text) < 2:
        return text.zfill(2)
    return text


def normalize_grade(labels: Iterable[str]) -> List[str]:
    """Normalize labels and drop duplicates, keeping first-seen order."""
    seen = set()
    grade: List[str] = []
    for label in labels:
        normalized = normalize_label(label)
        if not normalized or normalized in seen:
            continue
        seen.add(normalized)
        grade.append(normalized)
    return grade


def infer_grade(keys: Iterable[str]) -> List[str]:
    """Build a grade from size keys seen in the data, or the unique-size grade."""
    grade = normalize_grade(keys)
    return grade or [UNIQUE_SIZE]


def is_size_label(word: str) -> bool:
    cleaned = clean_token(word)
    if not cleaned:
        return False
    return cleaned in LETTER_SIZES or cleaned in UNIQUE_SIZE_WORDS or bool(_NUMERIC_SIZE.match(cleaned))


def is_unique_size(word: str) -> bool:
    return clean_token(word) in UNIQUE_SIZE_WORDS


def is_total_label(word: str) -> bool:
    cleaned = clean_token(word)
    if not cleaned:
        return False
    return cleaned in _TOTAL_WORDS or cleaned.startswith("TOTAL")
