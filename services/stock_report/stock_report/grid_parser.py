"""Grid-mode parser for spreadsheet rows and page rows rebuilt from PDF words.

Two layouts are recognized:

* block layout: a reference row, a grade row (``Grade PP P M``) and an
  ``A PRODUZIR`` row below it;
* inline layout: a ``REFTAM PP P M G TOTAL`` caption followed by one row per
  reference carrying its quantities.

Cells are flattened into (cell index, word) pairs so a quantity row split
into one word per cell behaves like one holding the whole line in a cell.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, List, Optional, Sequence, Tuple

from .aggregator import VariationAccumulator, aggregate
from .alignment import align_by_count, build_variation
from .grade import is_size_label, is_total_label, is_unique_size, normalize_grade
from .logging import get_logger
from .models import ProductSnapshot, VariationSnapshot
from .numeral import cell_text, parse_quantity
from .tokenizer import clean_token, split_words

__all__ = [
    "GridGrade",
    "find_reference",
    "resolve_grade",
    "extract_quantities",
    "row_variations",
    "parse_rows",
]

logger = get_logger(__name__)

GRADE_LOOKAHEAD = 4
GRADE_LOOKBEHIND = 2
QUANTITY_LOOKAHEAD = 5

GRADE_MARKERS = {"GRADE", "QTDE", "QTD", "REFTAM", "TAM", "TAMANHO", "TAMANHOS"}
REFERENCE_PATTERN = re.compile(r"^(\d{3,})\.([A-Z0-9]{1,4})$")

Word = Tuple[int, str]


@dataclass(slots=True, frozen=True)
class GridGrade:
    labels: Tuple[str, ...]
    trailing_total: bool = False


def _row_words(row: Sequence[Any]) -> List[Word]:
    words: List[Word] = []
    for index, cell in enumerate(row or ()):
        for word in split_words(cell_text(cell)):
            words.append((index, word))
    return words


def _reference_in(word: str) -> Optional[str]:
    candidate = word.strip(" :;,-()[]").upper()
    match = REFERENCE_PATTERN.match(candidate)
    if not match:
        return None
    suffix = match.group(2)
    if suffix.startswith("TOT") or is_total_label(suffix):
        return None
    if suffix.isdigit() and (len(suffix) < 2 or set(suffix) == {"0"}):
        return None
    return candidate


def find_reference(words: Sequence[Word]) -> Optional[Tuple[int, str]]:
    """Return (word position, ref) of the first reference-shaped word in a row."""
    for position, (_, word) in enumerate(words):
        ref = _reference_in(word)
        if ref:
            return position, ref
    return None


def _produce_marker_end(words: Sequence[Word]) -> Optional[int]:
    """Word position just after an 'A PRODUZIR' label, if the row has one."""
    for position, (_, word) in enumerate(words):
        cleaned = clean_token(word)
        if cleaned == "APRODUZIR":
            return position + 1
        if cleaned == "PRODUZIR" and position > 0 and clean_token(words[position - 1][1]) == "A":
            return position + 1
    return None


def _grade_from_words(words: Sequence[str]) -> Optional[GridGrade]:
    cleaned = [clean_token(word) for word in words]
    start = 0
    while start < len(cleaned) and not cleaned[start]:
        start += 1
    has_marker = start < len(cleaned) and cleaned[start] in GRADE_MARKERS
    if has_marker:
        start += 1

    labels: List[str] = []
    trailing_total = False
    alphabetic = False
    for token in cleaned[start:]:
        if not token:
            continue
        if is_total_label(token):
            trailing_total = bool(labels)
            continue
        if is_size_label(token):
            if is_unique_size(token):
                return GridGrade(labels=(token,))
            labels.append(token)
            alphabetic = alphabetic or not token.isdigit()
            continue
        if not has_marker:
            return None
    if not labels:
        return None
    if not has_marker and not alphabetic:
        # bare numbers are quantity rows, not sizes
        return None
    return GridGrade(labels=tuple(normalize_grade(labels)), trailing_total=trailing_total)


def _is_reference_row(words: Sequence[Word]) -> bool:
    return find_reference(words) is not None


def resolve_grade(rows_words: Sequence[Sequence[Word]], index: int, ref_position: int) -> Optional[GridGrade]:
    """Grade for the reference found at rows_words[index][ref_position].

    Same row first (only after a grade marker or with letter sizes), then the
    rows below until another reference or quantity row, then the rows above.
    """
    same_row = [word for _, word in rows_words[index][ref_position + 1:]]
    grade = _grade_from_words(same_row)
    if grade:
        return grade

    for offset in range(1, GRADE_LOOKAHEAD + 1):
        row_index = index + offset
        if row_index >= len(rows_words):
            break
        words = rows_words[row_index]
        if _is_reference_row(words) or _produce_marker_end(words) is not None:
            break
        grade = _grade_from_words([word for _, word in words])
        if grade:
            return grade

    remaining = GRADE_LOOKBEHIND
    row_index = index - 1
    while remaining > 0 and row_index >= 0:
        words = rows_words[row_index]
        row_index -= 1
        if not words:
            continue
        if _is_reference_row(words):
            # sibling rows of the same inline table
            continue
        remaining -= 1
        grade = _grade_from_words([word for _, word in words])
        if grade:
            return grade
    return None


def _numbers(words: Sequence[Word]) -> List[int]:
    values: List[int] = []
    for _, word in words:
        value = parse_quantity(word)
        if value is not None:
            values.append(value)
    return values


def extract_quantities(rows_words: Sequence[Sequence[Word]], index: int, ref_position: int) -> List[int]:
    """Numbers after an 'A PRODUZIR' label (same row or below), else numbers after the ref."""
    for offset in range(0, QUANTITY_LOOKAHEAD + 1):
        row_index = index + offset
        if row_index >= len(rows_words):
            break
        words = rows_words[row_index]
        if offset and _is_reference_row(words):
            break
        marker_end = _produce_marker_end(words)
        if marker_end is not None:
            return _numbers(words[marker_end:])
    return _numbers(rows_words[index][ref_position + 1:])


def row_variations(rows: Sequence[Sequence[Any]]) -> List[VariationSnapshot]:
    rows_words = [_row_words(row) for row in rows]
    variations: List[VariationSnapshot] = []
    for index, words in enumerate(rows_words):
        found = find_reference(words)
        if not found:
            continue
        position, ref = found
        grade = resolve_grade(rows_words, index, position)
        values = extract_quantities(rows_words, index, position)
        if grade is None:
            alignment = align_by_count((), values)
        else:
            alignment = align_by_count(grade.labels, values, trailing_total=grade.trailing_total)
        if alignment is None:
            continue
        variations.append(build_variation(ref, alignment))
    return variations


def parse_rows(rows: Sequence[Sequence[Any]], product_order: Optional[Sequence[str]] = None) -> List[ProductSnapshot]:
    """Parse a cell grid into product snapshots. Never raises on report content."""
    accumulator = VariationAccumulator()
    for variation in row_variations(rows or ()):
        accumulator.add(variation)
    snapshots = aggregate(accumulator.variations(), product_order)
    logger.debug("grid_report_parsed", rows=len(rows or ()), products=len(snapshots), variations=len(accumulator))
    return snapshots
