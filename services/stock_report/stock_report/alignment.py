"""Quantity-to-size alignment shared by the line and grid front ends.

Both front ends reduce a data occurrence to an ``Alignment`` (size -> value
plus the grand total that was set aside, if any) and build the
``VariationSnapshot`` through ``build_variation`` so the output contract is
enforced in one place:

* line mode aligns by column distance between numbers and header labels;
* grid mode aligns by ordinal position with a count check for the total.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence, Tuple

from .grade import UNIQUE_SIZE, normalize_grade
from .models import HeaderLayout, Token, VariationSnapshot

__all__ = [
    "Alignment",
    "NumberToken",
    "align_by_position",
    "align_by_count",
    "build_variation",
]

NumberToken = Tuple[Token, int]


@dataclass(slots=True, frozen=True)
class Alignment:
    grade: Tuple[str, ...]
    tamanhos: Dict[str, int]
    discarded_total: Optional[int] = None

    @property
    def total(self) -> int:
        return sum(self.tamanhos.values())


def _is_grand_total(layout: HeaderLayout, numbers: Sequence[NumberToken]) -> bool:
    if len(numbers) < 2:
        return False
    if len(numbers) > len(layout.sizes):
        return True
    first_center = numbers[0][0].center
    to_marker = abs(first_center - layout.marker.center)
    to_first_size = abs(first_center - layout.sizes[0].center)
    return to_marker < to_first_size


def align_by_position(layout: HeaderLayout, numbers: Sequence[NumberToken]) -> Optional[Alignment]:
    """Greedy monotonic nearest-column alignment of numbers to header sizes.

    Each number may only take a label to the right of the previous match and
    must leave one label for every number still to come; among those the
    closest column wins, ties going to the leftmost label.
    """
    if not numbers:
        return None

    if not layout.sizes:
        return Alignment(grade=(UNIQUE_SIZE,), tamanhos={UNIQUE_SIZE: numbers[0][1]})

    labels = normalize_grade(layout.labels)
    remaining = list(numbers)
    discarded: Optional[int] = None
    if _is_grand_total(layout, remaining):
        discarded = remaining.pop(0)[1]
    remaining = remaining[: len(layout.sizes)]

    tamanhos = {label: 0 for label in labels}
    size_count = len(layout.sizes)
    last_matched = -1
    for index, (token, value) in enumerate(remaining):
        still_to_come = len(remaining) - index - 1
        best: Optional[int] = None
        best_distance = 0.0
        for candidate in range(last_matched + 1, size_count - still_to_come):
            distance = abs(layout.sizes[candidate].center - token.center)
            if best is None or distance < best_distance:
                best, best_distance = candidate, distance
        if best is None:  # pragma: no cover - the window is never empty
            break
        tamanhos[labels[best]] = value
        last_matched = best

    return Alignment(grade=tuple(labels), tamanhos=tamanhos, discarded_total=discarded)


def align_by_count(grade: Sequence[str], values: Sequence[int], trailing_total: bool = False) -> Optional[Alignment]:
    """Ordinal alignment for grid rows.

    One value more than the grade holds is the row total: the leading value is
    dropped unless the grade row declared the total column after the sizes.
    Remaining mismatches are padded with zeros or truncated.
    """
    if not values:
        return None
    labels = normalize_grade(grade)
    if not labels:
        if len(values) != 1:
            return None
        return Alignment(grade=(UNIQUE_SIZE,), tamanhos={UNIQUE_SIZE: values[0]})

    working: List[int] = list(values)
    discarded: Optional[int] = None
    if len(working) == len(labels) + 1:
        discarded = working.pop() if trailing_total else working.pop(0)
    working = (working + [0] * len(labels))[: len(labels)]

    return Alignment(
        grade=tuple(labels),
        tamanhos=dict(zip(labels, working)),
        discarded_total=discarded,
    )


def build_variation(ref: str, alignment: Alignment) -> VariationSnapshot:
    grade = list(alignment.grade)
    tamanhos = {label: alignment.tamanhos.get(label, 0) for label in grade}
    return VariationSnapshot(ref=ref, grade=grade, tamanhos=tamanhos, total=sum(tamanhos.values()))
