"""Domain models for parsed stock / production reports."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple


@dataclass(slots=True, frozen=True)
class Token:
    """Whitespace-delimited piece of a line with its character offsets."""

    text: str
    start: int
    end: int

    @property
    def center(self) -> float:
        return self.start + len(self.text) / 2


@dataclass(slots=True, frozen=True)
class HeaderLayout:
    """Size header row: the ``Qtde`` or ``GRADE`` marker and the size tokens after it.

    ``Qtde`` headers are aligned by column; ``GRADE`` headers are not
    positional and may declare a trailing ``TOTAL`` column.
    """

    marker: Token
    sizes: Tuple[Token, ...] = ()
    positional: bool = True
    trailing_total: bool = False

    @property
    def labels(self) -> List[str]:
        return [token.text for token in self.sizes]


class ParseState(str, Enum):
    SEEKING_HEADER = "seeking_header"
    AWAITING_REF = "awaiting_ref"
    HAVE_REF = "have_ref"


@dataclass(slots=True)
class VariationSnapshot:
    """Per-size quantities of one product variation (``<product>.<suffix>``)."""

    ref: str
    grade: List[str]
    tamanhos: Dict[str, int]
    total: int

    @property
    def product_code(self) -> str:
        return product_code_for(self.ref)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "ref": self.ref,
            "grade": list(self.grade),
            "tamanhos": dict(self.tamanhos),
            "total": self.total,
        }


@dataclass(slots=True)
class ProductSnapshot:
    """All variations sharing a product code, plus grade divergence warnings."""

    product_code: str
    grade: List[str]
    variations: List[VariationSnapshot] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)

    def variation(self, ref: str) -> Optional[VariationSnapshot]:
        for variation in self.variations:
            if variation.ref == ref:
                return variation
        return None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "productCode": self.product_code,
            "grade": list(self.grade),
            "variations": [variation.to_dict() for variation in self.variations],
            "warnings": list(self.warnings),
        }


def product_code_for(ref: str) -> str:
    """Return the prefix before the first '.', or the whole ref when there is none."""
    prefix = ref.split(".", 1)[0]
    return prefix or ref
