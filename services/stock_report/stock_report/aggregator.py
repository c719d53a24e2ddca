"""Group parsed variations into per-product snapshots."""

from __future__ import annotations

from typing import Dict, Iterable, List, Optional, Sequence

from .grade import infer_grade
from .logging import get_logger
from .models import ProductSnapshot, VariationSnapshot, product_code_for
from .tokenizer import clean_token

__all__ = ["VariationAccumulator", "aggregate", "apply_product_order", "grade_warning"]

logger = get_logger(__name__)


class VariationAccumulator:
    """Collects variations keyed by ref; a repeated ref replaces the earlier entry in place."""

    def __init__(self) -> None:
        self._by_ref: Dict[str, VariationSnapshot] = {}

    def add(self, variation: VariationSnapshot) -> bool:
        """Store a variation. Returns True when it replaced an existing one."""
        replaced = variation.ref in self._by_ref
        if replaced:
            logger.debug("variation_replaced", ref=variation.ref)
        self._by_ref[variation.ref] = variation
        return replaced

    def __len__(self) -> int:
        return len(self._by_ref)

    def __contains__(self, ref: object) -> bool:
        return ref in self._by_ref

    def variations(self) -> List[VariationSnapshot]:
        return list(self._by_ref.values())


def grade_warning(ref: str, grade: Sequence[str], kept: Sequence[str]) -> str:
    return (
        f"Grade divergente detectada para {ref}: [{', '.join(grade)}] "
        f"(mantida grade original [{', '.join(kept)}])"
    )


def aggregate(
    variations: Iterable[VariationSnapshot],
    product_order: Optional[Sequence[str]] = None,
) -> List[ProductSnapshot]:
    """Build one ProductSnapshot per product code, in first-seen order.

    The product grade is the grade of its first variation. Later variations
    with a different grade keep their own grade and add a warning.
    """
    grouped: Dict[str, List[VariationSnapshot]] = {}
    for variation in variations:
        grouped.setdefault(product_code_for(variation.ref), []).append(variation)

    snapshots: List[ProductSnapshot] = []
    for product_code, members in grouped.items():
        grade = list(members[0].grade)
        if not grade:
            grade = infer_grade(key for member in members for key in member.tamanhos)
        warnings: List[str] = []
        for member in members[1:]:
            if list(member.grade) != grade:
                logger.warning("grade_divergence", ref=member.ref, grade=member.grade, kept=grade)
                warnings.append(grade_warning(member.ref, member.grade, grade))
        snapshots.append(
            ProductSnapshot(
                product_code=product_code,
                grade=grade,
                variations=list(members),
                warnings=warnings,
            )
        )

    return apply_product_order(snapshots, product_order)


def apply_product_order(
    snapshots: List[ProductSnapshot],
    product_order: Optional[Sequence[str]] = None,
) -> List[ProductSnapshot]:
    """Sort listed product codes first (in list order); unlisted keep discovery order."""
    if not product_order:
        return snapshots
    ranks: Dict[str, int] = {}
    for index, code in enumerate(product_order):
        ranks.setdefault(clean_token(str(code)), index)
    listed = len(product_order)

    def rank(snapshot: ProductSnapshot) -> int:
        return ranks.get(clean_token(snapshot.product_code), listed)

    return sorted(snapshots, key=rank)
