"""Line-mode parser for linearized report text (plain text, word documents).

Reports print one size header per block, in one of two styles::

    123.AC    Qtde   04   06   08
    A PRODUZIR:   40    5   15   20

    1234.AZ CAMISA
    GRADE PP P M G GG TOTAL
    A PRODUZIR 5 10 15 20 50 100

With ``Qtde`` the reference sits on the header line or on a later line and
quantities are matched to sizes by column. With ``GRADE`` the reference is
usually on the line before the header and quantities are matched in order.
The parse is a fold of ``advance`` over the lines; the context value is
immutable so one call never shares state with another.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, replace
from typing import Iterable, Iterator, List, Optional, Sequence, Tuple

from .aggregator import VariationAccumulator, aggregate
from .alignment import Alignment, NumberToken, align_by_count, align_by_position, build_variation
from .grade import is_size_label, is_total_label, is_unique_size, normalize_label
from .logging import get_logger
from .models import HeaderLayout, ParseState, ProductSnapshot, Token, VariationSnapshot
from .numeral import parse_quantity
from .tokenizer import clean_token, split_lines, tokenize_line

__all__ = ["LineContext", "IDLE", "advance", "iter_variations", "parse"]

logger = get_logger(__name__)

QUANTITY_MARKERS = {"QTDE", "QTD"}
GRADE_MARKER = "GRADE"
PRODUCE_MARKER = re.compile(r"\bA\s*PRODUZIR\b\s*:?", re.IGNORECASE)
REFERENCE_SHAPE = re.compile(r"^[A-Z0-9][A-Z0-9.]{2,}$")
NUMERIC_REFERENCE = re.compile(r"^\d{3,}\.\d{2,}$")

# Report boilerplate that can show up where a reference is expected
IGNORED_WORDS = {
    "TOTAL", "TOTAIS", "SUBTOTAL", "TOT", "GERAL",
    "PAGINA", "PAG", "PG", "FOLHA", "FL",
    "RELATORIO", "EMISSAO", "EMITIDO", "DATA", "HORA", "USUARIO", "EMPRESA",
    "FILTRO", "FILTROS", "PERIODO", "DE", "ATE", "SITUACAO",
    "ESTOQUE", "SALDO", "PEDIDOS", "PEDIDO", "PRODUCAO", "CORTE", "PRODUZIR",
    "PRODUTO", "PRODUTOS", "REFERENCIA", "REF", "DESCRICAO", "COR", "CORES",
    "GRADE", "QTDE", "QTD", "TAMANHO", "TAMANHOS", "REFTAM",
    "CONTINUA", "OBS", "OBSERVACAO", "OBSERVACOES", "RESUMO",
}

SECTION_DIVIDERS = (
    "TOTAL GERAL",
    "TOTAL DO PRODUTO",
    "TOTAL DA REFERENCIA",
    "TOTAL DO GRUPO",
    "RESUMO",
    "FIM DO RELATORIO",
    "PAGINA",
)

_EDGE_PUNCTUATION = " :;,-()[]"


@dataclass(slots=True, frozen=True)
class LineContext:
    """Parser state between lines.

    ``reference`` is also kept while seeking a header, so a ``GRADE`` header
    can adopt the reference printed just above it.
    """

    state: ParseState = ParseState.SEEKING_HEADER
    layout: Optional[HeaderLayout] = None
    reference: Optional[str] = None


IDLE = LineContext()


def _find_header_marker(tokens: Sequence[Token]) -> Optional[int]:
    for index, token in enumerate(tokens):
        cleaned = clean_token(token.text)
        if cleaned in QUANTITY_MARKERS or cleaned == GRADE_MARKER:
            return index
    return None


def _build_quantity_layout(tokens: Sequence[Token], marker_index: int) -> HeaderLayout:
    sizes: List[Token] = []
    seen = set()
    for token in tokens[marker_index + 1:]:
        label = normalize_label(token.text)
        if label in seen:
            continue
        seen.add(label)
        sizes.append(token)
    return HeaderLayout(marker=tokens[marker_index], sizes=tuple(sizes))


def _build_grade_layout(tokens: Sequence[Token], marker_index: int) -> Optional[HeaderLayout]:
    """Size labels after ``GRADE``; totals are dropped and other words skipped."""
    marker = tokens[marker_index]
    sizes: List[Token] = []
    seen = set()
    trailing_total = False
    for token in tokens[marker_index + 1:]:
        cleaned = clean_token(token.text)
        if is_total_label(cleaned):
            trailing_total = bool(sizes)
            continue
        if not is_size_label(cleaned):
            continue
        label = Token(cleaned, token.start, token.end)
        if is_unique_size(cleaned):
            return HeaderLayout(marker=marker, sizes=(label,), positional=False)
        if normalize_label(cleaned) in seen:
            continue
        seen.add(normalize_label(cleaned))
        sizes.append(label)
    if not sizes:
        return None
    return HeaderLayout(marker=marker, sizes=tuple(sizes), positional=False, trailing_total=trailing_total)


def _build_layout(tokens: Sequence[Token], marker_index: int) -> Optional[HeaderLayout]:
    if clean_token(tokens[marker_index].text) == GRADE_MARKER:
        return _build_grade_layout(tokens, marker_index)
    return _build_quantity_layout(tokens, marker_index)


def _reference_from(tokens: Sequence[Token]) -> Optional[str]:
    """Return the reference when the first token looks like one."""
    if not tokens:
        return None
    candidate = tokens[0].text.strip(_EDGE_PUNCTUATION).rstrip(".").upper()
    if not REFERENCE_SHAPE.match(candidate):
        return None
    if not any(ch.isalpha() for ch in candidate) and not NUMERIC_REFERENCE.match(candidate):
        # bare quantities such as "150" or "1.234"
        return None
    cleaned = clean_token(candidate)
    if cleaned in IGNORED_WORDS or cleaned.startswith("TOTAL"):
        return None
    return candidate


def _is_section_divider(tokens: Sequence[Token]) -> bool:
    words = " ".join(clean_token(token.text) for token in tokens)
    return any(phrase in words for phrase in SECTION_DIVIDERS)


def _numbers_after(tokens: Sequence[Token], offset: int) -> List[NumberToken]:
    numbers: List[NumberToken] = []
    for token in tokens:
        if token.end <= offset:
            continue
        if token.start < offset:
            # "PRODUZIR:-456" glued to the marker
            token = Token(token.text[offset - token.start:], offset, token.end)
        value = parse_quantity(token.text)
        if value is not None:
            numbers.append((token, value))
    return numbers


def _align(layout: HeaderLayout, numbers: Sequence[NumberToken]) -> Optional[Alignment]:
    if layout.positional:
        return align_by_position(layout, numbers)
    values = [value for _, value in numbers]
    return align_by_count(layout.labels, values, trailing_total=layout.trailing_total)


def advance(context: LineContext, line: str) -> Tuple[LineContext, Optional[VariationSnapshot]]:
    """Consume one line; return the next context and the variation it completed, if any."""
    tokens = tokenize_line(line)
    if not tokens:
        return context, None

    marker_index = _find_header_marker(tokens)
    layout = _build_layout(tokens, marker_index) if marker_index is not None else None
    if layout is not None:
        reference = _reference_from(tokens[:marker_index])
        if reference is None and not layout.positional:
            reference = context.reference
        if reference:
            return LineContext(ParseState.HAVE_REF, layout, reference), None
        return LineContext(ParseState.AWAITING_REF, layout, None), None

    if context.state is not ParseState.HAVE_REF:
        if _is_section_divider(tokens):
            return IDLE, None
        reference = _reference_from(tokens)
        if reference is None:
            return context, None
        if context.state is ParseState.AWAITING_REF:
            return replace(context, state=ParseState.HAVE_REF, reference=reference), None
        return replace(context, reference=reference), None

    if context.layout is not None:
        produce = PRODUCE_MARKER.search(line)
        if produce is None:
            return context, None
        alignment = _align(context.layout, _numbers_after(tokens, produce.end()))
        if alignment is None:
            return context, None
        variation = build_variation(context.reference or "", alignment)
        # Same header may serve further references
        return LineContext(ParseState.AWAITING_REF, context.layout, None), variation

    return context, None


def iter_variations(lines: Iterable[str]) -> Iterator[VariationSnapshot]:
    context = IDLE
    for line in lines:
        context, variation = advance(context, line)
        if variation is not None:
            yield variation


def parse(text: str, product_order: Optional[Sequence[str]] = None) -> List[ProductSnapshot]:
    """Parse report text into product snapshots. Never raises on report content."""
    accumulator = VariationAccumulator()
    for variation in iter_variations(split_lines(text)):
        accumulator.add(variation)
    snapshots = aggregate(accumulator.variations(), product_order)
    logger.debug("text_report_parsed", products=len(snapshots), variations=len(accumulator))
    return snapshots
