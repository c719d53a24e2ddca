"""Dispatch layer: route an uploaded report to its extractor and parser."""

from __future__ import annotations

from pathlib import PurePath
from typing import Any, Dict, List, Optional, Sequence

from .errors import InvalidInputError, NoVariationsFoundError, UnsupportedFileTypeError
from .extractors import (
    decode_text,
    extract_csv_rows,
    extract_docx_text,
    extract_pdf_rows,
    extract_sheet_rows,
)
from .grid_parser import parse_rows
from .line_parser import parse
from .logging import get_logger
from .models import ProductSnapshot

__all__ = [
    "TEXT_KINDS",
    "GRID_KINDS",
    "detect_kind",
    "import_stock_file",
    "assert_has_variations",
    "flatten_snapshots_to_variations",
]

logger = get_logger(__name__)

TEXT_KINDS = {"txt", "docx"}
GRID_KINDS = {"xlsx", "xlsm", "xls", "csv", "pdf"}

MIME_KINDS = (
    ("wordprocessingml", "docx"),
    ("spreadsheetml", "xlsx"),
    ("ms-excel", "xls"),
    ("text/csv", "csv"),
    ("pdf", "pdf"),
    ("text/", "txt"),
)


def detect_kind(filename: Optional[str], content_type: Optional[str] = None) -> str:
    """File kind from the extension, falling back to the MIME type; '' if unknown."""
    suffix = PurePath(filename or "").suffix.lower().lstrip(".")
    if suffix:
        return suffix
    mime = (content_type or "").lower()
    for needle, kind in MIME_KINDS:
        if needle in mime:
            return kind
    return ""


def assert_has_variations(snapshots: Sequence[ProductSnapshot]) -> None:
    total = sum(len(snapshot.variations) for snapshot in snapshots)
    if not total:
        raise NoVariationsFoundError(
            "Nenhuma variação encontrada no arquivo importado. "
            "Confirme se o relatório contém linhas com 'A PRODUZIR'."
        )


def import_stock_file(
    filename: Optional[str],
    content: Any,
    content_type: Optional[str] = None,
    product_order: Optional[Sequence[str]] = None,
    pdf_line_tolerance: float = 3.0,
) -> List[ProductSnapshot]:
    """Extract and parse one report file.

    Raises UnsupportedFileTypeError before reading anything when the kind is
    unknown, and NoVariationsFoundError when parsing yields nothing.
    """
    if not filename and not content_type:
        raise InvalidInputError("Selecione um arquivo válido para importação.")
    if not isinstance(content, (bytes, bytearray)):
        raise InvalidInputError("O arquivo fornecido é inválido.")

    kind = detect_kind(filename, content_type)
    if kind not in TEXT_KINDS and kind not in GRID_KINDS:
        raise UnsupportedFileTypeError(
            f"Tipo de arquivo não suportado: '{kind or content_type or filename}'. "
            "Utilize arquivos .txt, .docx, .xlsx, .xls, .csv ou .pdf."
        )

    data = bytes(content)
    if kind == "txt":
        snapshots = parse(decode_text(data), product_order)
    elif kind == "docx":
        snapshots = parse(extract_docx_text(data), product_order)
    elif kind == "csv":
        snapshots = parse_rows(extract_csv_rows(data), product_order)
    elif kind == "pdf":
        snapshots = parse_rows(extract_pdf_rows(data, line_tolerance=pdf_line_tolerance), product_order)
    else:
        snapshots = parse_rows(extract_sheet_rows(data, kind), product_order)

    assert_has_variations(snapshots)
    logger.info(
        "stock_file_imported",
        filename=filename,
        kind=kind,
        products=len(snapshots),
        variations=sum(len(snapshot.variations) for snapshot in snapshots),
        warnings=sum(len(snapshot.warnings) for snapshot in snapshots),
    )
    return snapshots


def flatten_snapshots_to_variations(snapshots: Sequence[ProductSnapshot]) -> List[Dict[str, Any]]:
    """One record per variation; total is recomputed from the size quantities."""
    flattened: List[Dict[str, Any]] = []
    for snapshot in snapshots:
        for variation in snapshot.variations:
            flattened.append({
                "productCode": snapshot.product_code,
                "ref": variation.ref,
                "tamanhos": dict(variation.tamanhos),
                "total": sum(variation.tamanhos.values()),
            })
    return flattened
