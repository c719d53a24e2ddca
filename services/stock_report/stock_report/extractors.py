"""Byte-to-text and byte-to-grid adapters feeding the parsers.

Text sources (plain text, word documents) come back as one string for the
line parser; spreadsheets, CSV exports and PDFs come back as rows of cell
strings for the grid parser. PDF pages are read one after the other so rows
keep page and line order.
"""

from __future__ import annotations

import csv
import io
from typing import Any, Dict, List, Optional

import pandas as pd

from .errors import ExtractionFailedError, ExtractionLibraryUnavailableError
from .logging import get_logger
from .numeral import cell_text

try:  # python-docx is only needed for .docx uploads
    import docx  # type: ignore
    from docx.oxml.ns import qn  # type: ignore
    from docx.table import Table  # type: ignore
    from docx.text.paragraph import Paragraph  # type: ignore
except ImportError:  # pragma: no cover - environment dependent
    docx = None

try:  # pdfplumber is only needed for .pdf uploads
    import pdfplumber
except ImportError:  # pragma: no cover - environment dependent
    pdfplumber = None

__all__ = [
    "decode_text",
    "extract_docx_text",
    "extract_sheet_rows",
    "extract_csv_rows",
    "extract_pdf_rows",
    "group_words_into_rows",
]

logger = get_logger(__name__)

Rows = List[List[str]]

TEXT_ENCODINGS = ("utf-8-sig", "cp1252", "latin-1")


def decode_text(data: bytes) -> str:
    for encoding in TEXT_ENCODINGS:
        try:
            return data.decode(encoding)
        except UnicodeDecodeError:
            continue
    raise ExtractionFailedError("Unable to decode text file")  # pragma: no cover - latin-1 always decodes


def extract_docx_text(data: bytes) -> str:
    """Paragraph and table text of a .docx body, in document order.

    Table cells are joined with tabs so the line parser still sees columns.
    """
    if docx is None:
        raise ExtractionLibraryUnavailableError("python-docx is required to read .docx files")
    try:
        document = docx.Document(io.BytesIO(data))
    except Exception as exc:
        logger.warning("extraction_failed", kind="docx", error=str(exc))
        raise ExtractionFailedError(f"Unable to read .docx file: {exc}") from exc

    lines: List[str] = []
    for child in document.element.body.iterchildren():
        if child.tag == qn("w:p"):
            lines.append(Paragraph(child, document).text)
        elif child.tag == qn("w:tbl"):
            for row in Table(child, document).rows:
                lines.append("\t".join(cell.text.replace("\n", " ") for cell in row.cells))
    return "\n".join(lines)


def _frame_rows(frame: pd.DataFrame) -> Rows:
    rows: Rows = []
    for record in frame.itertuples(index=False, name=None):
        rows.append([cell_text(value) for value in record])
    return rows


def extract_sheet_rows(data: bytes, extension: str = "xlsx") -> Rows:
    """Rows of every sheet, in workbook order, separated by an empty row."""
    engine: Optional[str] = "openpyxl" if extension in {"xlsx", "xlsm"} else None
    try:
        sheets: Dict[Any, pd.DataFrame] = pd.read_excel(
            io.BytesIO(data),
            sheet_name=None,
            header=None,
            dtype=object,
            engine=engine,
        )
    except ImportError as exc:
        raise ExtractionLibraryUnavailableError(f"Spreadsheet engine unavailable: {exc}") from exc
    except Exception as exc:
        logger.warning("extraction_failed", kind=extension, error=str(exc))
        raise ExtractionFailedError(f"Unable to read spreadsheet: {exc}") from exc

    rows: Rows = []
    for frame in sheets.values():
        if rows:
            rows.append([])
        rows.extend(_frame_rows(frame))
    return rows


def extract_csv_rows(data: bytes) -> Rows:
    """CSV rows; ';' is used as delimiter when the first line has more of them than ','."""
    text = decode_text(data)
    if not text.strip():
        return []
    first_line = text.splitlines()[0] if text.splitlines() else ""
    delimiter = ";" if first_line.count(";") > first_line.count(",") else ","
    try:
        reader = csv.reader(io.StringIO(text), delimiter=delimiter)
        return [[cell.strip() for cell in record] for record in reader]
    except csv.Error as exc:
        logger.warning("extraction_failed", kind="csv", error=str(exc))
        raise ExtractionFailedError(f"Unable to read CSV file: {exc}") from exc


def group_words_into_rows(words: List[Dict[str, Any]], tolerance: float = 3.0) -> Rows:
    """Group positioned words (pdfplumber dicts) into rows.

    - Deterministic sort: top, x0
    - New row when |top - row anchor| > tolerance
    - Each word becomes one cell, left to right
    """
    ordered = sorted(words, key=lambda w: (float(w["top"]), float(w["x0"])))
    rows: Rows = []
    current: List[Dict[str, Any]] = []
    anchor: Optional[float] = None

    def flush() -> None:
        if current:
            current.sort(key=lambda w: float(w["x0"]))
            rows.append([str(w["text"]) for w in current if str(w["text"]).strip()])

    for word in ordered:
        top = float(word["top"])
        if anchor is None or abs(top - anchor) <= tolerance:
            if anchor is None:
                anchor = top
            current.append(word)
            continue
        flush()
        current = [word]
        anchor = top
    flush()
    return rows


def extract_pdf_rows(data: bytes, line_tolerance: float = 3.0) -> Rows:
    if pdfplumber is None:
        raise ExtractionLibraryUnavailableError("pdfplumber is required to read .pdf files")
    rows: Rows = []
    try:
        with pdfplumber.open(io.BytesIO(data)) as pdf:
            for page in pdf.pages:
                words = page.extract_words(use_text_flow=True, keep_blank_chars=False)
                rows.extend(group_words_into_rows(words, tolerance=line_tolerance))
    except Exception as exc:
        logger.warning("extraction_failed", kind="pdf", error=str(exc))
        raise ExtractionFailedError(f"Unable to read PDF file: {exc}") from exc
    return rows
