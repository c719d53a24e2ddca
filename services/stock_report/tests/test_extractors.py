import io

import pytest

from stock_report.errors import ExtractionFailedError
from stock_report.extractors import (
    decode_text,
    extract_csv_rows,
    extract_docx_text,
    extract_pdf_rows,
    extract_sheet_rows,
    group_words_into_rows,
)
from stock_report.grid_parser import parse_rows


def test_decode_text_tries_utf8_then_windows_codepage():
    assert decode_text(b"\xef\xbb\xbfQtde") == "Qtde"
    assert decode_text(b"Refer\xeancia") == "Refer\u00eancia"


def test_docx_paragraphs_and_tables_in_document_order():
    docx = pytest.importorskip("docx")
    document = docx.Document()
    document.add_paragraph("100.AZ Qtde P M")
    table = document.add_table(rows=1, cols=3)
    for cell, text in zip(table.rows[0].cells, ("A PRODUZIR:", "1", "2")):
        cell.text = text
    document.add_paragraph("Fim")
    buffer = io.BytesIO()
    document.save(buffer)

    lines = [line for line in extract_docx_text(buffer.getvalue()).splitlines() if line]
    assert lines == ["100.AZ Qtde P M", "A PRODUZIR:\t1\t2", "Fim"]


def test_docx_garbage_raises_extraction_failed():
    pytest.importorskip("docx")
    with pytest.raises(ExtractionFailedError):
        extract_docx_text(b"not a word document")


def test_sheet_rows_from_every_sheet():
    openpyxl = pytest.importorskip("openpyxl")
    workbook = openpyxl.Workbook()
    sheet = workbook.active
    sheet.append(["100.01"])
    sheet.append(["Grade", "P", "M", "G"])
    sheet.append(["A PRODUZIR", 30, 10, 10, 10])
    workbook.create_sheet("Resumo").append(["X"])
    buffer = io.BytesIO()
    workbook.save(buffer)

    rows = extract_sheet_rows(buffer.getvalue(), "xlsx")
    assert rows[0][0] == "100.01"
    assert rows[2] == ["A PRODUZIR", "30", "10", "10", "10"]
    assert rows[3] == []
    assert rows[4] == ["X"]

    variation = parse_rows(rows)[0].variations[0]
    assert variation.tamanhos == {"P": 10, "M": 10, "G": 10}


def test_sheet_garbage_raises_extraction_failed():
    with pytest.raises(ExtractionFailedError):
        extract_sheet_rows(b"not a workbook", "xlsx")


def test_csv_rows_detect_semicolon_delimiter():
    assert extract_csv_rows(b"Ref;P;M\n100.AB; 1 ;2\n") == [["Ref", "P", "M"], ["100.AB", "1", "2"]]
    assert extract_csv_rows(b"a,b\n1,2\n") == [["a", "b"], ["1", "2"]]
    assert extract_csv_rows(b"   ") == []


def test_group_words_into_rows_by_vertical_position():
    words = [
        {"text": "M", "top": 10.0, "x0": 50.0},
        {"text": "P", "top": 11.5, "x0": 20.0},
        {"text": "1", "top": 30.0, "x0": 20.0},
        {"text": "2", "top": 29.0, "x0": 50.0},
    ]
    assert group_words_into_rows(words) == [["P", "M"], ["1", "2"]]
    assert group_words_into_rows(words, tolerance=0.5) == [["M"], ["P"], ["2"], ["1"]]


def test_pdf_garbage_raises_extraction_failed():
    pytest.importorskip("pdfplumber")
    with pytest.raises(ExtractionFailedError):
        extract_pdf_rows(b"not a pdf")
