"""Errors raised around the parser: dispatch, extraction and empty results."""

from __future__ import annotations

NO_VARIATIONS_FOUND = "NO_VARIATIONS_FOUND"
UNSUPPORTED_FILE_TYPE = "UNSUPPORTED_FILE_TYPE"
EXTRACTION_FAILED = "EXTRACTION_FAILED"
EXTRACTION_LIBRARY_UNAVAILABLE = "EXTRACTION_LIBRARY_UNAVAILABLE"
INVALID_INPUT = "INVALID_INPUT"


class StockImportError(Exception):
    """Base class; ``code`` is the stable identifier callers switch on."""

    code = "STOCK_IMPORT_ERROR"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class NoVariationsFoundError(StockImportError):
    code = NO_VARIATIONS_FOUND


class UnsupportedFileTypeError(StockImportError):
    code = UNSUPPORTED_FILE_TYPE


class ExtractionFailedError(StockImportError):
    code = EXTRACTION_FAILED


class ExtractionLibraryUnavailableError(StockImportError):
    code = EXTRACTION_LIBRARY_UNAVAILABLE


class InvalidInputError(StockImportError):
    code = INVALID_INPUT
