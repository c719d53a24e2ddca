"""Parser for production stock reports ("A PRODUZIR" variation snapshots)."""

from .errors import (
    ExtractionFailedError,
    ExtractionLibraryUnavailableError,
    InvalidInputError,
    NoVariationsFoundError,
    StockImportError,
    UnsupportedFileTypeError,
)
from .grid_parser import parse_rows
from .importer import flatten_snapshots_to_variations, import_stock_file
from .line_parser import parse
from .models import ProductSnapshot, VariationSnapshot

__version__ = "1.0.0"

__all__ = [
    "parse",
    "parse_rows",
    "import_stock_file",
    "flatten_snapshots_to_variations",
    "ProductSnapshot",
    "VariationSnapshot",
    "StockImportError",
    "NoVariationsFoundError",
    "UnsupportedFileTypeError",
    "ExtractionFailedError",
    "ExtractionLibraryUnavailableError",
    "InvalidInputError",
]
