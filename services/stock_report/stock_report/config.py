"""Configuration loader for the stock report service."""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Optional, Tuple


def _get_env(key: str, default: Optional[str] = None) -> Optional[str]:
    value = os.getenv(key)
    if value is not None:
        value = value.strip()
        if value == "":
            return default
        return value
    return default


def _get_int(key: str, default: int) -> int:
    value = _get_env(key)
    if value is None:
        return default
    try:
        return int(value)
    except ValueError as exc:
        raise ValueError(f"Environment variable {key} must be an integer") from exc


def _get_float(key: str, default: float) -> float:
    value = _get_env(key)
    if value is None:
        return default
    try:
        return float(value)
    except ValueError as exc:
        raise ValueError(f"Environment variable {key} must be a number") from exc


def _get_list(key: str) -> Tuple[str, ...]:
    value = _get_env(key)
    if value is None:
        return ()
    return tuple(part.strip() for part in value.split(",") if part.strip())


@dataclass(slots=True)
class AppConfig:
    log_level: str
    product_order: Tuple[str, ...]
    max_upload_bytes: int
    pdf_line_tolerance: float


DEFAULT_MAX_UPLOAD_BYTES = 20 * 1024 * 1024


def load_config() -> AppConfig:
    log_level = _get_env("LOG_LEVEL", "INFO").upper()
    product_order = _get_list("STOCK_REPORT_PRODUCT_ORDER")
    max_upload_bytes = max(1, _get_int("STOCK_REPORT_MAX_UPLOAD_BYTES", DEFAULT_MAX_UPLOAD_BYTES))
    pdf_line_tolerance = _get_float("STOCK_REPORT_PDF_LINE_TOLERANCE", 3.0)
    if pdf_line_tolerance < 0:
        raise ValueError("Environment variable STOCK_REPORT_PDF_LINE_TOLERANCE must not be negative")

    return AppConfig(
        log_level=log_level,
        product_order=product_order,
        max_upload_bytes=max_upload_bytes,
        pdf_line_tolerance=pdf_line_tolerance,
    )
