"""Command-line interface for the stock report parser."""

from __future__ import annotations

import json
from pathlib import Path
from typing import List, Optional

import typer

from .config import load_config
from .errors import StockImportError
from .importer import flatten_snapshots_to_variations, import_stock_file
from .logging import configure_logging, get_logger

logger = get_logger(__name__)

app = typer.Typer(add_completion=False, help="Production stock report parser")


@app.command("parse")
def parse_command(
    path: Path = typer.Argument(..., exists=True, dir_okay=False, readable=True, help="Report file to parse"),
    order: Optional[str] = typer.Option(
        None,
        "--order",
        help="Comma-separated product codes listed first, in this order",
    ),
    flatten: bool = typer.Option(False, "--flatten", help="Emit one record per variation"),
    indent: int = typer.Option(2, "--indent", min=0, help="JSON indentation"),
) -> None:
    config = load_config()
    configure_logging(config.log_level, json_logs=False)

    product_order = _split_order(order) or list(config.product_order)
    try:
        snapshots = import_stock_file(
            path.name,
            path.read_bytes(),
            product_order=product_order,
            pdf_line_tolerance=config.pdf_line_tolerance,
        )
    except StockImportError as exc:
        typer.echo(f"{exc.code}: {exc.message}", err=True)
        raise typer.Exit(code=1) from exc

    if flatten:
        payload = flatten_snapshots_to_variations(snapshots)
    else:
        payload = [snapshot.to_dict() for snapshot in snapshots]
    typer.echo(json.dumps(payload, ensure_ascii=False, indent=indent or None))


@app.command("service")
def service_command(
    host: str = typer.Option("0.0.0.0", "--host", help="Service bind host"),
    port: int = typer.Option(8000, "--port", help="Service port"),
) -> None:
    import uvicorn

    uvicorn.run(
        "stock_report.app:create_app",
        host=host,
        port=port,
        factory=True,
        log_level="info",
    )


def _split_order(value: Optional[str]) -> List[str]:
    if not value:
        return []
    return [part.strip() for part in value.split(",") if part.strip()]


def main():
    app()


if __name__ == "__main__":  # pragma: no cover
    main()
