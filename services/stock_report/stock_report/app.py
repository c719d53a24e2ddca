"""FastAPI application exposing the stock report importer."""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Optional

from fastapi import Depends, FastAPI, File, Form, HTTPException, Request, UploadFile

from .config import AppConfig, load_config
from .errors import (
    EXTRACTION_FAILED,
    EXTRACTION_LIBRARY_UNAVAILABLE,
    INVALID_INPUT,
    NO_VARIATIONS_FOUND,
    UNSUPPORTED_FILE_TYPE,
    StockImportError,
)
from .importer import import_stock_file
from .logging import configure_logging, get_logger

logger = get_logger(__name__)

ERROR_STATUS = {
    INVALID_INPUT: 400,
    UNSUPPORTED_FILE_TYPE: 415,
    NO_VARIATIONS_FOUND: 422,
    EXTRACTION_FAILED: 422,
    EXTRACTION_LIBRARY_UNAVAILABLE: 503,
}


@asynccontextmanager
async def lifespan(app: FastAPI):
    config = load_config()
    configure_logging(config.log_level)
    app.state.config = config
    yield


def get_config(request: Request) -> AppConfig:
    config: AppConfig = request.app.state.config
    return config


def create_app() -> FastAPI:
    api = FastAPI(title="Stock Report Service", version="1.0.0", lifespan=lifespan)

    @api.get("/health")
    def health(config: AppConfig = Depends(get_config)) -> dict:
        return {
            "status": "healthy",
            "max_upload_bytes": config.max_upload_bytes,
        }

    @api.post("/import")
    def import_report(
        file: UploadFile = File(...),
        product_order: Optional[str] = Form(None),
        config: AppConfig = Depends(get_config),
    ) -> dict:
        # Plain def: extraction is blocking, so FastAPI runs it in the threadpool
        content = file.file.read()
        if not content:
            raise HTTPException(status_code=400, detail="Uploaded file is empty")
        if len(content) > config.max_upload_bytes:
            raise HTTPException(
                status_code=413,
                detail=f"File exceeds the {config.max_upload_bytes} byte upload limit",
            )

        if product_order:
            order = [part.strip() for part in product_order.split(",") if part.strip()]
        else:
            order = list(config.product_order)

        try:
            snapshots = import_stock_file(
                file.filename,
                content,
                content_type=file.content_type,
                product_order=order,
                pdf_line_tolerance=config.pdf_line_tolerance,
            )
        except StockImportError as exc:
            status = ERROR_STATUS.get(exc.code, 400)
            logger.info("import_rejected", filename=file.filename, code=exc.code, status=status)
            raise HTTPException(status_code=status, detail={"code": exc.code, "message": exc.message}) from exc

        return {
            "filename": file.filename,
            "status": "parsed",
            "variations": sum(len(snapshot.variations) for snapshot in snapshots),
            "products": [snapshot.to_dict() for snapshot in snapshots],
        }

    return api
