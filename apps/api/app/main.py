from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.api.v1.routes import analyses, charts, health
from app.core.config import get_settings
from app.core.errors import (
    AccountMapperError,
    DocumentInputError,
    ExtractionError,
    HierarchyCycleError,
    StructuralError,
)
from app.core.logging import configure_logging
from app.db.pg.base import Base
from app.db.pg import models as _models  # noqa: F401
from app.db.pg.session import engine

configure_logging()
settings = get_settings()
logger = logging.getLogger(__name__)
app = FastAPI(title=settings.app_name)
allowed_origins = [origin.strip() for origin in settings.cors_allow_origins.split(",") if origin.strip()]
if allowed_origins:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=allowed_origins,
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
    )

_ERROR_STATUS: tuple[tuple[type[AccountMapperError], int], ...] = (
    (DocumentInputError, 400),
    (ExtractionError, 422),
    (HierarchyCycleError, 422),
    (StructuralError, 500),
)


@app.exception_handler(AccountMapperError)
def handle_account_mapper_error(request: Request, exc: AccountMapperError) -> JSONResponse:
    status_code = next(
        (code for error_type, code in _ERROR_STATUS if isinstance(exc, error_type)),
        400,
    )
    if isinstance(exc, StructuralError):
        logger.critical("hierarchy_invariant_violated", extra={"path": request.url.path, "detail": str(exc)})
    else:
        logger.info("request_rejected", extra={"path": request.url.path, "error_code": exc.code})
    return JSONResponse(status_code=status_code, content={"error": exc.code, "detail": str(exc)})


@app.on_event("startup")
def on_startup() -> None:
    Base.metadata.create_all(bind=engine)


app.include_router(health.router, prefix=settings.api_prefix)
app.include_router(analyses.router, prefix=settings.api_prefix)
app.include_router(charts.router, prefix=settings.api_prefix)
