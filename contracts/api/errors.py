"""Exception -> HTTP status mapping. Every failure body is ``{message, code, detail?}``."""
from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from core.exceptions.errors import (
    ConflictError,
    ContractSignError,
    IntegrityError,
    NotFoundError,
    PayloadTooLargeError,
    ValidationError,
)

logger = logging.getLogger(__name__)

# Checked in order; subclasses before their bases.
STATUS_BY_ERROR = (
    (PayloadTooLargeError, 413),
    (ValidationError, 400),
    (NotFoundError, 404),
    (ConflictError, 409),
    (IntegrityError, 500),
)


def status_for(exc: ContractSignError) -> int:
    for cls, status in STATUS_BY_ERROR:
        if isinstance(exc, cls):
            return status
    return 500


def install_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(ContractSignError)
    async def _domain_error(request: Request, exc: ContractSignError) -> JSONResponse:
        status = status_for(exc)
        if status >= 500:
            logger.error("%s %s failed: %s (%s) %s", request.method, request.url.path, exc.message, exc.code, exc.detail)
        else:
            logger.info("%s %s rejected: %s (%s)", request.method, request.url.path, exc.message, exc.code)
        return JSONResponse(status_code=status, content=jsonable_encoder(exc.as_dict()))

    @app.exception_handler(RequestValidationError)
    async def _bad_payload(request: Request, exc: RequestValidationError) -> JSONResponse:
        return JSONResponse(
            status_code=400,
            content={
                "message": "Bad payload",
                "code": "bad_payload",
                "detail": [
                    {"loc": list(err.get("loc", ())), "msg": str(err.get("msg", "")), "type": err.get("type")}
                    for err in exc.errors()
                ],
            },
        )

    @app.exception_handler(Exception)
    async def _unexpected(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return JSONResponse(status_code=500, content={"message": "Server error", "code": "internal_error"})
