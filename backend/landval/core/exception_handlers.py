"""
exception_handlers.py
- Purpose: Convert AppError (and generic exceptions) into the `{"error": {...}}` API shape.

Both handlers log the valuation id the request was about, so a failed
pipeline read can be matched to its poller logs.
"""

from __future__ import annotations

import logging

from fastapi import Request
from fastapi.responses import JSONResponse

from landval.core import AppError, ErrorCode, ErrorReason
from landval.middleware.request_logging import valuation_id_from_path

logger = logging.getLogger("landval.exceptions")


def _request_fields(request: Request) -> dict:
    path = request.url.path
    return {"path": path, "method": request.method, "valuation_id": valuation_id_from_path(path)}


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    logger.warning(
        "app_error",
        extra={
            **_request_fields(request),
            "status_code": exc.status_code,
            "code": exc.code.value,
            "reason": exc.reason,
            "details": exc.details,
        },
    )
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception(
        "unhandled_exception",
        extra={**_request_fields(request), "error_type": type(exc).__name__},
    )
    return JSONResponse(
        status_code=500,
        content={"error": {"code": ErrorCode.INTERNAL_ERROR.value, "reason": ErrorReason.INTERNAL_ERROR.value}},
    )
