"""
Exception handlers mapping domain errors to HTTP responses.

DocumentNotFoundError -> 404, ValidationError and UnsupportedModalityError
-> 400, any other application error -> 500. Every body follows
ErrorResponse.

Dependencies: fastapi, backend.core.exceptions, backend.models.common
System role: Uniform error responses for all routers
"""

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from backend.core.exceptions import (
    DocumentNotFoundError,
    RAGException,
    UnsupportedModalityError,
    ValidationError,
)
from backend.models.common import ErrorResponse

logger = logging.getLogger(__name__)


def _error_response(status_code: int, exc: RAGException) -> JSONResponse:
    body = ErrorResponse(error=exc.message, details=exc.details or None)
    return JSONResponse(status_code=status_code, content=body.model_dump(mode="json"))


async def document_not_found_handler(request: Request, exc: DocumentNotFoundError) -> JSONResponse:
    logger.warning("Document not found", extra={"path": request.url.path, **exc.details})
    return _error_response(404, exc)


async def bad_request_handler(request: Request, exc: RAGException) -> JSONResponse:
    logger.warning(
        f"Rejected request: {exc.message}",
        extra={"path": request.url.path, "error_type": type(exc).__name__},
    )
    return _error_response(400, exc)


async def application_error_handler(request: Request, exc: RAGException) -> JSONResponse:
    logger.error(
        f"Request failed: {exc}",
        extra={"path": request.url.path, "error_type": type(exc).__name__},
    )
    return _error_response(500, exc)


def register_exception_handlers(app: FastAPI) -> None:
    """Attach the domain exception handlers to the application."""
    app.add_exception_handler(DocumentNotFoundError, document_not_found_handler)
    app.add_exception_handler(ValidationError, bad_request_handler)
    app.add_exception_handler(UnsupportedModalityError, bad_request_handler)
    app.add_exception_handler(RAGException, application_error_handler)
