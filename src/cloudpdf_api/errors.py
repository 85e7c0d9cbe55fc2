"""Error taxonomy and the handlers that turn it into JSON responses."""

import logging
from typing import Any

from fastapi import Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class DocumentsApiError(Exception):
    """Base class for failures that map onto an HTTP status.

    Extra keyword arguments are rendered next to ``error`` in the response body.
    """

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message: str = "Internal server error"

    def __init__(self, message: str | None = None, **details: Any) -> None:
        self.message = message or self.default_message
        self.details = details
        super().__init__(self.message)


class ValidationError(DocumentsApiError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Invalid request"


class NotFoundError(DocumentsApiError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Not found"


class ConfigurationError(DocumentsApiError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = "Server is missing required configuration"


class UpstreamError(DocumentsApiError):
    status_code = status.HTTP_502_BAD_GATEWAY
    default_message = "Upstream service failed"


class UnsupportedSourceError(DocumentsApiError):
    status_code = status.HTTP_501_NOT_IMPLEMENTED
    default_message = "Source not implemented"


class InternalError(DocumentsApiError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR


def error_body(exc: DocumentsApiError) -> dict:
    return {"error": exc.message, **jsonable_encoder(exc.details)}


async def handle_documents_api_errors(request: Request, exc: DocumentsApiError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error(f"{type(exc).__name__} on {request.url.path}: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content=error_body(exc))


async def handle_request_validation_errors(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Malformed bodies and parameters are client errors, reported as 400."""
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"error": "Invalid request", "details": jsonable_encoder(exc.errors())},
    )


async def handle_broad_exceptions(request: Request, call_next):
    """Last line of defence: anything unhandled becomes a JSON 500."""
    try:
        return await call_next(request)
    except Exception as exc:
        logger.exception(f"Unhandled {type(exc).__name__} on {request.url.path}: {exc}")
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=error_body(InternalError()),
        )
