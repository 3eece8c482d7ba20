"""
Response envelope and error rendering shared by all services.

Every endpoint answers with ``{status, message, data}``; failures answer with
``{status, message, error: {type, details}}``.
"""
import logging
from typing import Any, Generic, Optional, TypeVar

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from .errors import ServiceError

logger = logging.getLogger(__name__)

T = TypeVar("T")


class Envelope(BaseModel, Generic[T]):
    """Standard success envelope: {status, message, data}."""
    status: int = status.HTTP_200_OK
    message: str = "success"
    data: Optional[T] = None


def error_body(status_code: int, error_type: str, message: str, details: Optional[list] = None) -> dict:
    return {
        "status": status_code,
        "message": message,
        "error": {"type": error_type, "details": details or []},
    }


async def service_error_handler(request: Request, exc: ServiceError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
    return JSONResponse(
        status_code=exc.status_code,
        content=jsonable_encoder(error_body(exc.status_code, exc.error_type, exc.message, exc.details)),
    )


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    details: list[Any] = [
        {"title": ".".join(str(part) for part in err.get("loc", ())), "description": err.get("msg", "")}
        for err in exc.errors()
    ]
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=jsonable_encoder(error_body(status.HTTP_400_BAD_REQUEST, "bad_request", "invalid input data", details)),
    )


def register_error_handlers(app: FastAPI) -> None:
    """Attach the envelope error handlers to a service app."""
    app.add_exception_handler(ServiceError, service_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
