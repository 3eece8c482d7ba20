"""
Error taxonomy shared by all services.

Every failure that should reach a client is raised as a ``ServiceError``
subclass; ``orderflow.responses.register_error_handlers`` renders them.
"""
from typing import Any, List, Optional

from sqlalchemy.exc import IntegrityError, SQLAlchemyError


class ServiceError(Exception):
    """Base class for errors that map onto an HTTP status and error type."""

    status_code = 500
    error_type = "internal"
    default_message = "internal server error. please try again later"

    def __init__(self, message: Optional[str] = None, details: Optional[List[Any]] = None):
        self.message = message or self.default_message
        self.details = details or []
        super().__init__(self.message)


class BadRequestError(ServiceError):
    status_code = 400
    error_type = "bad_request"
    default_message = "bad request"


class UnauthorizedError(ServiceError):
    status_code = 401
    error_type = "unauthorized"
    default_message = "unauthorized"


class ForbiddenError(ServiceError):
    status_code = 403
    error_type = "forbidden"
    default_message = "forbidden"


class NotFoundError(ServiceError):
    status_code = 404
    error_type = "not_found"
    default_message = "resource not found"


class ConflictError(ServiceError):
    status_code = 409
    error_type = "conflict"
    default_message = "resource conflict"


class InternalError(ServiceError):
    pass


def from_db_error(exc: SQLAlchemyError) -> ServiceError:
    """
    Translate a persistence failure into the error taxonomy.

    Unique-constraint violations become conflicts; anything else is internal.
    """
    if isinstance(exc, IntegrityError):
        return ConflictError()
    return InternalError()
