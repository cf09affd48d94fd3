"""
Error Taxonomy

Every failure a handler can report maps onto one of four errors. Each error
carries the HTTP status it surfaces as and a short, client-safe message;
the diagnostic detail goes to the server log only.
"""

import logging
from typing import Any, Optional

from sqlalchemy.exc import IntegrityError, SQLAlchemyError

logger = logging.getLogger(__name__)


class OrderingError(Exception):
    """Base class for errors that map to an HTTP response."""

    status_code: int = 500
    default_message: str = "Server error"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class BadRequestError(OrderingError):
    """Missing or malformed client input."""
    status_code = 400
    default_message = "Bad request"


class NotFoundError(OrderingError):
    """The referenced entity does not exist."""
    status_code = 404
    default_message = "Not found"


class ConflictError(OrderingError):
    """Uniqueness or referential violation reported by the store."""
    status_code = 409
    default_message = "Conflict"


class ServerError(OrderingError):
    """Any data-access or processing failure not otherwise recognized."""
    status_code = 500
    default_message = "Server error"


def translate_db_error(
    exc: SQLAlchemyError,
    action: str,
    conflict_message: Optional[str] = None,
    **context: Any,
) -> OrderingError:
    """
    Map a SQLAlchemy error to the nearest taxonomy member.

    Args:
        exc: Error raised by the session or engine
        action: Short description of what was attempted ("saving order")
        conflict_message: Client message used when the error is a constraint violation
        **context: Request inputs logged alongside the failure

    Returns:
        The error to raise in place of `exc`
    """
    if isinstance(exc, IntegrityError):
        logger.warning(f"Constraint violation while {action}: {exc.orig} | context={context}")
        return ConflictError(conflict_message)

    logger.error(f"Error {action}: {exc} | context={context}")
    return ServerError()
