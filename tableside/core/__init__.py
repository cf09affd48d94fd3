"""
Core module initialization.
Exports configuration, logging and error utilities.
"""

from tableside.core.config import get_settings, setup_logging, Settings, EnvironmentMode
from tableside.core.exceptions import (
    OrderingError,
    BadRequestError,
    NotFoundError,
    ConflictError,
    ServerError,
)

__all__ = [
    "get_settings",
    "setup_logging",
    "Settings",
    "EnvironmentMode",
    "OrderingError",
    "BadRequestError",
    "NotFoundError",
    "ConflictError",
    "ServerError",
]
