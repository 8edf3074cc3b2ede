"""Common data models and utilities for the application."""

from .errors import (
    BadRequestError,
    ConflictError,
    ForbiddenError,
    NoContentError,
    NotAuthorizedError,
    NotFoundError,
    ShoplistError,
)
from .identity import Identity, RoleName
from .models import CamelModel, MessageResponse

__all__ = [
    "BadRequestError",
    "CamelModel",
    "ConflictError",
    "ForbiddenError",
    "Identity",
    "MessageResponse",
    "NoContentError",
    "NotAuthorizedError",
    "NotFoundError",
    "RoleName",
    "ShoplistError",
]
