"""User accounts: registration, profiles and deletion."""

from .models import (
    AdminUserResponse,
    CreateUserRequest,
    RegisterUserRequest,
    UpdateUserRequest,
    UserResponse,
)
from .user_routes import configure_user_router

__all__ = [
    "AdminUserResponse",
    "CreateUserRequest",
    "RegisterUserRequest",
    "UpdateUserRequest",
    "UserResponse",
    "configure_user_router",
]
