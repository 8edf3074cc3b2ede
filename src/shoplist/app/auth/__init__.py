"""Authentication and authorization for the shopping list API."""

from .auth_routes import configure_auth_router
from .authorization import AuthContext, AuthMode, AuthorizationEngine, Decision
from .models import LoginRequest, LoginResponse
from .security_manager import SecurityManager
from .validation import Validate

__all__ = [
    "AuthContext",
    "AuthMode",
    "AuthorizationEngine",
    "Decision",
    "LoginRequest",
    "LoginResponse",
    "SecurityManager",
    "Validate",
    "configure_auth_router",
]
