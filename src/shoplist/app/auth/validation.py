"""FastAPI dependency validators for authentication and authorization."""

import logging
from collections.abc import Awaitable, Callable
from typing import Annotated

from fastapi import Depends, Request, Security
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from shoplist.common import Identity, NotAuthorizedError

from .authorization import AuthContext, AuthMode, AuthorizationEngine
from .security_manager import SecurityManager

bearer_scheme = HTTPBearer(auto_error=False)

LOGGER = logging.getLogger(__name__)
LOGGER.setLevel(logging.DEBUG)


class Validate:
    """Holds validator dependencies for FastAPI authentication/authorization."""

    def __init__(
        self,
        security_manager: SecurityManager,
        engine: AuthorizationEngine,
    ) -> None:
        """Create a new validator instance.

        :param security_manager: JWT security manager
        :param engine: Authorization engine deciding each auth mode
        """
        self.security_manager = security_manager
        self.engine = engine

    def jwt_token(
        self,
        credentials: Annotated[
            HTTPAuthorizationCredentials | None,
            Security(bearer_scheme),
        ],
    ) -> Identity:
        """Validate the bearer access token using the injected SecurityManager."""
        if credentials is None:
            LOGGER.debug("Request without bearer token")
            raise NotAuthorizedError

        identity = self.security_manager.verify_token(credentials.credentials)

        if identity is None:
            LOGGER.debug("JWT token validation failed")
            raise NotAuthorizedError("Could not validate credentials")

        LOGGER.debug("JWT token validated for user: %s", identity.user_id)
        return identity

    def mode(self, auth_mode: AuthMode) -> Callable[..., Awaitable[AuthContext]]:
        """Return a dependency that authorizes the request with ``auth_mode``.

        The ``user_id`` and ``shopping_list_id`` path parameters of the route,
        when present, are handed to the engine as the resource being accessed.
        """

        async def validator(
            request: Request,
            identity: Annotated[Identity, Depends(self.jwt_token)],
        ) -> AuthContext:
            decision = await self.engine.authorize(
                auth_mode,
                identity,
                user_id=request.path_params.get("user_id"),
                shopping_list_id=request.path_params.get("shopping_list_id"),
            )
            return AuthContext(identity=identity, decision=decision)

        return validator
