"""Authentication routes for the FastAPI application."""

import logging

from fastapi import APIRouter

from shoplist.app.store import EntityStore
from shoplist.common import Identity, NotAuthorizedError

from .models import LoginRequest, LoginResponse
from .security_manager import SecurityManager

LOGGER = logging.getLogger(__name__)
LOGGER.setLevel(logging.DEBUG)


async def _login(
    store: EntityStore,
    security_manager: SecurityManager,
    credentials: LoginRequest,
) -> LoginResponse:
    user = await store.get_user_by_email(credentials.email)

    if user is None or not security_manager.check_password(
        credentials.password,
        user.hashed_password,
    ):
        LOGGER.debug("Failed login for %s", credentials.email)
        raise NotAuthorizedError("Invalid email or password")

    access_token = security_manager.create_access_token(
        Identity(user_id=user.id, role_id=user.role_id),
    )
    return LoginResponse(response=access_token)


def configure_auth_router(
    router: APIRouter,
    store: EntityStore,
    security_manager: SecurityManager,
) -> APIRouter:
    """Configure the authentication router.

    :param router: The APIRouter to configure
    :param store: The EntityStore used to look up accounts
    :param security_manager: The SecurityManager instance for JWT operations
    :return: The configured APIRouter
    """

    @router.post("/login", response_model=LoginResponse)
    async def login(credentials: LoginRequest) -> LoginResponse:
        return await _login(store, security_manager, credentials)

    return router
