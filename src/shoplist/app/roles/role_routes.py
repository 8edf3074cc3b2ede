"""Read-only role routes, restricted to admins."""

from typing import Annotated

from fastapi import APIRouter, Depends, Path

from shoplist.app.auth import AuthContext, AuthMode, Validate
from shoplist.app.store import ID_PATTERN, EntityStore, RoleDocument

from .resolver import RoleResolver


def configure_role_router(
    router: APIRouter,
    store: EntityStore,
    roles: RoleResolver,
    validate: Validate,
) -> APIRouter:
    """Configure the role router.

    :param router: The APIRouter to configure
    :param store: The EntityStore used to list roles
    :param roles: The RoleResolver used for single lookups
    :param validate: The Validate instance providing auth dependencies
    :return: The configured APIRouter
    """

    @router.get("/roles", response_model=list[RoleDocument])
    async def list_roles(
        _: Annotated[AuthContext, Depends(validate.mode(AuthMode.IS_ADMIN))],
    ) -> list[RoleDocument]:
        return await store.list_roles()

    @router.get("/role/{role_id}", response_model=RoleDocument)
    async def get_role(
        role_id: Annotated[str, Path(pattern=ID_PATTERN)],
        _: Annotated[AuthContext, Depends(validate.mode(AuthMode.IS_ADMIN))],
    ) -> RoleDocument:
        return await roles.resolve(role_id=role_id)

    return router
