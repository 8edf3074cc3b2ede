"""User registration, profile and account deletion routes.

Admins see every user with role and shopping lists populated; everybody else
gets the public view without ``roleId`` and ``shoppingLists``.
"""

import logging
from typing import Annotated

import aiosqlite
from fastapi import APIRouter, Depends, Path, Response, status

from shoplist.app.auth import (
    AuthContext,
    AuthMode,
    AuthorizationEngine,
    Decision,
    SecurityManager,
    Validate,
)
from shoplist.app.cascade import CascadeManager
from shoplist.app.roles import RoleResolver
from shoplist.app.store import ID_PATTERN, EntityStore, UserDocument
from shoplist.common import (
    BadRequestError,
    ConflictError,
    MessageResponse,
    NoContentError,
    NotAuthorizedError,
    NotFoundError,
    RoleName,
)

from .models import (
    AdminUserResponse,
    CreateUserRequest,
    RegisterUserRequest,
    UpdateUserRequest,
    UserResponse,
)

LOGGER = logging.getLogger(__name__)
LOGGER.setLevel(logging.DEBUG)

UserId = Annotated[str, Path(pattern=ID_PATTERN)]


def _check_password(security_manager: SecurityManager, password: str) -> None:
    error = security_manager.validate_password(password)
    if error:
        raise BadRequestError(error)


async def _insert_user(store: EntityStore, user: UserDocument, failure: str) -> None:
    try:
        await store.insert_user(user)
    except aiosqlite.IntegrityError:
        LOGGER.info("Email %s was registered concurrently", user.email)
        raise ConflictError("User exists") from None
    except aiosqlite.Error:
        LOGGER.exception("Error inserting user %s", user.email)
        raise BadRequestError(failure) from None


async def _register_user(
    store: EntityStore,
    security_manager: SecurityManager,
    roles: RoleResolver,
    body: RegisterUserRequest,
) -> MessageResponse:
    if await store.get_user_by_email(body.email):
        raise ConflictError("User exists")

    _check_password(security_manager, body.password)
    role = await roles.resolve(role_name=RoleName.USER)

    user = UserDocument(
        email=body.email,
        hashed_password=security_manager.hash_password(body.password),
        role_id=role.id,
        first_name=body.first_name,
        last_name=body.last_name,
    )
    await _insert_user(store, user, "User cannot be registered")

    LOGGER.info("Registered user %s", user.id)
    return MessageResponse(message="User successfully registered")


async def _create_user(
    store: EntityStore,
    security_manager: SecurityManager,
    roles: RoleResolver,
    body: CreateUserRequest,
) -> MessageResponse:
    """For creating users with an arbitrary role. Only admins get here."""
    if await store.get_user_by_email(body.email):
        raise ConflictError("User exists")

    _check_password(security_manager, body.password)
    role = await roles.resolve(role_id=body.role_id)

    user = UserDocument(
        email=body.email,
        hashed_password=security_manager.hash_password(body.password),
        role_id=role.id,
        first_name=body.first_name,
        last_name=body.last_name,
    )
    await _insert_user(store, user, "User cannot be created")

    LOGGER.info("Created user %s with role %s", user.id, role.name)
    return MessageResponse(message="User successfully created")


async def _admin_view(store: EntityStore, user: UserDocument) -> AdminUserResponse:
    public = UserResponse.from_document(user)
    return AdminUserResponse(
        **public.model_dump(),
        role_id=user.role_id,
        role=await store.get_role(user.role_id),
        shopping_lists=await store.find_shopping_lists(user.shopping_lists),
    )


async def _list_users(
    store: EntityStore,
    engine: AuthorizationEngine,
    auth: AuthContext,
) -> list[UserResponse]:
    users = await store.list_users()
    if not users:
        raise NoContentError("No users")

    if await engine.is_admin(auth.identity) is Decision.ALLOWED_AS_ADMIN:
        return [await _admin_view(store, user) for user in users]
    return [UserResponse.from_document(user) for user in users]


async def _get_user(
    store: EntityStore,
    engine: AuthorizationEngine,
    auth: AuthContext,
    user_id: str,
) -> UserResponse:
    user = await store.get_user(user_id)
    if user is None:
        raise NotFoundError("User doesn't exist")

    if await engine.is_admin(auth.identity) is Decision.ALLOWED_AS_ADMIN:
        return await _admin_view(store, user)
    return UserResponse.from_document(user)


async def _update_user(
    store: EntityStore,
    security_manager: SecurityManager,
    roles: RoleResolver,
    user_id: str,
    body: UpdateUserRequest,
    auth: AuthContext,
) -> MessageResponse:
    user = await store.get_user(user_id)
    if user is None:
        raise NotFoundError("User doesn't exist")

    fields = body.model_dump(exclude_none=True)

    if "role_id" in fields:
        # owners may edit their profile but never their role
        if not auth.is_admin:
            raise NotAuthorizedError
        await roles.resolve(role_id=fields["role_id"])

    if "email" in fields:
        other = await store.get_user_by_email(fields["email"])
        if other is not None and other.id != user.id:
            raise ConflictError("Email is already taken")

    if "password" in fields:
        password = fields.pop("password")
        _check_password(security_manager, password)
        fields["hashed_password"] = security_manager.hash_password(password)

    try:
        updated = await store.update_user(user.id, fields)
    except aiosqlite.IntegrityError:
        raise ConflictError("Email is already taken") from None
    except aiosqlite.Error:
        LOGGER.exception("Error updating user %s", user.id)
        updated = False

    if not updated:
        raise BadRequestError("User cannot be updated")
    return MessageResponse(message="User successfully updated")


async def _delete_user(cascade: CascadeManager, store: EntityStore, user_id: str) -> None:
    user = await store.get_user(user_id)
    if user is None:
        raise NotFoundError("User doesn't exist")

    result = await cascade.delete_user(user)
    if not result.primary_deleted:
        raise BadRequestError("User cannot be deleted")


def configure_user_router(
    router: APIRouter,
    store: EntityStore,
    security_manager: SecurityManager,
    roles: RoleResolver,
    validate: Validate,
    cascade: CascadeManager,
) -> APIRouter:
    """Configure the user router.

    :param router: The APIRouter to configure
    :param store: The EntityStore instance for database operations
    :param security_manager: The SecurityManager used to hash passwords
    :param roles: The RoleResolver used to check role ids
    :param validate: The Validate instance providing auth dependencies
    :param cascade: The CascadeManager run on account deletion
    :return: The configured APIRouter
    """
    engine = validate.engine

    @router.post(
        "/user/register",
        status_code=status.HTTP_201_CREATED,
        response_model=MessageResponse,
    )
    async def register_user(body: RegisterUserRequest) -> MessageResponse:
        return await _register_user(store, security_manager, roles, body)

    @router.post(
        "/user/create",
        status_code=status.HTTP_201_CREATED,
        response_model=MessageResponse,
    )
    async def create_user(
        body: CreateUserRequest,
        _: Annotated[AuthContext, Depends(validate.mode(AuthMode.IS_ADMIN))],
    ) -> MessageResponse:
        return await _create_user(store, security_manager, roles, body)

    @router.get("/users", response_model=None)
    async def list_users(
        auth: Annotated[AuthContext, Depends(validate.mode(AuthMode.CURRENT_USER))],
    ) -> list[UserResponse]:
        return await _list_users(store, engine, auth)

    @router.get("/user/{user_id}", response_model=None)
    async def get_user(
        user_id: UserId,
        auth: Annotated[AuthContext, Depends(validate.mode(AuthMode.CURRENT_USER))],
    ) -> UserResponse:
        return await _get_user(store, engine, auth, user_id)

    @router.patch(
        "/user/{user_id}",
        status_code=status.HTTP_201_CREATED,
        response_model=MessageResponse,
    )
    async def update_user(
        user_id: UserId,
        body: UpdateUserRequest,
        auth: Annotated[
            AuthContext,
            Depends(validate.mode(AuthMode.IS_OWNER_OR_ADMIN)),
        ],
    ) -> MessageResponse:
        return await _update_user(
            store,
            security_manager,
            roles,
            user_id,
            body,
            auth,
        )

    @router.delete("/user/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
    async def delete_user(
        user_id: UserId,
        _: Annotated[
            AuthContext,
            Depends(validate.mode(AuthMode.IS_OWNER_OR_ADMIN)),
        ],
    ) -> Response:
        await _delete_user(cascade, store, user_id)
        return Response(status_code=status.HTTP_204_NO_CONTENT)

    return router
