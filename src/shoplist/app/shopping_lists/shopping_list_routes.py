"""Shopping list routes: creation, sharing, reads, updates and deletion.

Granting a user access to a list also records the list id in that user's
``shoppingLists``, which is what lets a user deletion pull the user out of
every list it was allowed on. Removing an allowed user does not touch the
user's ``shoppingLists``.
"""

import logging
from collections.abc import Iterable
from typing import Annotated

import aiosqlite
from fastapi import APIRouter, Depends, Path, Response, status

from shoplist.app.auth import AuthContext, AuthMode, Validate
from shoplist.app.cascade import CascadeManager
from shoplist.app.store import ID_PATTERN, EntityStore, ShoppingListDocument
from shoplist.app.users import UserResponse
from shoplist.common import (
    BadRequestError,
    ConflictError,
    MessageResponse,
    NoContentError,
    NotFoundError,
)

from .models import (
    AddAllowedUserRequest,
    CreateShoppingListRequest,
    RemoveAllowedUserRequest,
    ShoppingListResponse,
    UpdateShoppingListRequest,
)

LOGGER = logging.getLogger(__name__)
LOGGER.setLevel(logging.DEBUG)

ShoppingListId = Annotated[str, Path(pattern=ID_PATTERN)]
UserId = Annotated[str, Path(pattern=ID_PATTERN)]


async def _require_shopping_list(
    store: EntityStore,
    shopping_list_id: str,
) -> ShoppingListDocument:
    shopping_list = await store.get_shopping_list(shopping_list_id)
    if shopping_list is None:
        raise NotFoundError("Shopping list doesn't exist")
    return shopping_list


async def _require_allowed_users(store: EntityStore, user_ids: list[str]) -> None:
    """Every listed id must be an existing user; an empty list is fine."""
    if not user_ids:
        return
    found = await store.find_users(user_ids)
    if len(found) != len(user_ids):
        missing = set(user_ids) - {user.id for user in found}
        LOGGER.debug("Unknown allowed users: %s", sorted(missing))
        raise NotFoundError("Allowed users don't exist")


async def _grant(
    store: EntityStore,
    shopping_list_id: str,
    user_ids: Iterable[str],
) -> None:
    for user_id in user_ids:
        try:
            await store.add_user_shopping_list(user_id, shopping_list_id)
        except aiosqlite.Error:
            LOGGER.exception(
                "Failed to record list %s on user %s",
                shopping_list_id,
                user_id,
            )


async def _populate(
    store: EntityStore,
    shopping_list: ShoppingListDocument,
) -> ShoppingListResponse:
    items = await store.find_items(shopping_list.shopping_list_items)
    users = await store.find_users(shopping_list.allowed_users)
    return ShoppingListResponse(
        id=shopping_list.id,
        name=shopping_list.name,
        user_id=shopping_list.user_id,
        shopping_list_items=items,
        allowed_users=[UserResponse.from_document(user) for user in users],
        created_at=shopping_list.created_at,
        updated_at=shopping_list.updated_at,
    )


async def _create_shopping_list(
    store: EntityStore,
    body: CreateShoppingListRequest,
    auth: AuthContext,
) -> MessageResponse:
    if await store.get_shopping_list_by_name(body.name):
        raise ConflictError("Shopping list exists")

    owner = await store.get_user(auth.identity.user_id)
    if owner is None:
        raise NotFoundError("User doesn't exist")

    allowed_users = list(dict.fromkeys(body.allowed_users))
    await _require_allowed_users(store, allowed_users)

    shopping_list = ShoppingListDocument(
        name=body.name,
        user_id=owner.id,
        allowed_users=allowed_users,
    )
    try:
        await store.insert_shopping_list(shopping_list)
    except aiosqlite.Error:
        LOGGER.exception("Error inserting shopping list %s", body.name)
        raise BadRequestError("Shopping list cannot be created") from None

    await _grant(store, shopping_list.id, [owner.id, *allowed_users])

    LOGGER.info("User %s created shopping list %s", owner.id, shopping_list.id)
    return MessageResponse(message="Shopping list successfully created")


async def _add_allowed_user(
    store: EntityStore,
    shopping_list_id: str,
    body: AddAllowedUserRequest,
) -> MessageResponse:
    shopping_list = await _require_shopping_list(store, shopping_list_id)

    user = await store.get_user(body.user_id)
    if user is None:
        raise NotFoundError("User doesn't exist")

    try:
        await store.add_allowed_user(shopping_list.id, user.id)
    except aiosqlite.Error:
        LOGGER.exception("Error adding user %s to list %s", user.id, shopping_list.id)
        raise BadRequestError("User cannot be added") from None

    await _grant(store, shopping_list.id, [user.id])
    return MessageResponse(message="User successfully added")


async def _list_shopping_lists(
    store: EntityStore,
    user_id: str | None = None,
) -> list[ShoppingListResponse]:
    if user_id is not None and await store.get_user(user_id) is None:
        raise NotFoundError("User doesn't exist")

    shopping_lists = await store.list_shopping_lists(user_id=user_id)
    if not shopping_lists:
        raise NoContentError("No shopping lists")

    return [await _populate(store, shopping_list) for shopping_list in shopping_lists]


async def _update_shopping_list(
    store: EntityStore,
    shopping_list_id: str,
    body: UpdateShoppingListRequest,
) -> MessageResponse:
    shopping_list = await _require_shopping_list(store, shopping_list_id)
    fields = body.model_dump(exclude_none=True)

    if "name" in fields:
        other = await store.get_shopping_list_by_name(fields["name"])
        if other is not None and other.id != shopping_list.id:
            raise ConflictError("Shopping list name is already taken")

    granted: list[str] = []
    if "allowed_users" in fields:
        allowed_users = list(dict.fromkeys(fields["allowed_users"]))
        await _require_allowed_users(store, allowed_users)
        fields["allowed_users"] = allowed_users
        granted = [
            user_id
            for user_id in allowed_users
            if user_id not in shopping_list.allowed_users
        ]

    try:
        updated = await store.update_shopping_list(shopping_list.id, fields)
    except aiosqlite.Error:
        LOGGER.exception("Error updating shopping list %s", shopping_list.id)
        updated = False

    if not updated:
        raise BadRequestError("Shopping list cannot be updated")

    await _grant(store, shopping_list.id, granted)
    return MessageResponse(message="Shopping list successfully updated")


async def _remove_allowed_user(
    store: EntityStore,
    cascade: CascadeManager,
    shopping_list_id: str,
    body: RemoveAllowedUserRequest,
) -> None:
    shopping_list = await _require_shopping_list(store, shopping_list_id)

    result = await cascade.remove_allowed_user(shopping_list.id, body.allowed_user_id)
    if not result.primary_deleted:
        raise BadRequestError("Allowed user cannot be removed")


async def _delete_shopping_list(
    store: EntityStore,
    cascade: CascadeManager,
    shopping_list_id: str,
) -> None:
    shopping_list = await _require_shopping_list(store, shopping_list_id)

    result = await cascade.delete_shopping_list(shopping_list)
    if not result.primary_deleted:
        raise BadRequestError("Shopping list cannot be deleted")


def configure_shopping_list_router(
    router: APIRouter,
    store: EntityStore,
    validate: Validate,
    cascade: CascadeManager,
) -> APIRouter:
    """Configure the shopping list router.

    :param router: The APIRouter to configure
    :param store: The EntityStore instance for database operations
    :param validate: The Validate instance providing auth dependencies
    :param cascade: The CascadeManager run on deletes and allow-list removals
    :return: The configured APIRouter
    """
    current_user = Depends(validate.mode(AuthMode.CURRENT_USER))
    is_admin = Depends(validate.mode(AuthMode.IS_ADMIN))
    is_owner_or_admin = Depends(validate.mode(AuthMode.IS_OWNER_OR_ADMIN))
    is_allowed = Depends(validate.mode(AuthMode.IS_ALLOWED))

    @router.post(
        "/shopping-list",
        status_code=status.HTTP_201_CREATED,
        response_model=MessageResponse,
    )
    async def create_shopping_list(
        body: CreateShoppingListRequest,
        auth: Annotated[AuthContext, current_user],
    ) -> MessageResponse:
        return await _create_shopping_list(store, body, auth)

    @router.post(
        "/shopping-list/{shopping_list_id}/add-user",
        status_code=status.HTTP_201_CREATED,
        response_model=MessageResponse,
    )
    async def add_allowed_user(
        shopping_list_id: ShoppingListId,
        body: AddAllowedUserRequest,
        _: Annotated[AuthContext, is_owner_or_admin],
    ) -> MessageResponse:
        return await _add_allowed_user(store, shopping_list_id, body)

    @router.get("/shopping-lists", response_model=list[ShoppingListResponse])
    async def list_shopping_lists(
        _: Annotated[AuthContext, is_admin],
    ) -> list[ShoppingListResponse]:
        return await _list_shopping_lists(store)

    @router.get(
        "/shopping-lists/{user_id}",
        response_model=list[ShoppingListResponse],
    )
    async def list_user_shopping_lists(
        user_id: UserId,
        _: Annotated[AuthContext, is_owner_or_admin],
    ) -> list[ShoppingListResponse]:
        return await _list_shopping_lists(store, user_id)

    @router.get(
        "/shopping-list/{shopping_list_id}",
        response_model=ShoppingListResponse,
    )
    async def get_shopping_list(
        shopping_list_id: ShoppingListId,
        _: Annotated[AuthContext, is_allowed],
    ) -> ShoppingListResponse:
        shopping_list = await _require_shopping_list(store, shopping_list_id)
        return await _populate(store, shopping_list)

    @router.patch(
        "/shopping-list/{shopping_list_id}",
        status_code=status.HTTP_201_CREATED,
        response_model=MessageResponse,
    )
    async def update_shopping_list(
        shopping_list_id: ShoppingListId,
        body: UpdateShoppingListRequest,
        _: Annotated[AuthContext, is_owner_or_admin],
    ) -> MessageResponse:
        return await _update_shopping_list(store, shopping_list_id, body)

    @router.delete(
        "/shopping-list/{shopping_list_id}/remove-user",
        status_code=status.HTTP_204_NO_CONTENT,
    )
    async def remove_allowed_user(
        shopping_list_id: ShoppingListId,
        body: RemoveAllowedUserRequest,
        _: Annotated[AuthContext, is_owner_or_admin],
    ) -> Response:
        await _remove_allowed_user(store, cascade, shopping_list_id, body)
        return Response(status_code=status.HTTP_204_NO_CONTENT)

    @router.delete(
        "/shopping-list/{shopping_list_id}",
        status_code=status.HTTP_204_NO_CONTENT,
    )
    async def delete_shopping_list(
        shopping_list_id: ShoppingListId,
        _: Annotated[AuthContext, is_owner_or_admin],
    ) -> Response:
        await _delete_shopping_list(store, cascade, shopping_list_id)
        return Response(status_code=status.HTTP_204_NO_CONTENT)

    return router
