"""Routes for the items of a shopping list. All of them use ``IsAllowed``."""

import logging
from typing import Annotated

import aiosqlite
from fastapi import APIRouter, Depends, Path, Response, status

from shoplist.app.auth import AuthContext, AuthMode, Validate
from shoplist.app.cascade import CascadeManager
from shoplist.app.store import ID_PATTERN, EntityStore, ShoppingListItemDocument
from shoplist.common import (
    BadRequestError,
    MessageResponse,
    NoContentError,
    NotFoundError,
)

from .models import CreateItemsRequest, DeleteItemsRequest, UpdateItemRequest

LOGGER = logging.getLogger(__name__)
LOGGER.setLevel(logging.DEBUG)

ShoppingListId = Annotated[str, Path(pattern=ID_PATTERN)]
ItemId = Annotated[str, Path(pattern=ID_PATTERN)]


async def _require_shopping_list_exists(store: EntityStore, shopping_list_id: str) -> None:
    if await store.get_shopping_list(shopping_list_id) is None:
        raise NotFoundError("Shopping list doesn't exist")


async def _require_item(
    store: EntityStore,
    shopping_list_id: str,
    item_id: str,
) -> ShoppingListItemDocument:
    item = await store.get_item(item_id, shopping_list_id)
    if item is None:
        raise NotFoundError("Shopping list item doesn't exist")
    return item


async def _create_items(
    store: EntityStore,
    shopping_list_id: str,
    body: CreateItemsRequest,
) -> MessageResponse:
    await _require_shopping_list_exists(store, shopping_list_id)

    items = [
        ShoppingListItemDocument(
            name=item.name,
            status=item.status,
            shopping_list_id=shopping_list_id,
        )
        for item in body.items
    ]
    try:
        await store.insert_items(items)
    except aiosqlite.Error:
        LOGGER.exception("Error inserting items for list %s", shopping_list_id)
        raise BadRequestError("Shopping list items cannot be created") from None

    for item in items:
        try:
            await store.add_shopping_list_item(shopping_list_id, item.id)
        except aiosqlite.Error:
            LOGGER.exception("Failed to attach item %s to list %s", item.id, shopping_list_id)

    return MessageResponse(message="Shopping list items successfully created")


async def _list_items(
    store: EntityStore,
    shopping_list_id: str,
) -> list[ShoppingListItemDocument]:
    await _require_shopping_list_exists(store, shopping_list_id)

    items = await store.list_items(shopping_list_id)
    if not items:
        raise NoContentError("No shopping list items")
    return items


async def _update_item(
    store: EntityStore,
    shopping_list_id: str,
    item_id: str,
    body: UpdateItemRequest,
) -> MessageResponse:
    item = await _require_item(store, shopping_list_id, item_id)

    try:
        updated = await store.update_item(
            item.id,
            shopping_list_id,
            body.model_dump(exclude_none=True),
        )
    except aiosqlite.Error:
        LOGGER.exception("Error updating item %s", item.id)
        updated = False

    if not updated:
        raise BadRequestError("Shopping list item cannot be updated")
    return MessageResponse(message="Shopping list item successfully updated")


async def _delete_items(
    cascade: CascadeManager,
    shopping_list_id: str,
    body: DeleteItemsRequest,
) -> None:
    result = await cascade.delete_shopping_list_items(shopping_list_id, body.ids)
    if not result.primary_deleted:
        raise BadRequestError("Shopping list items cannot be deleted")


def configure_item_router(
    router: APIRouter,
    store: EntityStore,
    validate: Validate,
    cascade: CascadeManager,
) -> APIRouter:
    """Configure the shopping list item router.

    :param router: The APIRouter to configure
    :param store: The EntityStore instance for database operations
    :param validate: The Validate instance providing auth dependencies
    :param cascade: The CascadeManager run on batch deletes
    :return: The configured APIRouter
    """
    is_allowed = Depends(validate.mode(AuthMode.IS_ALLOWED))

    @router.post(
        "/shopping-list/{shopping_list_id}/items",
        status_code=status.HTTP_201_CREATED,
        response_model=MessageResponse,
    )
    async def create_items(
        shopping_list_id: ShoppingListId,
        body: CreateItemsRequest,
        _: Annotated[AuthContext, is_allowed],
    ) -> MessageResponse:
        return await _create_items(store, shopping_list_id, body)

    @router.get(
        "/shopping-list/{shopping_list_id}/items",
        response_model=list[ShoppingListItemDocument],
    )
    async def list_items(
        shopping_list_id: ShoppingListId,
        _: Annotated[AuthContext, is_allowed],
    ) -> list[ShoppingListItemDocument]:
        return await _list_items(store, shopping_list_id)

    @router.get(
        "/shopping-list/{shopping_list_id}/item/{item_id}",
        response_model=ShoppingListItemDocument,
    )
    async def get_item(
        shopping_list_id: ShoppingListId,
        item_id: ItemId,
        _: Annotated[AuthContext, is_allowed],
    ) -> ShoppingListItemDocument:
        return await _require_item(store, shopping_list_id, item_id)

    @router.patch(
        "/shopping-list/{shopping_list_id}/item/{item_id}",
        status_code=status.HTTP_201_CREATED,
        response_model=MessageResponse,
    )
    async def update_item(
        shopping_list_id: ShoppingListId,
        item_id: ItemId,
        body: UpdateItemRequest,
        _: Annotated[AuthContext, is_allowed],
    ) -> MessageResponse:
        return await _update_item(store, shopping_list_id, item_id, body)

    @router.delete(
        "/shopping-list/{shopping_list_id}/items",
        status_code=status.HTTP_204_NO_CONTENT,
    )
    async def delete_items(
        shopping_list_id: ShoppingListId,
        body: DeleteItemsRequest,
        _: Annotated[AuthContext, is_allowed],
    ) -> Response:
        await _delete_items(cascade, shopping_list_id, body)
        return Response(status_code=status.HTTP_204_NO_CONTENT)

    return router
