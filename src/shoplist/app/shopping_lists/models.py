"""Request and response models for shopping list routes."""

from datetime import datetime
from typing import Annotated

from pydantic import Field, StringConstraints

from shoplist.app.store import DocumentId, ShoppingListItemDocument
from shoplist.app.users import UserResponse
from shoplist.common import CamelModel

ListName = Annotated[
    str,
    StringConstraints(strip_whitespace=True, min_length=1, max_length=255),
]


class CreateShoppingListRequest(CamelModel):
    name: ListName
    allowed_users: list[DocumentId] = Field(default_factory=list)


class UpdateShoppingListRequest(CamelModel):
    """Partial update. A given ``allowed_users`` replaces the whole set."""

    name: ListName | None = None
    allowed_users: list[DocumentId] | None = None


class AddAllowedUserRequest(CamelModel):
    user_id: DocumentId


class RemoveAllowedUserRequest(CamelModel):
    allowed_user_id: DocumentId


class ShoppingListResponse(CamelModel):
    """A shopping list with its items and allowed users populated.

    :param id: The list id
    :param name: The list name
    :param user_id: Id of the owner
    :param shopping_list_items: Items of the list, missing ones dropped
    :param allowed_users: Public view of every allowed user, missing ones dropped
    """

    id: str
    name: str
    user_id: str
    shopping_list_items: list[ShoppingListItemDocument] = Field(default_factory=list)
    allowed_users: list[UserResponse] = Field(default_factory=list)
    created_at: datetime
    updated_at: datetime
