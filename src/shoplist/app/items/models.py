"""Request models for shopping list item routes."""

from typing import Annotated

from pydantic import Field, StringConstraints

from shoplist.app.store import DocumentId
from shoplist.common import CamelModel

ItemName = Annotated[
    str,
    StringConstraints(strip_whitespace=True, min_length=1, max_length=255),
]


class ItemRequest(CamelModel):
    name: ItemName
    status: bool = False


class CreateItemsRequest(CamelModel):
    """A batch of items added to one list in a single insert."""

    items: Annotated[list[ItemRequest], Field(min_length=1)]


class UpdateItemRequest(CamelModel):
    name: ItemName | None = None
    status: bool | None = None


class DeleteItemsRequest(CamelModel):
    ids: Annotated[list[DocumentId], Field(min_length=1)]
