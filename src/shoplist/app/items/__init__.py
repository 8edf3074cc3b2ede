"""Items belonging to a shopping list."""

from .item_routes import configure_item_router
from .models import CreateItemsRequest, DeleteItemsRequest, ItemRequest, UpdateItemRequest

__all__ = [
    "CreateItemsRequest",
    "DeleteItemsRequest",
    "ItemRequest",
    "UpdateItemRequest",
    "configure_item_router",
]
