"""Shopping lists and their allow-lists."""

from .models import (
    AddAllowedUserRequest,
    CreateShoppingListRequest,
    RemoveAllowedUserRequest,
    ShoppingListResponse,
    UpdateShoppingListRequest,
)
from .shopping_list_routes import configure_shopping_list_router

__all__ = [
    "AddAllowedUserRequest",
    "CreateShoppingListRequest",
    "RemoveAllowedUserRequest",
    "ShoppingListResponse",
    "UpdateShoppingListRequest",
    "configure_shopping_list_router",
]
