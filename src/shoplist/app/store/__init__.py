"""Document store backing every entity of the service."""

from .documents import (
    ID_PATTERN,
    DocumentId,
    RoleDocument,
    ShoppingListDocument,
    ShoppingListItemDocument,
    UserDocument,
    new_id,
)
from .queries import Collection, EntityStore

__all__ = [
    "ID_PATTERN",
    "Collection",
    "DocumentId",
    "EntityStore",
    "RoleDocument",
    "ShoppingListDocument",
    "ShoppingListItemDocument",
    "UserDocument",
    "new_id",
]
