"""Documents persisted by the entity store.

Reference fields (``role_id``, ``user_id``, ``shopping_list_id``) and
reference sets (``shopping_lists``, ``shopping_list_items``,
``allowed_users``) hold plain ids; nothing enforces that they resolve.
"""

import secrets
from datetime import UTC, datetime
from typing import Annotated

from pydantic import Field

from shoplist.common import CamelModel

ID_PATTERN = r"^[0-9a-f]{24}$"

DocumentId = Annotated[str, Field(pattern=ID_PATTERN)]


def new_id() -> str:
    """Generate a 24 character hex document id."""
    return secrets.token_hex(12)


def utc_now() -> datetime:
    return datetime.now(UTC)


class Document(CamelModel):
    """Fields shared by every stored document."""

    id: str = Field(default_factory=new_id)
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)


class RoleDocument(Document):
    name: str


class UserDocument(Document):
    email: str
    hashed_password: str
    role_id: str
    first_name: str | None = None
    last_name: str | None = None
    shopping_lists: list[str] = Field(default_factory=list)


class ShoppingListDocument(Document):
    name: str
    user_id: str
    shopping_list_items: list[str] = Field(default_factory=list)
    allowed_users: list[str] = Field(default_factory=list)


class ShoppingListItemDocument(Document):
    name: str
    status: bool
    shopping_list_id: str
