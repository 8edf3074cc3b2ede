"""Request and response models for user routes."""

from datetime import datetime
from typing import Annotated

from pydantic import EmailStr, Field, StringConstraints

from shoplist.app.store import DocumentId, RoleDocument, ShoppingListDocument, UserDocument
from shoplist.common import CamelModel

PersonName = Annotated[
    str,
    StringConstraints(strip_whitespace=True, min_length=2, max_length=255),
]


class RegisterUserRequest(CamelModel):
    """Public self-registration payload."""

    email: EmailStr
    first_name: PersonName
    last_name: PersonName
    password: str


class CreateUserRequest(CamelModel):
    """Admin user creation payload, role chosen by id."""

    email: EmailStr
    password: str
    role_id: DocumentId
    first_name: PersonName | None = None
    last_name: PersonName | None = None


class UpdateUserRequest(CamelModel):
    """Partial profile update. ``role_id`` is honoured for admins only."""

    email: EmailStr | None = None
    password: str | None = None
    role_id: DocumentId | None = None
    first_name: PersonName | None = None
    last_name: PersonName | None = None


class UserResponse(CamelModel):
    """A user as any authenticated caller may see it.

    :param id: The user id
    :param email: The user email
    :param first_name: The first name, if any
    :param last_name: The last name, if any
    """

    id: str
    email: str
    first_name: str | None = None
    last_name: str | None = None
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_document(cls, user: UserDocument) -> "UserResponse":
        return cls(
            id=user.id,
            email=user.email,
            first_name=user.first_name,
            last_name=user.last_name,
            created_at=user.created_at,
            updated_at=user.updated_at,
        )


class AdminUserResponse(UserResponse):
    """A user as admins see it, with role and shopping lists populated.

    :param role_id: Id of the user's role
    :param role: The role document, None if it no longer resolves
    :param shopping_lists: Lists the user owns or was granted, missing ones dropped
    """

    role_id: str
    role: RoleDocument | None = None
    shopping_lists: list[ShoppingListDocument] = Field(default_factory=list)
