"""Fundamental identity data model for app."""

from dataclasses import dataclass
from enum import StrEnum


class RoleName(StrEnum):
    """Names of the seeded roles."""

    ADMIN = "admin"
    USER = "user"


@dataclass(frozen=True)
class Identity:
    """Claims carried by a verified access token.

    :param user_id: Id of the authenticated user
    :param role_id: Id of the role the user held when the token was issued
    """

    user_id: str
    role_id: str
