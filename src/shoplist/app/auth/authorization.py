"""Authorization decisions layered on top of a verified identity.

Each request is decided from scratch: the role is resolved, ownership or the
allow-list is read from the store, and a tagged ``Decision`` comes back. The
engine keeps no state between calls.
"""

import logging
from dataclasses import dataclass
from enum import Enum, StrEnum

from shoplist.app.roles import RoleResolver
from shoplist.app.store import EntityStore, RoleDocument
from shoplist.common import Identity, NotAuthorizedError, NotFoundError, RoleName

LOGGER = logging.getLogger(__name__)
LOGGER.setLevel(logging.DEBUG)


class AuthMode(StrEnum):
    """Policy a route is protected with."""

    CURRENT_USER = "getCurrentUser"
    IS_ADMIN = "isAdmin"
    IS_OWNER_OR_ADMIN = "isOwnerOrAdmin"
    IS_ALLOWED = "isAllowed"


class Decision(Enum):
    """Outcome of an authorization check."""

    DENIED = "denied"
    ALLOWED = "allowed"
    ALLOWED_AS_ADMIN = "allowed_as_admin"

    @property
    def granted(self) -> bool:
        return self is not Decision.DENIED


@dataclass(frozen=True)
class AuthContext:
    """Identity of the caller together with the decision that let it through."""

    identity: Identity
    decision: Decision

    @property
    def is_admin(self) -> bool:
        return self.decision is Decision.ALLOWED_AS_ADMIN


class AuthorizationEngine:
    """Decides admin / owner / allowed-user / denied for an identity."""

    def __init__(self, store: EntityStore, roles: RoleResolver) -> None:
        self.store = store
        self.roles = roles

    async def authorize(
        self,
        mode: AuthMode,
        identity: Identity,
        *,
        user_id: str | None = None,
        shopping_list_id: str | None = None,
    ) -> Decision:
        """Run the check selected by ``mode``.

        :param mode: The policy to apply
        :param identity: The verified caller
        :param user_id: ``userId`` path parameter, used by ``IS_OWNER_OR_ADMIN``
        :param shopping_list_id: ``shoppingListId`` path parameter
        :return: ``ALLOWED`` or ``ALLOWED_AS_ADMIN``
        :raises NotAuthorizedError: If the check is denied
        """
        match mode:
            case AuthMode.CURRENT_USER:
                decision = Decision.ALLOWED
            case AuthMode.IS_ADMIN:
                decision = await self.is_admin(identity)
            case AuthMode.IS_OWNER_OR_ADMIN:
                decision = await self.is_owner_or_admin(
                    identity,
                    owner_user_id=user_id,
                    owner_shopping_list_id=shopping_list_id,
                )
            case AuthMode.IS_ALLOWED:
                decision = await self.is_allowed(identity, shopping_list_id)
            case _:
                LOGGER.error("Unknown authorization mode %s", mode)
                decision = Decision.DENIED

        if not decision.granted:
            LOGGER.debug(
                "Denied %s for user %s (list=%s, user=%s)",
                mode,
                identity.user_id,
                shopping_list_id,
                user_id,
            )
            raise NotAuthorizedError
        return decision

    async def is_admin(self, identity: Identity) -> Decision:
        role = await self._resolve_role(identity)
        if role is not None and role.name == RoleName.ADMIN:
            return Decision.ALLOWED_AS_ADMIN
        return Decision.DENIED

    async def is_owner_or_admin(
        self,
        identity: Identity,
        owner_user_id: str | None = None,
        owner_shopping_list_id: str | None = None,
    ) -> Decision:
        """Admins always pass; others must be the user or own the list."""
        role = await self._resolve_role(identity)
        if role is None:
            return Decision.DENIED
        return await self._owner_or_admin(
            identity,
            role,
            owner_user_id,
            owner_shopping_list_id,
        )

    async def is_allowed(
        self,
        identity: Identity,
        shopping_list_id: str | None,
    ) -> Decision:
        """Owners and admins pass, then anyone on the list's allow-list."""
        role = await self._resolve_role(identity)
        if role is None:
            return Decision.DENIED

        decision = await self._owner_or_admin(identity, role, None, shopping_list_id)
        if decision.granted or not shopping_list_id:
            return decision

        shopping_list = await self.store.get_shopping_list(shopping_list_id)
        if shopping_list is not None and identity.user_id in shopping_list.allowed_users:
            return Decision.ALLOWED
        return Decision.DENIED

    async def _owner_or_admin(
        self,
        identity: Identity,
        role: RoleDocument,
        owner_user_id: str | None,
        owner_shopping_list_id: str | None,
    ) -> Decision:
        if role.name == RoleName.ADMIN:
            return Decision.ALLOWED_AS_ADMIN

        if owner_user_id and owner_user_id == identity.user_id:
            return Decision.ALLOWED

        if owner_shopping_list_id:
            shopping_list = await self.store.get_shopping_list(owner_shopping_list_id)
            # a missing list is a failed check, not an error
            if shopping_list is not None and shopping_list.user_id == identity.user_id:
                return Decision.ALLOWED

        return Decision.DENIED

    async def _resolve_role(self, identity: Identity) -> RoleDocument | None:
        try:
            return await self.roles.resolve(role_id=identity.role_id)
        except NotFoundError:
            LOGGER.warning(
                "Token for user %s references unknown role %s",
                identity.user_id,
                identity.role_id,
            )
            return None
