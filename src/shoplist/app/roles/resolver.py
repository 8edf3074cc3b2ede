"""Role lookup by id or by name."""

import logging

from shoplist.app.store import EntityStore, RoleDocument
from shoplist.common import NotFoundError

LOGGER = logging.getLogger(__name__)
LOGGER.setLevel(logging.DEBUG)


class RoleResolver:
    """Stateless role lookups over the entity store.

    Nothing is cached, so a role edited in the store is seen on the next call.
    """

    def __init__(self, store: EntityStore) -> None:
        self.store = store

    async def resolve(
        self,
        role_id: str | None = None,
        role_name: str | None = None,
    ) -> RoleDocument:
        """Fetch a role by id, or by name when no id is given.

        :param role_id: Id of the role, preferred when both are given
        :param role_name: Name of the role
        :return: The matching role
        :raises NotFoundError: If neither lookup matches
        """
        role = None
        if role_id:
            role = await self.store.get_role(role_id)
        elif role_name:
            role = await self.store.get_role_by_name(role_name)

        if role is None:
            LOGGER.debug("Role lookup failed for id=%s name=%s", role_id, role_name)
            raise NotFoundError("Role doesn't exist")

        return role
