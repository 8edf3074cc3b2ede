"""Best-effort cascading deletes across users, shopping lists and items.

Every cascade is a primary delete followed by an ordered list of independent
point mutations. A failing step is logged and recorded, the remaining steps
still run and nothing already written is undone. Callers that need to know
whether dependent data was cleaned up inspect ``CascadeResult.steps``.

Deleting a shopping list only detaches it from its owner; its items are left
pointing at the missing list. Deleting a user does remove the items of the
lists it owned.
"""

import logging
from collections.abc import Awaitable, Iterable
from dataclasses import dataclass, field

import aiosqlite

from shoplist.app.store import EntityStore, ShoppingListDocument, UserDocument
from shoplist.common import NotFoundError

LOGGER = logging.getLogger(__name__)
LOGGER.setLevel(logging.DEBUG)

DELETE_SHOPPING_LIST = "delete_shopping_list"
DELETE_SHOPPING_LIST_ITEMS = "delete_shopping_list_items"
REMOVE_ALLOWED_USER = "remove_allowed_user"
DETACH_FROM_OWNER = "detach_from_owner"
DETACH_ITEM = "detach_item"


@dataclass(frozen=True)
class CascadeStep:
    """Outcome of one dependent mutation.

    :param name: What the step does, e.g. ``delete_shopping_list``
    :param target_id: Id of the document the step mutated
    :param succeeded: Whether the store accepted the mutation
    :param error: Driver error text when the step failed
    """

    name: str
    target_id: str
    succeeded: bool
    error: str | None = None


@dataclass
class CascadeResult:
    """Primary delete outcome plus every dependent step that was attempted."""

    primary_deleted: bool
    steps: list[CascadeStep] = field(default_factory=list)

    @property
    def complete(self) -> bool:
        return self.primary_deleted and all(step.succeeded for step in self.steps)

    @property
    def failed_steps(self) -> list[CascadeStep]:
        return [step for step in self.steps if not step.succeeded]


class CascadeManager:
    """Issues the dependent mutations that keep references roughly consistent."""

    def __init__(self, store: EntityStore) -> None:
        self.store = store

    async def delete_user(self, user: UserDocument) -> CascadeResult:
        """Delete a user, the lists it owns with their items, and its grants.

        Owned lists are read before the user is deleted, so the later steps
        only work on ids captured up front.

        :param user: The user as read before deletion
        :return: The cascade result
        """
        owned_lists = await self.store.list_shopping_lists(user_id=user.id)

        result = await self._primary("user", user.id, self.store.delete_user(user.id))
        if not result.primary_deleted:
            return result

        for shopping_list in owned_lists:
            await self._step(
                result,
                DELETE_SHOPPING_LIST,
                shopping_list.id,
                self.store.delete_shopping_list(shopping_list.id),
            )
            if shopping_list.shopping_list_items:
                await self._step(
                    result,
                    DELETE_SHOPPING_LIST_ITEMS,
                    shopping_list.id,
                    self.store.delete_items(shopping_list.shopping_list_items),
                )

        for shopping_list_id in dict.fromkeys(user.shopping_lists):
            await self._step(
                result,
                REMOVE_ALLOWED_USER,
                shopping_list_id,
                self.store.remove_allowed_user(shopping_list_id, user.id),
            )

        self._report("user", user.id, result)
        return result

    async def delete_shopping_list(
        self,
        shopping_list: ShoppingListDocument,
    ) -> CascadeResult:
        """Delete a shopping list and detach it from its owner.

        Items are not deleted.

        :param shopping_list: The list as read before deletion
        :return: The cascade result
        """
        result = await self._primary(
            "shopping list",
            shopping_list.id,
            self.store.delete_shopping_list(shopping_list.id),
        )
        if not result.primary_deleted:
            return result

        await self._step(
            result,
            DETACH_FROM_OWNER,
            shopping_list.user_id,
            self.store.remove_user_shopping_list(
                shopping_list.user_id,
                shopping_list.id,
            ),
        )

        self._report("shopping list", shopping_list.id, result)
        return result

    async def delete_shopping_list_items(
        self,
        shopping_list_id: str,
        item_ids: Iterable[str],
    ) -> CascadeResult:
        """Delete a batch of items and pull each from the given list.

        :param shopping_list_id: List whose ``shoppingListItems`` are updated
        :param item_ids: Ids of the items to delete; ids of items on other lists
            are ignored
        :return: The cascade result
        :raises NotFoundError: If none of the ids match an item of the list
        """
        items = await self.store.find_items(item_ids, shopping_list_id)
        if not items:
            raise NotFoundError("Shopping list items don't exist")

        result = await self._primary(
            "shopping list items",
            shopping_list_id,
            self.store.delete_items([item.id for item in items]),
        )
        if not result.primary_deleted:
            return result

        for item in items:
            await self._step(
                result,
                DETACH_ITEM,
                item.id,
                self.store.remove_shopping_list_item(shopping_list_id, item.id),
            )

        self._report("shopping list items of", shopping_list_id, result)
        return result

    async def remove_allowed_user(
        self,
        shopping_list_id: str,
        user_id: str,
    ) -> CascadeResult:
        """Pull a user from a list's allow-list. Removing twice is a no-op.

        :param shopping_list_id: The list to update
        :param user_id: The user losing access
        :return: The cascade result, without dependent steps
        """
        return await self._primary(
            "allowed user",
            user_id,
            self.store.remove_allowed_user(shopping_list_id, user_id),
        )

    async def _primary(
        self,
        kind: str,
        target_id: str,
        operation: Awaitable[int | bool],
    ) -> CascadeResult:
        try:
            outcome = await operation
        except aiosqlite.Error:
            LOGGER.exception("Failed to delete %s %s", kind, target_id)
            return CascadeResult(primary_deleted=False)
        return CascadeResult(primary_deleted=bool(outcome))

    async def _step(
        self,
        result: CascadeResult,
        name: str,
        target_id: str,
        operation: Awaitable[int | bool],
    ) -> None:
        try:
            await operation
        except aiosqlite.Error as error:
            LOGGER.error("Cascade step %s failed for %s: %s", name, target_id, error)
            result.steps.append(CascadeStep(name, target_id, False, str(error)))
            return
        result.steps.append(CascadeStep(name, target_id, True))

    @staticmethod
    def _report(kind: str, target_id: str, result: CascadeResult) -> None:
        if result.complete:
            LOGGER.debug("Deleted %s %s with %d steps", kind, target_id, len(result.steps))
            return
        LOGGER.warning(
            "Deleted %s %s but %d of %d cascade steps failed",
            kind,
            target_id,
            len(result.failed_steps),
            len(result.steps),
        )
