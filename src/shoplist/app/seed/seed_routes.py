"""Development-only route that resets the store to known dummy data."""

import logging

import aiosqlite
from fastapi import APIRouter

from shoplist.app.auth import SecurityManager
from shoplist.app.store import EntityStore
from shoplist.common import BadRequestError, ForbiddenError, MessageResponse

from .data import build_dummy_data

LOGGER = logging.getLogger(__name__)
LOGGER.setLevel(logging.DEBUG)


async def seed_dummy_data(
    store: EntityStore,
    security_manager: SecurityManager,
) -> None:
    """Drop every collection and load the dummy data.

    :raises BadRequestError: If any write fails, leaving the store partially seeded
    """
    try:
        await store.drop_all()
        await store.initialize_tables()

        roles = {role.name: role for role in await store.list_roles()}
        data = build_dummy_data(roles, security_manager)

        for user in data.users:
            await store.insert_user(user)
        for shopping_list in data.shopping_lists:
            await store.insert_shopping_list(shopping_list)
        await store.insert_items(data.items)
    except aiosqlite.Error:
        LOGGER.exception("Database seeding has been unsuccessful")
        raise BadRequestError("Database seeding has been unsuccessful") from None

    LOGGER.info(
        "Seeded %d users, %d shopping lists and %d items",
        len(data.users),
        len(data.shopping_lists),
        len(data.items),
    )


def configure_seed_router(
    router: APIRouter,
    store: EntityStore,
    security_manager: SecurityManager,
    seeding_enabled: bool,
) -> APIRouter:
    """Configure the dummy seed router.

    :param router: The APIRouter to configure
    :param store: The EntityStore to reset
    :param security_manager: Used to hash the dummy passwords
    :param seeding_enabled: Whether the environment allows seeding
    :return: The configured APIRouter
    """

    @router.post("/dummy-seed", response_model=MessageResponse)
    async def dummy_seed() -> MessageResponse:
        if not seeding_enabled:
            raise ForbiddenError("Cannot run dummy seed")
        await seed_dummy_data(store, security_manager)
        return MessageResponse(message="Seed successfully")

    return router
