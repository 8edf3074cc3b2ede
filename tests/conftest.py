"""Shared fixtures: a fresh SQLite store per test and a configured API client."""

from collections.abc import AsyncIterator, Awaitable, Callable, Iterator

import pytest
import pytest_asyncio
from fastapi.testclient import TestClient

from shoplist.app import configure_fastapi_app
from shoplist.app.auth import SecurityManager
from shoplist.app.store import (
    EntityStore,
    ShoppingListDocument,
    ShoppingListItemDocument,
    UserDocument,
)
from shoplist.common import RoleName
from shoplist.config import AppConfig

TEST_SECRET = "test-secret-" + "0" * 52  # noqa: S105

UserFactory = Callable[..., Awaitable[UserDocument]]
ShoppingListFactory = Callable[..., Awaitable[ShoppingListDocument]]


@pytest.fixture
def security_manager() -> SecurityManager:
    return SecurityManager(secret_key=TEST_SECRET)


@pytest_asyncio.fixture
async def store(tmp_path) -> AsyncIterator[EntityStore]:
    """An initialized store over a temporary database file."""
    entity_store = await EntityStore.create(str(tmp_path / "store.db"))
    await entity_store.initialize_tables()
    yield entity_store
    await entity_store.close()


@pytest.fixture
def make_user(store: EntityStore) -> UserFactory:
    """Insert a user with the given role and a throwaway password hash."""

    async def factory(email: str, role_name: RoleName = RoleName.USER) -> UserDocument:
        role = await store.get_role_by_name(role_name)
        user = UserDocument(
            email=email,
            hashed_password="not-a-hash",  # noqa: S106
            role_id=role.id,
        )
        await store.insert_user(user)
        return user

    return factory


@pytest.fixture
def make_shopping_list(store: EntityStore) -> ShoppingListFactory:
    """Insert a list with its items and record it on every member, as the API does."""

    async def factory(
        owner: UserDocument,
        name: str,
        allowed_users: tuple[UserDocument, ...] = (),
        item_names: tuple[str, ...] = (),
    ) -> ShoppingListDocument:
        shopping_list = ShoppingListDocument(
            name=name,
            user_id=owner.id,
            allowed_users=[user.id for user in allowed_users],
        )
        items = [
            ShoppingListItemDocument(
                name=item_name,
                status=False,
                shopping_list_id=shopping_list.id,
            )
            for item_name in item_names
        ]
        shopping_list.shopping_list_items = [item.id for item in items]

        await store.insert_shopping_list(shopping_list)
        await store.insert_items(items)
        for user in (owner, *allowed_users):
            await store.add_user_shopping_list(user.id, shopping_list.id)
        return shopping_list

    return factory


@pytest.fixture
def app_config(tmp_path) -> AppConfig:
    return AppConfig(
        database_path=str(tmp_path / "api.db"),
        logging_level="DEBUG",
        root_path="",
        environment="test",
        secret_key=TEST_SECRET,
    )


@pytest.fixture
def client(app_config: AppConfig) -> Iterator[TestClient]:
    """Client for an app whose lifespan has already run."""
    app = configure_fastapi_app(app_config)
    with TestClient(app) as test_client:
        yield test_client


def login(client: TestClient, email: str, password: str) -> dict[str, str]:
    """Log in through the API and return the bearer header."""
    response = client.post("/api/login", json={"email": email, "password": password})
    assert response.status_code == 200, response.text  # noqa: PLR2004
    return {"Authorization": f"Bearer {response.json()['response']}"}


@pytest.fixture
def seeded_client(client: TestClient) -> TestClient:
    """Client whose store holds the dummy seed data."""
    response = client.post("/api/dummy-seed")
    assert response.status_code == 200, response.text  # noqa: PLR2004
    return client


@pytest.fixture
def admin_headers(seeded_client: TestClient) -> dict[str, str]:
    return login(seeded_client, "admin@gmail.com", "adminPassword")


@pytest.fixture
def user_headers(seeded_client: TestClient) -> dict[str, str]:
    return login(seeded_client, "user@gmail.com", "userPassword")


@pytest.fixture
def stranger_headers(seeded_client: TestClient) -> dict[str, str]:
    """A registered user that owns nothing and is allowed on nothing."""
    response = seeded_client.post(
        "/api/user/register",
        json={
            "email": "stranger@gmail.com",
            "firstName": "Stranger",
            "lastName": "Danger",
            "password": "strangerPassword",
        },
    )
    assert response.status_code == 201, response.text  # noqa: PLR2004
    return login(seeded_client, "stranger@gmail.com", "strangerPassword")


@pytest.fixture
def login_as(seeded_client: TestClient) -> Callable[[str, str], dict[str, str]]:
    def factory(email: str, password: str) -> dict[str, str]:
        return login(seeded_client, email, password)

    return factory


@pytest.fixture
def user_id_of(
    seeded_client: TestClient,
    admin_headers: dict[str, str],
) -> Callable[[str], str]:
    """Look up a user id by email through the admin view."""

    def lookup(email: str) -> str:
        users = seeded_client.get("/api/users", headers=admin_headers).json()
        return next(user["id"] for user in users if user["email"] == email)

    return lookup


@pytest.fixture
def shopping_list_id_of(
    seeded_client: TestClient,
    admin_headers: dict[str, str],
) -> Callable[[str], str]:
    """Look up a shopping list id by name through the admin view."""

    def lookup(name: str) -> str:
        shopping_lists = seeded_client.get(
            "/api/shopping-lists",
            headers=admin_headers,
        ).json()
        return next(
            shopping_list["id"]
            for shopping_list in shopping_lists
            if shopping_list["name"] == name
        )

    return lookup
