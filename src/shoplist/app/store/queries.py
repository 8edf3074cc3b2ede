"""Document store queries for roles, users, shopping lists and their items.

Using the EntityStore class as a repository over a single aiosqlite
connection. Each entity lives in its own table, reference sets are stored as
JSON arrays and every write is committed on its own, so the store offers
single-document atomicity and nothing more.
"""

import json
import logging
from collections.abc import Iterable, Sequence
from enum import StrEnum
from typing import Any, TypeVar

import aiosqlite
from aiosqlite import Connection

from shoplist.common import RoleName

from .documents import (
    Document,
    RoleDocument,
    ShoppingListDocument,
    ShoppingListItemDocument,
    UserDocument,
    utc_now,
)

LOGGER = logging.getLogger(__name__)
LOGGER.setLevel(logging.DEBUG)

DocumentT = TypeVar("DocumentT", bound=Document)


class Collection(StrEnum):
    """Tables backing each document type."""

    ROLES = "roles"
    USERS = "users"
    SHOPPING_LISTS = "shopping_lists"
    SHOPPING_LIST_ITEMS = "shopping_list_items"


# Columns holding JSON arrays of ids, per collection.
_ARRAY_COLUMNS: dict[Collection, frozenset[str]] = {
    Collection.ROLES: frozenset(),
    Collection.USERS: frozenset({"shopping_lists"}),
    Collection.SHOPPING_LISTS: frozenset({"shopping_list_items", "allowed_users"}),
    Collection.SHOPPING_LIST_ITEMS: frozenset(),
}

_COLUMNS: dict[Collection, tuple[str, ...]] = {
    Collection.ROLES: ("id", "name", "created_at", "updated_at"),
    Collection.USERS: (
        "id",
        "email",
        "first_name",
        "last_name",
        "hashed_password",
        "role_id",
        "shopping_lists",
        "created_at",
        "updated_at",
    ),
    Collection.SHOPPING_LISTS: (
        "id",
        "name",
        "user_id",
        "shopping_list_items",
        "allowed_users",
        "created_at",
        "updated_at",
    ),
    Collection.SHOPPING_LIST_ITEMS: (
        "id",
        "name",
        "status",
        "shopping_list_id",
        "created_at",
        "updated_at",
    ),
}


class EntityStore:
    """Repository for point operations on every stored entity."""

    CREATE_ROLES_TABLE = """
        CREATE TABLE IF NOT EXISTS roles (
            id TEXT PRIMARY KEY,
            name TEXT NOT NULL UNIQUE,
            created_at TIMESTAMP NOT NULL,
            updated_at TIMESTAMP NOT NULL
        );
        """

    CREATE_USERS_TABLE = """
        CREATE TABLE IF NOT EXISTS users (
            id TEXT PRIMARY KEY,
            email TEXT NOT NULL UNIQUE,
            first_name TEXT,
            last_name TEXT,
            hashed_password TEXT NOT NULL,
            role_id TEXT NOT NULL,
            shopping_lists TEXT NOT NULL DEFAULT '[]',
            created_at TIMESTAMP NOT NULL,
            updated_at TIMESTAMP NOT NULL
        );
        """

    CREATE_SHOPPING_LISTS_TABLE = """
        CREATE TABLE IF NOT EXISTS shopping_lists (
            id TEXT PRIMARY KEY,
            name TEXT NOT NULL,
            user_id TEXT NOT NULL,
            shopping_list_items TEXT NOT NULL DEFAULT '[]',
            allowed_users TEXT NOT NULL DEFAULT '[]',
            created_at TIMESTAMP NOT NULL,
            updated_at TIMESTAMP NOT NULL
        );
        """

    CREATE_SHOPPING_LIST_ITEMS_TABLE = """
        CREATE TABLE IF NOT EXISTS shopping_list_items (
            id TEXT PRIMARY KEY,
            name TEXT NOT NULL,
            status INTEGER NOT NULL,
            shopping_list_id TEXT NOT NULL,
            created_at TIMESTAMP NOT NULL,
            updated_at TIMESTAMP NOT NULL
        );
        """

    CREATE_INDEXES = (
        "CREATE INDEX IF NOT EXISTS idx_lists_user ON shopping_lists (user_id);",
        "CREATE INDEX IF NOT EXISTS idx_items_list "
        "ON shopping_list_items (shopping_list_id);",
    )

    # Appends a value to a JSON array column unless it is already present.
    PUSH_TO_SET = """
        UPDATE {table} SET {column} = json_insert({column}, '$[#]', ?), updated_at = ?
        WHERE id = ?
        AND NOT EXISTS (
            SELECT 1 FROM json_each({table}.{column}) WHERE json_each.value = ?
        );
        """

    PULL_FROM_SET = """
        UPDATE {table} SET {column} = (
            SELECT json_group_array(json_each.value)
            FROM json_each({table}.{column})
            WHERE json_each.value != ?
        ), updated_at = ?
        WHERE id = ?;
        """

    def __init__(self, connection: Connection) -> None:
        """Create an EntityStore instance.

        :param connection: Database connection
        """
        self.connection = connection
        self.connection.row_factory = aiosqlite.Row

    @classmethod
    async def create(cls, db_path: str) -> "EntityStore":
        """Create an EntityStore instance with an aiosqlite connection.

        :param db_path: Path to the SQLite database file
        :return: Configured EntityStore instance
        """
        connection = await aiosqlite.connect(db_path)
        return cls(connection)

    async def close(self) -> None:
        """Close the database connection."""
        await self.connection.close()

    async def initialize_tables(self) -> None:
        """Create the tables if they do not exist and seed the two roles.

        Roles are immutable after this seed; existing roles are left untouched.
        """
        try:
            await self.connection.execute(EntityStore.CREATE_ROLES_TABLE)
            await self.connection.execute(EntityStore.CREATE_USERS_TABLE)
            await self.connection.execute(EntityStore.CREATE_SHOPPING_LISTS_TABLE)
            await self.connection.execute(
                EntityStore.CREATE_SHOPPING_LIST_ITEMS_TABLE,
            )
            for statement in EntityStore.CREATE_INDEXES:
                await self.connection.execute(statement)
            await self.connection.commit()
        except aiosqlite.Error:
            await self.connection.rollback()
            LOGGER.exception("Error initializing tables")
            raise

        for role_name in RoleName:
            if await self.get_role_by_name(role_name) is None:
                await self.insert_role(RoleDocument(name=role_name))
                LOGGER.info("Seeded role %s", role_name)

    async def drop_all(self) -> None:
        """Drop every collection. Only used by the development seeder."""
        for collection in Collection:
            await self._write(f"DROP TABLE IF EXISTS {collection};")  # noqa: S608

    # Roles

    async def get_role(self, role_id: str) -> RoleDocument | None:
        return await self._find_one(RoleDocument, Collection.ROLES, "id = ?", (role_id,))

    async def get_role_by_name(self, name: str) -> RoleDocument | None:
        return await self._find_one(
            RoleDocument,
            Collection.ROLES,
            "name = ?",
            (name,),
        )

    async def list_roles(self) -> list[RoleDocument]:
        return await self._find_many(RoleDocument, Collection.ROLES)

    async def insert_role(self, role: RoleDocument) -> None:
        await self._insert(Collection.ROLES, role)

    # Users

    async def get_user(self, user_id: str) -> UserDocument | None:
        return await self._find_one(UserDocument, Collection.USERS, "id = ?", (user_id,))

    async def get_user_by_email(self, email: str) -> UserDocument | None:
        return await self._find_one(
            UserDocument,
            Collection.USERS,
            "email = ?",
            (email,),
        )

    async def list_users(self) -> list[UserDocument]:
        return await self._find_many(UserDocument, Collection.USERS)

    async def find_users(self, user_ids: Iterable[str]) -> list[UserDocument]:
        """Return the users whose ids are in ``user_ids``, skipping unknown ids."""
        where, params = _in_clause("id", user_ids)
        if not params:
            return []
        return await self._find_many(UserDocument, Collection.USERS, where, params)

    async def insert_user(self, user: UserDocument) -> None:
        await self._insert(Collection.USERS, user)

    async def update_user(self, user_id: str, fields: dict[str, Any]) -> bool:
        return await self._update(Collection.USERS, user_id, fields) > 0

    async def delete_user(self, user_id: str) -> int:
        return await self._delete(Collection.USERS, "id = ?", (user_id,))

    async def add_user_shopping_list(self, user_id: str, shopping_list_id: str) -> bool:
        return await self._push(
            Collection.USERS,
            "shopping_lists",
            user_id,
            shopping_list_id,
        )

    async def remove_user_shopping_list(
        self,
        user_id: str,
        shopping_list_id: str,
    ) -> bool:
        return await self._pull(
            Collection.USERS,
            "shopping_lists",
            user_id,
            shopping_list_id,
        )

    # Shopping lists

    async def get_shopping_list(
        self,
        shopping_list_id: str,
    ) -> ShoppingListDocument | None:
        return await self._find_one(
            ShoppingListDocument,
            Collection.SHOPPING_LISTS,
            "id = ?",
            (shopping_list_id,),
        )

    async def get_shopping_list_by_name(self, name: str) -> ShoppingListDocument | None:
        return await self._find_one(
            ShoppingListDocument,
            Collection.SHOPPING_LISTS,
            "name = ?",
            (name,),
        )

    async def list_shopping_lists(
        self,
        user_id: str | None = None,
    ) -> list[ShoppingListDocument]:
        """List every shopping list, or only those owned by ``user_id``."""
        if user_id is None:
            return await self._find_many(ShoppingListDocument, Collection.SHOPPING_LISTS)
        return await self._find_many(
            ShoppingListDocument,
            Collection.SHOPPING_LISTS,
            "user_id = ?",
            (user_id,),
        )

    async def find_shopping_lists(
        self,
        shopping_list_ids: Iterable[str],
    ) -> list[ShoppingListDocument]:
        where, params = _in_clause("id", shopping_list_ids)
        if not params:
            return []
        return await self._find_many(
            ShoppingListDocument,
            Collection.SHOPPING_LISTS,
            where,
            params,
        )

    async def insert_shopping_list(self, shopping_list: ShoppingListDocument) -> None:
        await self._insert(Collection.SHOPPING_LISTS, shopping_list)

    async def update_shopping_list(
        self,
        shopping_list_id: str,
        fields: dict[str, Any],
    ) -> bool:
        return await self._update(Collection.SHOPPING_LISTS, shopping_list_id, fields) > 0

    async def delete_shopping_list(self, shopping_list_id: str) -> int:
        return await self._delete(
            Collection.SHOPPING_LISTS,
            "id = ?",
            (shopping_list_id,),
        )

    async def add_allowed_user(self, shopping_list_id: str, user_id: str) -> bool:
        return await self._push(
            Collection.SHOPPING_LISTS,
            "allowed_users",
            shopping_list_id,
            user_id,
        )

    async def remove_allowed_user(self, shopping_list_id: str, user_id: str) -> bool:
        return await self._pull(
            Collection.SHOPPING_LISTS,
            "allowed_users",
            shopping_list_id,
            user_id,
        )

    async def add_shopping_list_item(self, shopping_list_id: str, item_id: str) -> bool:
        return await self._push(
            Collection.SHOPPING_LISTS,
            "shopping_list_items",
            shopping_list_id,
            item_id,
        )

    async def remove_shopping_list_item(
        self,
        shopping_list_id: str,
        item_id: str,
    ) -> bool:
        return await self._pull(
            Collection.SHOPPING_LISTS,
            "shopping_list_items",
            shopping_list_id,
            item_id,
        )

    # Shopping list items

    async def get_item(
        self,
        item_id: str,
        shopping_list_id: str,
    ) -> ShoppingListItemDocument | None:
        return await self._find_one(
            ShoppingListItemDocument,
            Collection.SHOPPING_LIST_ITEMS,
            "id = ? AND shopping_list_id = ?",
            (item_id, shopping_list_id),
        )

    async def list_items(self, shopping_list_id: str) -> list[ShoppingListItemDocument]:
        return await self._find_many(
            ShoppingListItemDocument,
            Collection.SHOPPING_LIST_ITEMS,
            "shopping_list_id = ?",
            (shopping_list_id,),
        )

    async def find_items(
        self,
        item_ids: Iterable[str],
        shopping_list_id: str | None = None,
    ) -> list[ShoppingListItemDocument]:
        """Find items by id, optionally only those belonging to one list."""
        where, params = _in_clause("id", item_ids)
        if not params:
            return []
        if shopping_list_id is not None:
            where = f"{where} AND shopping_list_id = ?"
            params = (*params, shopping_list_id)
        return await self._find_many(
            ShoppingListItemDocument,
            Collection.SHOPPING_LIST_ITEMS,
            where,
            params,
        )

    async def insert_items(self, items: Sequence[ShoppingListItemDocument]) -> None:
        """Insert a batch of items in a single commit."""
        if not items:
            return
        columns = _COLUMNS[Collection.SHOPPING_LIST_ITEMS]
        query = _insert_query(Collection.SHOPPING_LIST_ITEMS, columns)
        rows = [_to_row(Collection.SHOPPING_LIST_ITEMS, item) for item in items]
        try:
            await self.connection.executemany(query, rows)
            await self.connection.commit()
        except aiosqlite.Error:
            await self.connection.rollback()
            raise

    async def update_item(
        self,
        item_id: str,
        shopping_list_id: str,
        fields: dict[str, Any],
    ) -> bool:
        updated = await self._update(
            Collection.SHOPPING_LIST_ITEMS,
            item_id,
            fields,
            "shopping_list_id = ?",
            (shopping_list_id,),
        )
        return updated > 0

    async def delete_items(self, item_ids: Iterable[str]) -> int:
        where, params = _in_clause("id", item_ids)
        if not params:
            return 0
        return await self._delete(Collection.SHOPPING_LIST_ITEMS, where, params)

    # Generic helpers

    async def _find_one(
        self,
        model: type[DocumentT],
        collection: Collection,
        where: str,
        params: Sequence[Any],
    ) -> DocumentT | None:
        query = f"SELECT * FROM {collection} WHERE {where} LIMIT 1;"  # noqa: S608
        async with self.connection.execute(query, params) as cursor:
            row = await cursor.fetchone()
        if row is None:
            return None
        return _from_row(model, collection, row)

    async def _find_many(
        self,
        model: type[DocumentT],
        collection: Collection,
        where: str | None = None,
        params: Sequence[Any] = (),
    ) -> list[DocumentT]:
        where_clause = f" WHERE {where}" if where else ""
        query = f"SELECT * FROM {collection}{where_clause} ORDER BY created_at, rowid;"  # noqa: S608
        async with self.connection.execute(query, params) as cursor:
            rows = await cursor.fetchall()
        return [_from_row(model, collection, row) for row in rows]

    async def _insert(self, collection: Collection, document: Document) -> None:
        query = _insert_query(collection, _COLUMNS[collection])
        await self._write(query, _to_row(collection, document))

    async def _update(
        self,
        collection: Collection,
        document_id: str,
        fields: dict[str, Any],
        extra_where: str | None = None,
        extra_params: Sequence[Any] = (),
    ) -> int:
        allowed = set(_COLUMNS[collection]) - {"id", "created_at", "updated_at"}
        unknown = set(fields) - allowed
        if unknown:
            msg = f"Cannot update {sorted(unknown)} on {collection}"
            raise ValueError(msg)

        values = {
            column: json.dumps(value) if column in _ARRAY_COLUMNS[collection] else value
            for column, value in fields.items()
        }
        values["updated_at"] = utc_now().isoformat()

        assignments = ", ".join(f"{column} = ?" for column in values)
        where = "id = ?" + (f" AND {extra_where}" if extra_where else "")
        query = f"UPDATE {collection} SET {assignments} WHERE {where};"  # noqa: S608
        return await self._write(query, (*values.values(), document_id, *extra_params))

    async def _delete(
        self,
        collection: Collection,
        where: str,
        params: Sequence[Any],
    ) -> int:
        query = f"DELETE FROM {collection} WHERE {where};"  # noqa: S608
        return await self._write(query, params)

    async def _push(
        self,
        collection: Collection,
        column: str,
        document_id: str,
        value: str,
    ) -> bool:
        _check_array_column(collection, column)
        query = EntityStore.PUSH_TO_SET.format(table=collection, column=column)
        return (
            await self._write(query, (value, utc_now().isoformat(), document_id, value))
            > 0
        )

    async def _pull(
        self,
        collection: Collection,
        column: str,
        document_id: str,
        value: str,
    ) -> bool:
        _check_array_column(collection, column)
        query = EntityStore.PULL_FROM_SET.format(table=collection, column=column)
        return (
            await self._write(query, (value, utc_now().isoformat(), document_id)) > 0
        )

    async def _write(self, query: str, params: Sequence[Any] = ()) -> int:
        try:
            cursor = await self.connection.execute(query, params)
            await self.connection.commit()
        except aiosqlite.Error:
            await self.connection.rollback()
            raise
        return cursor.rowcount


def _check_array_column(collection: Collection, column: str) -> None:
    if column not in _ARRAY_COLUMNS[collection]:
        msg = f"{column} is not a reference set on {collection}"
        raise ValueError(msg)


def _in_clause(column: str, values: Iterable[str]) -> tuple[str, tuple[str, ...]]:
    params = tuple(dict.fromkeys(values))
    placeholders = ", ".join("?" for _ in params)
    return f"{column} IN ({placeholders})", params


def _insert_query(collection: Collection, columns: Sequence[str]) -> str:
    placeholders = ", ".join("?" for _ in columns)
    return (
        f"INSERT INTO {collection} ({', '.join(columns)}) "  # noqa: S608
        f"VALUES ({placeholders});"
    )


def _to_row(collection: Collection, document: Document) -> tuple[Any, ...]:
    data = document.model_dump(mode="json")
    return tuple(
        json.dumps(data[column]) if column in _ARRAY_COLUMNS[collection] else data[column]
        for column in _COLUMNS[collection]
    )


def _from_row(
    model: type[DocumentT],
    collection: Collection,
    row: aiosqlite.Row,
) -> DocumentT:
    data = {key: row[key] for key in row.keys()}  # noqa: SIM118
    for column in _ARRAY_COLUMNS[collection]:
        data[column] = json.loads(data[column] or "[]")
    return model.model_validate(data)
