"""Dummy data loaded by the development seeder."""

from dataclasses import dataclass, field

from shoplist.app.auth import SecurityManager
from shoplist.app.store import (
    RoleDocument,
    ShoppingListDocument,
    ShoppingListItemDocument,
    UserDocument,
)
from shoplist.common import RoleName

# email, password, first name, last name, role
DUMMY_USERS = (
    ("admin@gmail.com", "adminPassword", "Admin", "Admin", RoleName.ADMIN),
    ("user@gmail.com", "userPassword", "Simple", "User", RoleName.USER),
)

# name, index of the owner in DUMMY_USERS, indexes of the allowed users
DUMMY_SHOPPING_LISTS = (
    ("test01", 0, (1,)),
    ("test02", 0, (1,)),
    ("test03", 1, (0,)),
)

# name, index of the list in DUMMY_SHOPPING_LISTS
DUMMY_SHOPPING_LIST_ITEMS = (
    ("test01 - 01", 0),
    ("test01 - 02", 0),
    ("test01 - 03", 0),
    ("test02 - 01", 1),
    ("test02 - 02", 1),
    ("test03 - 01", 2),
    ("test03 - 02", 2),
)


@dataclass
class DummyData:
    users: list[UserDocument] = field(default_factory=list)
    shopping_lists: list[ShoppingListDocument] = field(default_factory=list)
    items: list[ShoppingListItemDocument] = field(default_factory=list)


def build_dummy_data(
    roles: dict[str, RoleDocument],
    security_manager: SecurityManager,
) -> DummyData:
    """Build linked dummy documents with every reference set filled in.

    :param roles: Seeded roles keyed by name
    :param security_manager: Used to hash the dummy passwords
    :return: Users, lists and items ready to insert
    """
    data = DummyData()

    for email, password, first_name, last_name, role_name in DUMMY_USERS:
        data.users.append(
            UserDocument(
                email=email,
                hashed_password=security_manager.hash_password(password),
                role_id=roles[role_name].id,
                first_name=first_name,
                last_name=last_name,
            ),
        )

    for name, owner_index, allowed_indexes in DUMMY_SHOPPING_LISTS:
        owner = data.users[owner_index]
        allowed_users = [data.users[index] for index in allowed_indexes]
        shopping_list = ShoppingListDocument(
            name=name,
            user_id=owner.id,
            allowed_users=[user.id for user in allowed_users],
        )
        data.shopping_lists.append(shopping_list)
        for user in (owner, *allowed_users):
            user.shopping_lists.append(shopping_list.id)

    for name, list_index in DUMMY_SHOPPING_LIST_ITEMS:
        shopping_list = data.shopping_lists[list_index]
        item = ShoppingListItemDocument(
            name=name,
            status=False,
            shopping_list_id=shopping_list.id,
        )
        data.items.append(item)
        shopping_list.shopping_list_items.append(item.id)

    return data
