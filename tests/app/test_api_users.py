"""HTTP tests for registration, user views, updates and account deletion."""

from collections.abc import Callable

from fastapi.testclient import TestClient

from shoplist.app.store import new_id

PUBLIC_FIELDS = {"id", "email", "firstName", "lastName", "createdAt", "updatedAt"}


class TestRegistration:
    """Test suite for public registration and admin creation."""

    def test_register(self, seeded_client: TestClient, login_as) -> None:
        response = seeded_client.post(
            "/api/user/register",
            json={
                "email": "new@gmail.com",
                "firstName": "New",
                "lastName": "User",
                "password": "newPassword",
            },
        )

        assert response.status_code == 201  # noqa: PLR2004
        assert response.json() == {"message": "User successfully registered"}
        assert login_as("new@gmail.com", "newPassword")

    def test_register_duplicate_email(self, seeded_client: TestClient) -> None:
        response = seeded_client.post(
            "/api/user/register",
            json={
                "email": "user@gmail.com",
                "firstName": "Again",
                "lastName": "User",
                "password": "userPassword",
            },
        )

        assert response.status_code == 409  # noqa: PLR2004
        assert response.json() == {"message": "User exists"}

    def test_register_short_password(self, seeded_client: TestClient) -> None:
        response = seeded_client.post(
            "/api/user/register",
            json={
                "email": "short@gmail.com",
                "firstName": "Short",
                "lastName": "Password",
                "password": "abc",
            },
        )

        assert response.status_code == 400  # noqa: PLR2004
        assert "at least 4" in response.json()["message"]

    def test_register_short_name(self, seeded_client: TestClient) -> None:
        response = seeded_client.post(
            "/api/user/register",
            json={
                "email": "short@gmail.com",
                "firstName": "S",
                "lastName": "Name",
                "password": "longEnough",
            },
        )

        assert response.status_code == 400  # noqa: PLR2004

    def test_admin_creates_admin(
        self,
        seeded_client: TestClient,
        admin_headers: dict[str, str],
        login_as,
    ) -> None:
        roles = seeded_client.get("/api/roles", headers=admin_headers).json()
        admin_role_id = next(role["id"] for role in roles if role["name"] == "admin")

        response = seeded_client.post(
            "/api/user/create",
            json={
                "email": "second-admin@gmail.com",
                "password": "secondPassword",
                "roleId": admin_role_id,
            },
            headers=admin_headers,
        )
        assert response.status_code == 201  # noqa: PLR2004

        headers = login_as("second-admin@gmail.com", "secondPassword")
        assert seeded_client.get("/api/roles", headers=headers).status_code == 200  # noqa: PLR2004

    def test_create_with_unknown_role(
        self,
        seeded_client: TestClient,
        admin_headers: dict[str, str],
    ) -> None:
        response = seeded_client.post(
            "/api/user/create",
            json={"email": "x@gmail.com", "password": "xPassword", "roleId": new_id()},
            headers=admin_headers,
        )

        assert response.status_code == 404  # noqa: PLR2004

    def test_create_requires_admin(
        self,
        seeded_client: TestClient,
        user_headers: dict[str, str],
    ) -> None:
        response = seeded_client.post(
            "/api/user/create",
            json={"email": "x@gmail.com", "password": "xPassword", "roleId": new_id()},
            headers=user_headers,
        )

        assert response.status_code == 401  # noqa: PLR2004


class TestUserViews:
    """Test suite for what admins and simple users can see."""

    def test_admin_view_is_populated(
        self,
        seeded_client: TestClient,
        admin_headers: dict[str, str],
    ) -> None:
        users = seeded_client.get("/api/users", headers=admin_headers).json()
        simple = next(user for user in users if user["email"] == "user@gmail.com")

        assert simple["role"]["name"] == "user"
        assert simple["roleId"] == simple["role"]["id"]
        assert {shopping_list["name"] for shopping_list in simple["shoppingLists"]} == {
            "test01",
            "test02",
            "test03",
        }
        assert "hashedPassword" not in simple

    def test_user_view_hides_role_and_lists(
        self,
        seeded_client: TestClient,
        user_headers: dict[str, str],
    ) -> None:
        users = seeded_client.get("/api/users", headers=user_headers).json()

        assert len(users) == 2  # noqa: PLR2004
        for user in users:
            assert set(user) == PUBLIC_FIELDS

    def test_get_single_user(
        self,
        seeded_client: TestClient,
        user_headers: dict[str, str],
        admin_headers: dict[str, str],
        user_id_of: Callable[[str], str],
    ) -> None:
        admin_id = user_id_of("admin@gmail.com")

        as_user = seeded_client.get(f"/api/user/{admin_id}", headers=user_headers)
        as_admin = seeded_client.get(f"/api/user/{admin_id}", headers=admin_headers)

        assert as_user.status_code == 200  # noqa: PLR2004
        assert set(as_user.json()) == PUBLIC_FIELDS
        assert as_admin.json()["role"]["name"] == "admin"

    def test_get_missing_user(
        self,
        seeded_client: TestClient,
        user_headers: dict[str, str],
    ) -> None:
        response = seeded_client.get(f"/api/user/{new_id()}", headers=user_headers)

        assert response.status_code == 404  # noqa: PLR2004


class TestUpdateUser:
    """Test suite for profile updates."""

    def test_owner_updates_profile(
        self,
        seeded_client: TestClient,
        user_headers: dict[str, str],
        user_id_of: Callable[[str], str],
        login_as,
    ) -> None:
        user_id = user_id_of("user@gmail.com")

        response = seeded_client.patch(
            f"/api/user/{user_id}",
            json={"firstName": "Renamed", "password": "changedPassword"},
            headers=user_headers,
        )

        assert response.status_code == 201  # noqa: PLR2004
        assert response.json() == {"message": "User successfully updated"}
        user = seeded_client.get(f"/api/user/{user_id}", headers=user_headers).json()
        assert user["firstName"] == "Renamed"
        assert login_as("user@gmail.com", "changedPassword")

    def test_owner_cannot_change_role(
        self,
        seeded_client: TestClient,
        user_headers: dict[str, str],
        admin_headers: dict[str, str],
        user_id_of: Callable[[str], str],
    ) -> None:
        """Only an admin decision unlocks role changes."""
        roles = seeded_client.get("/api/roles", headers=admin_headers).json()
        admin_role_id = next(role["id"] for role in roles if role["name"] == "admin")
        user_id = user_id_of("user@gmail.com")

        response = seeded_client.patch(
            f"/api/user/{user_id}",
            json={"roleId": admin_role_id},
            headers=user_headers,
        )

        assert response.status_code == 401  # noqa: PLR2004
        assert seeded_client.get("/api/roles", headers=user_headers).status_code == 401  # noqa: PLR2004

    def test_admin_changes_role(
        self,
        seeded_client: TestClient,
        admin_headers: dict[str, str],
        user_id_of: Callable[[str], str],
        login_as,
    ) -> None:
        roles = seeded_client.get("/api/roles", headers=admin_headers).json()
        admin_role_id = next(role["id"] for role in roles if role["name"] == "admin")
        user_id = user_id_of("user@gmail.com")

        response = seeded_client.patch(
            f"/api/user/{user_id}",
            json={"roleId": admin_role_id},
            headers=admin_headers,
        )

        assert response.status_code == 201  # noqa: PLR2004
        promoted = login_as("user@gmail.com", "userPassword")
        assert seeded_client.get("/api/roles", headers=promoted).status_code == 200  # noqa: PLR2004

    def test_admin_unknown_role(
        self,
        seeded_client: TestClient,
        admin_headers: dict[str, str],
        user_id_of: Callable[[str], str],
    ) -> None:
        response = seeded_client.patch(
            f"/api/user/{user_id_of('user@gmail.com')}",
            json={"roleId": new_id()},
            headers=admin_headers,
        )

        assert response.status_code == 404  # noqa: PLR2004

    def test_email_taken(
        self,
        seeded_client: TestClient,
        user_headers: dict[str, str],
        user_id_of: Callable[[str], str],
    ) -> None:
        response = seeded_client.patch(
            f"/api/user/{user_id_of('user@gmail.com')}",
            json={"email": "admin@gmail.com"},
            headers=user_headers,
        )

        assert response.status_code == 409  # noqa: PLR2004

    def test_other_user_is_not_authorized(
        self,
        seeded_client: TestClient,
        stranger_headers: dict[str, str],
        user_id_of: Callable[[str], str],
    ) -> None:
        response = seeded_client.patch(
            f"/api/user/{user_id_of('user@gmail.com')}",
            json={"firstName": "Hacked"},
            headers=stranger_headers,
        )

        assert response.status_code == 401  # noqa: PLR2004

    def test_admin_updates_missing_user(
        self,
        seeded_client: TestClient,
        admin_headers: dict[str, str],
    ) -> None:
        response = seeded_client.patch(
            f"/api/user/{new_id()}",
            json={"firstName": "Ghost"},
            headers=admin_headers,
        )

        assert response.status_code == 404  # noqa: PLR2004


class TestDeleteUser:
    """Test suite for account deletion over HTTP."""

    def test_self_deletion(
        self,
        seeded_client: TestClient,
        stranger_headers: dict[str, str],
        admin_headers: dict[str, str],
        user_id_of: Callable[[str], str],
    ) -> None:
        stranger_id = user_id_of("stranger@gmail.com")

        response = seeded_client.delete(f"/api/user/{stranger_id}", headers=stranger_headers)

        assert response.status_code == 204  # noqa: PLR2004
        assert response.content == b""
        missing = seeded_client.get(f"/api/user/{stranger_id}", headers=admin_headers)
        assert missing.status_code == 404  # noqa: PLR2004

    def test_cannot_delete_others(
        self,
        seeded_client: TestClient,
        stranger_headers: dict[str, str],
        user_id_of: Callable[[str], str],
    ) -> None:
        response = seeded_client.delete(
            f"/api/user/{user_id_of('user@gmail.com')}",
            headers=stranger_headers,
        )

        assert response.status_code == 401  # noqa: PLR2004

    def test_admin_deletes_missing_user(
        self,
        seeded_client: TestClient,
        admin_headers: dict[str, str],
    ) -> None:
        response = seeded_client.delete(f"/api/user/{new_id()}", headers=admin_headers)

        assert response.status_code == 404  # noqa: PLR2004
