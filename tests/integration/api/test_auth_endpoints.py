"""API tests for authentication endpoints."""

from fastapi.testclient import TestClient

from roster.presentation.api.routers.auth import REFRESH_TOKEN_COOKIE


class TestRegister:
    def test_first_user_becomes_admin(
        self,
        test_client: TestClient,
        api_prefix: str,
        admin_data: dict,
    ):
        response = test_client.post(f"{api_prefix}/auth/register", json=admin_data)

        assert response.status_code == 201
        data = response.json()
        assert data["user"]["email"] == admin_data["email"]
        assert data["user"]["role"] == "Admin"
        assert data["tokenType"] == "bearer"
        assert data["expiresIn"] == 15 * 60
        assert data["accessToken"]
        assert data["refreshToken"]
        assert REFRESH_TOKEN_COOKIE in response.cookies

    def test_second_user_is_regular_user(
        self,
        test_client: TestClient,
        api_prefix: str,
        admin_headers: dict,
        user_data: dict,
    ):
        response = test_client.post(f"{api_prefix}/auth/register", json=user_data)

        assert response.status_code == 201
        assert response.json()["user"]["role"] == "User"

    def test_duplicate_email_returns_409(
        self,
        test_client: TestClient,
        api_prefix: str,
        admin_data: dict,
    ):
        test_client.post(f"{api_prefix}/auth/register", json=admin_data)

        response = test_client.post(
            f"{api_prefix}/auth/register",
            json={**admin_data, "email": admin_data["email"].upper()},
        )

        assert response.status_code == 409

    def test_password_without_digit_returns_400(
        self,
        test_client: TestClient,
        api_prefix: str,
    ):
        response = test_client.post(
            f"{api_prefix}/auth/register",
            json={"email": "weak@example.com", "password": "onlyletters"},
        )

        assert response.status_code == 400

    def test_short_password_fails_request_validation(
        self,
        test_client: TestClient,
        api_prefix: str,
    ):
        response = test_client.post(
            f"{api_prefix}/auth/register",
            json={"email": "weak@example.com", "password": "a1"},
        )

        assert response.status_code == 422

    def test_admin_only_mode_closes_registration_after_first_user(
        self,
        api_settings,
        make_client,
        api_prefix: str,
        admin_data: dict,
        user_data: dict,
    ):
        settings = api_settings.model_copy(update={"registration_mode": "admin_only"})
        client = make_client(settings)

        first = client.post(f"{api_prefix}/auth/register", json=admin_data)
        second = client.post(f"{api_prefix}/auth/register", json=user_data)

        assert first.status_code == 201
        assert second.status_code == 403


class TestLogin:
    def test_login_returns_tokens(
        self,
        test_client: TestClient,
        api_prefix: str,
        admin_headers: dict,
        admin_data: dict,
    ):
        response = test_client.post(
            f"{api_prefix}/auth/login",
            json={"email": admin_data["email"], "password": admin_data["password"]},
        )

        assert response.status_code == 200
        assert response.json()["user"]["email"] == admin_data["email"]
        assert response.json()["accessToken"]

    def test_wrong_password_returns_401(
        self,
        test_client: TestClient,
        api_prefix: str,
        admin_headers: dict,
        admin_data: dict,
    ):
        response = test_client.post(
            f"{api_prefix}/auth/login",
            json={"email": admin_data["email"], "password": "WrongPassword1"},
        )

        assert response.status_code == 401

    def test_unknown_email_returns_401(self, test_client: TestClient, api_prefix: str):
        response = test_client.post(
            f"{api_prefix}/auth/login",
            json={"email": "nobody@example.com", "password": "Whatever123"},
        )

        assert response.status_code == 401

    def test_account_locks_after_repeated_failures(
        self,
        test_client: TestClient,
        api_prefix: str,
        api_settings,
        admin_headers: dict,
        admin_data: dict,
    ):
        wrong = {"email": admin_data["email"], "password": "WrongPassword1"}
        for _ in range(api_settings.max_failed_login_attempts):
            assert (
                test_client.post(f"{api_prefix}/auth/login", json=wrong).status_code
                == 401
            )

        # The correct password no longer helps while locked
        response = test_client.post(
            f"{api_prefix}/auth/login",
            json={"email": admin_data["email"], "password": admin_data["password"]},
        )

        assert response.status_code == 423


class TestRefresh:
    def test_refresh_rotates_tokens(
        self,
        test_client: TestClient,
        api_prefix: str,
        admin_data: dict,
    ):
        registered = test_client.post(f"{api_prefix}/auth/register", json=admin_data)
        old_refresh = registered.json()["refreshToken"]

        response = test_client.post(
            f"{api_prefix}/auth/refresh",
            json={"refreshToken": old_refresh},
        )

        assert response.status_code == 200
        data = response.json()
        assert data["accessToken"]
        assert data["refreshToken"] != old_refresh

    def test_reused_refresh_token_revokes_the_family(
        self,
        test_client: TestClient,
        api_prefix: str,
        admin_data: dict,
    ):
        registered = test_client.post(f"{api_prefix}/auth/register", json=admin_data)
        old_refresh = registered.json()["refreshToken"]
        rotated = test_client.post(
            f"{api_prefix}/auth/refresh",
            json={"refreshToken": old_refresh},
        ).json()["refreshToken"]

        reuse = test_client.post(
            f"{api_prefix}/auth/refresh",
            json={"refreshToken": old_refresh},
        )
        after_reuse = test_client.post(
            f"{api_prefix}/auth/refresh",
            json={"refreshToken": rotated},
        )

        assert reuse.status_code == 401
        assert after_reuse.status_code == 401

    def test_refresh_from_cookie(
        self,
        test_client: TestClient,
        api_prefix: str,
        admin_data: dict,
    ):
        registered = test_client.post(f"{api_prefix}/auth/register", json=admin_data)
        assert REFRESH_TOKEN_COOKIE in registered.cookies

        # No body: the token comes from the cookie jar
        response = test_client.post(f"{api_prefix}/auth/refresh")

        assert response.status_code == 200
        assert response.json()["refreshToken"] != registered.json()["refreshToken"]

    def test_access_token_cannot_refresh(
        self,
        test_client: TestClient,
        api_prefix: str,
        admin_data: dict,
    ):
        registered = test_client.post(f"{api_prefix}/auth/register", json=admin_data)
        test_client.cookies.clear()

        response = test_client.post(
            f"{api_prefix}/auth/refresh",
            json={"refreshToken": registered.json()["accessToken"]},
        )

        assert response.status_code == 401

    def test_missing_token_returns_401(self, test_client: TestClient, api_prefix: str):
        response = test_client.post(f"{api_prefix}/auth/refresh")

        assert response.status_code == 401


class TestLogoutAndMe:
    def test_me_returns_current_user(
        self,
        test_client: TestClient,
        api_prefix: str,
        admin_headers: dict,
        admin_data: dict,
    ):
        response = test_client.get(f"{api_prefix}/auth/me", headers=admin_headers)

        assert response.status_code == 200
        assert response.json()["email"] == admin_data["email"]
        assert response.json()["firstName"] == "Ada"

    def test_me_requires_token(self, test_client: TestClient, api_prefix: str):
        assert test_client.get(f"{api_prefix}/auth/me").status_code == 401

    def test_me_rejects_garbage_token(self, test_client: TestClient, api_prefix: str):
        response = test_client.get(
            f"{api_prefix}/auth/me",
            headers={"Authorization": "Bearer not-a-jwt"},
        )

        assert response.status_code == 401

    def test_logout_revokes_refresh_tokens(
        self,
        test_client: TestClient,
        api_prefix: str,
        admin_data: dict,
    ):
        registered = test_client.post(
            f"{api_prefix}/auth/register",
            json=admin_data,
        ).json()
        headers = {"Authorization": f"Bearer {registered['accessToken']}"}

        logout = test_client.post(f"{api_prefix}/auth/logout", headers=headers)
        test_client.cookies.clear()
        refresh = test_client.post(
            f"{api_prefix}/auth/refresh",
            json={"refreshToken": registered["refreshToken"]},
        )

        assert logout.status_code == 204
        assert refresh.status_code == 401
