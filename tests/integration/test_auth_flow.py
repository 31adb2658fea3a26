"""Integration tests for authentication flow over HTTP."""

import pytest
from fastapi import BackgroundTasks

from ibcrm.api.routers.auth import forgot_password as forgot_password_route
from ibcrm.api.schemas.auth import ForgotPasswordRequest, PasswordResetResponse

PASSWORD = "Sup3rSecret"
NEW_PASSWORD = "N3wSecretPass"


async def signup(client, email="flow@example.com", password=PASSWORD, **extra):
    response = await client.post("/auth/signup", json={"email": email, "password": password, **extra})
    assert response.status_code == 201, response.text
    return response


def bearer(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


def refresh_cookie(response) -> str:
    token = response.cookies.get("refreshToken")
    assert token, "refresh cookie not set"
    return token


class TestSignupEndpoint:
    """POST /auth/signup."""

    @pytest.mark.asyncio
    async def test_signup_returns_camel_case_body_and_cookie(self, client):
        response = await signup(
            client,
            profile={"firstName": "Alice", "lastName": "Smith", "graduationYear": 2026},
        )
        body = response.json()

        assert body["success"] is True
        assert body["message"] == "User created successfully"
        assert body["accessToken"]
        assert body["tokenType"] == "bearer"
        assert body["user"]["email"] == "flow@example.com"
        assert body["user"]["role"] == "user"
        assert body["user"]["status"] == "active"
        assert body["user"]["emailVerified"] is False
        assert body["user"]["profile"]["firstName"] == "Alice"
        assert body["user"]["profile"]["graduationYear"] == 2026
        assert "passwordHash" not in body["user"]
        assert "refreshTokens" not in body["user"]

        set_cookie = response.headers["set-cookie"].lower()
        assert "refreshtoken=" in set_cookie
        assert "httponly" in set_cookie
        assert "max-age=604800" in set_cookie

    @pytest.mark.asyncio
    async def test_duplicate_email_any_case(self, client):
        await signup(client, email="dup@example.com")

        response = await client.post(
            "/auth/signup", json={"email": "DUP@Example.com", "password": PASSWORD}
        )

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "DUPLICATE_EMAIL"

    @pytest.mark.asyncio
    async def test_weak_password(self, client):
        response = await client.post(
            "/auth/signup", json={"email": "weak@example.com", "password": "alllowercase1"}
        )

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "WEAK_PASSWORD"

    @pytest.mark.asyncio
    async def test_missing_password(self, client):
        response = await client.post("/auth/signup", json={"email": "nopass@example.com"})

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "MISSING_CREDENTIALS"

    @pytest.mark.asyncio
    async def test_malformed_email(self, client):
        response = await client.post(
            "/auth/signup", json={"email": "not-an-email", "password": PASSWORD}
        )

        assert response.status_code == 422
        assert response.json()["error"]["code"] == "VALIDATION_ERROR"

    @pytest.mark.asyncio
    async def test_graduation_year_out_of_range(self, client):
        response = await client.post(
            "/auth/signup",
            json={"email": "old@example.com", "password": PASSWORD, "profile": {"graduationYear": 1900}},
        )

        assert response.status_code == 422


class TestLoginEndpoint:
    """POST /auth/login and lockout."""

    @pytest.mark.asyncio
    async def test_login_success(self, client):
        await signup(client, email="login@example.com")

        response = await client.post(
            "/auth/login", json={"email": "Login@Example.com", "password": PASSWORD}
        )

        assert response.status_code == 200
        body = response.json()
        assert body["message"] == "Login successful"
        assert body["user"]["lastLogin"] is not None
        assert refresh_cookie(response)

    @pytest.mark.asyncio
    async def test_unknown_email_and_wrong_password_look_alike(self, client):
        await signup(client, email="known@example.com")

        unknown = await client.post(
            "/auth/login", json={"email": "unknown@example.com", "password": PASSWORD}
        )
        wrong = await client.post(
            "/auth/login", json={"email": "known@example.com", "password": "Wr0ngPassword"}
        )

        assert unknown.status_code == wrong.status_code == 401
        assert unknown.json()["error"] == wrong.json()["error"]
        assert unknown.json()["error"]["code"] == "INVALID_CREDENTIALS"

    @pytest.mark.asyncio
    async def test_lockout_after_five_failures(self, client):
        await signup(client, email="lockme@example.com")
        bad = {"email": "lockme@example.com", "password": "Wr0ngPassword"}

        statuses = [(await client.post("/auth/login", json=bad)).status_code for _ in range(5)]
        correct = await client.post(
            "/auth/login", json={"email": "lockme@example.com", "password": PASSWORD}
        )

        assert statuses == [401, 401, 401, 401, 423]
        assert correct.status_code == 423
        assert correct.json()["error"]["code"] == "ACCOUNT_LOCKED"

    @pytest.mark.asyncio
    async def test_missing_credentials(self, client):
        response = await client.post("/auth/login", json={})

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "MISSING_CREDENTIALS"


class TestSessionLifecycle:
    """Refresh, logout and password changes."""

    @pytest.mark.asyncio
    async def test_refresh_with_body_token(self, client):
        response = await signup(client, email="refresh@example.com")
        token = refresh_cookie(response)

        refreshed = await client.post("/auth/refresh", json={"refreshToken": token})

        assert refreshed.status_code == 200
        access = refreshed.json()["accessToken"]
        verify = await client.get("/auth/verify", headers=bearer(access))
        assert verify.status_code == 200
        assert verify.json()["user"]["email"] == "refresh@example.com"

    @pytest.mark.asyncio
    async def test_refresh_with_cookie(self, client):
        response = await signup(client, email="cookie@example.com")
        token = refresh_cookie(response)

        refreshed = await client.post("/auth/refresh", headers={"Cookie": f"refreshToken={token}"})

        assert refreshed.status_code == 200
        assert refreshed.json()["accessToken"]

    @pytest.mark.asyncio
    async def test_refresh_without_token(self, client):
        client.cookies.clear()

        response = await client.post("/auth/refresh", json={})

        assert response.status_code == 401
        assert response.json()["error"]["code"] == "MISSING_REFRESH_TOKEN"

    @pytest.mark.asyncio
    async def test_refresh_with_access_token(self, client):
        response = await signup(client, email="misuse@example.com")

        refreshed = await client.post(
            "/auth/refresh", json={"refreshToken": response.json()["accessToken"]}
        )

        assert refreshed.status_code == 401
        assert refreshed.json()["error"]["code"] == "INVALID_REFRESH_TOKEN"

    @pytest.mark.asyncio
    async def test_logout_revokes_refresh_token(self, client):
        response = await signup(client, email="logout@example.com")
        access = response.json()["accessToken"]
        token = refresh_cookie(response)

        logout = await client.post(
            "/auth/logout", json={"refreshToken": token}, headers=bearer(access)
        )
        refreshed = await client.post("/auth/refresh", json={"refreshToken": token})

        assert logout.status_code == 200
        assert logout.json()["message"] == "Logged out successfully"
        assert 'refreshtoken=""' in logout.headers["set-cookie"].lower()
        assert refreshed.status_code == 401
        assert refreshed.json()["error"]["code"] == "INVALID_REFRESH_TOKEN"

    @pytest.mark.asyncio
    async def test_logout_requires_access_token(self, client):
        response = await client.post("/auth/logout", json={})

        assert response.status_code == 401
        assert response.json()["error"]["code"] == "MISSING_TOKEN"

    @pytest.mark.asyncio
    async def test_logout_all(self, client):
        first = await signup(client, email="everywhere@example.com")
        second = await client.post(
            "/auth/login", json={"email": "everywhere@example.com", "password": PASSWORD}
        )

        response = await client.post(
            "/auth/logout-all", headers=bearer(second.json()["accessToken"])
        )

        assert response.status_code == 200
        for issued in (first, second):
            refreshed = await client.post(
                "/auth/refresh", json={"refreshToken": refresh_cookie(issued)}
            )
            assert refreshed.status_code == 401

    @pytest.mark.asyncio
    async def test_change_password_revokes_sessions(self, client):
        response = await signup(client, email="rotate@example.com")
        access = response.json()["accessToken"]
        old_refresh = refresh_cookie(response)

        changed = await client.post(
            "/auth/change-password",
            json={"currentPassword": PASSWORD, "newPassword": NEW_PASSWORD},
            headers=bearer(access),
        )

        assert changed.status_code == 200
        assert (
            await client.post("/auth/refresh", json={"refreshToken": old_refresh})
        ).status_code == 401
        assert (
            await client.post(
                "/auth/login", json={"email": "rotate@example.com", "password": PASSWORD}
            )
        ).status_code == 401
        assert (
            await client.post(
                "/auth/login", json={"email": "rotate@example.com", "password": NEW_PASSWORD}
            )
        ).status_code == 200

    @pytest.mark.asyncio
    async def test_change_password_wrong_current(self, client):
        response = await signup(client, email="wrongcurrent@example.com")

        changed = await client.post(
            "/auth/change-password",
            json={"currentPassword": "Wr0ngPassword", "newPassword": NEW_PASSWORD},
            headers=bearer(response.json()["accessToken"]),
        )

        assert changed.status_code == 400
        assert changed.json()["error"]["code"] == "INVALID_CURRENT_PASSWORD"


class TestPasswordReset:
    """Forgot and reset password."""

    @pytest.mark.asyncio
    async def test_forgot_password_answers_identically(self, client, notifier):
        await signup(client, email="exists@example.com")

        known = await client.post("/auth/forgot-password", json={"email": "exists@example.com"})
        unknown = await client.post("/auth/forgot-password", json={"email": "ghost@example.com"})

        assert known.status_code == unknown.status_code == 200
        assert known.json() == unknown.json()
        assert [email for email, _ in notifier.sent] == ["exists@example.com"]

    @pytest.mark.asyncio
    async def test_forgot_password_work_runs_after_response(self, auth_service, store, notifier):
        signup_result = await auth_service.signup("deferred@example.com", PASSWORD)
        tasks = BackgroundTasks()

        answer = await forgot_password_route(
            ForgotPasswordRequest(email="deferred@example.com"), tasks, auth_service
        )

        assert answer == PasswordResetResponse()
        assert notifier.sent == []
        assert (await store.find_by_id(signup_result.user.id)).password_reset_token is None

        await tasks()

        assert [email for email, _ in notifier.sent] == ["deferred@example.com"]
        assert (await store.find_by_id(signup_result.user.id)).password_reset_token

    @pytest.mark.asyncio
    async def test_full_reset_flow(self, client, notifier):
        response = await signup(client, email="resetme@example.com")
        old_refresh = refresh_cookie(response)
        await client.post("/auth/forgot-password", json={"email": "resetme@example.com"})

        reset = await client.post(
            "/auth/reset-password",
            json={"token": notifier.last_token, "newPassword": NEW_PASSWORD},
        )
        reused = await client.post(
            "/auth/reset-password",
            json={"token": notifier.last_token, "newPassword": "An0therPass"},
        )

        assert reset.status_code == 200
        assert reused.status_code == 400
        assert reused.json()["error"]["code"] == "INVALID_OR_EXPIRED_TOKEN"
        assert (
            await client.post("/auth/refresh", json={"refreshToken": old_refresh})
        ).status_code == 401
        assert (
            await client.post(
                "/auth/login", json={"email": "resetme@example.com", "password": NEW_PASSWORD}
            )
        ).status_code == 200

    @pytest.mark.asyncio
    async def test_reset_with_garbage_token(self, client):
        response = await client.post(
            "/auth/reset-password", json={"token": "garbage", "newPassword": NEW_PASSWORD}
        )

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "INVALID_OR_EXPIRED_TOKEN"

    @pytest.mark.asyncio
    async def test_reset_with_weak_password(self, client):
        response = await client.post(
            "/auth/reset-password", json={"token": "garbage", "newPassword": "weak"}
        )

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "WEAK_PASSWORD"
