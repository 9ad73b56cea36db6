from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient

from practice_portal.core.errors import StoreUnavailable
from practice_portal.core.security import TokenService
from practice_portal.main import create_app
from practice_portal.store.memory import InMemoryCredentialStore

from .conftest import TEST_SECRET, make_settings

LOGIN_URL = "/api/v1/auth/login"
REGISTER_URL = "/api/v1/auth/register"
SESSION_URL = "/api/v1/auth/session"

# Test data
test_user_data = {
    "firstName": "Ann",
    "lastName": "Lee",
    "email": "ann@x.com",
    "password": "longenough1",
}

test_login_data = {
    "email": "ANN@X.COM",
    "password": "longenough1",
}


def bearer(token):
    return {"Authorization": f"Bearer {token}"}


def register_and_login(client):
    client.post(REGISTER_URL, json=test_user_data)
    return client.post(LOGIN_URL, json=test_login_data).json()["token"]


class TestRegistration:

    def test_register_user(self, client):
        response = client.post(REGISTER_URL, json=test_user_data)
        assert response.status_code == 201

        data = response.json()
        assert data["message"] == "Account created successfully"
        assert data["token"]
        assert data["user"]["email"] == "ann@x.com"
        assert data["user"]["role"] == "staff"
        assert set(data["user"]) == {
            "id", "firstName", "lastName", "email",
            "role", "organization", "phone", "createdAt",
        }

    def test_register_duplicate_email(self, client):
        first = client.post(REGISTER_URL, json=test_user_data).json()

        duplicate = {**test_user_data, "email": "Ann@X.com"}
        response = client.post(REGISTER_URL, json=duplicate)
        assert response.status_code == 409
        assert response.json()["message"] == "An account with this email already exists"

        login = client.post(LOGIN_URL, json=test_login_data)
        assert login.json()["user"]["id"] == first["user"]["id"]

    def test_register_short_password(self, client, store):
        response = client.post(REGISTER_URL, json={**test_user_data, "password": "short1"})
        assert response.status_code == 400
        assert response.json()["message"] == "Password must be at least 8 characters long"
        assert len(store) == 0

    @pytest.mark.parametrize("password", ["a" * 72 + "SECRET", "abcdefgh\x00x"])
    def test_register_unhashable_password(self, client, store, password):
        response = client.post(REGISTER_URL, json={**test_user_data, "password": password})
        assert response.status_code == 400
        assert response.json()["fields"] == ["password"]
        assert len(store) == 0

    def test_register_missing_fields(self, client):
        response = client.post(REGISTER_URL, json={"email": "ann@x.com"})
        assert response.status_code == 400

        data = response.json()
        assert data["message"] == "First name, last name, email, and password are required"
        assert data["fields"] == ["firstName", "lastName", "password"]

    def test_register_token_opens_session(self, client):
        token = client.post(REGISTER_URL, json=test_user_data).json()["token"]

        response = client.get(SESSION_URL, headers=bearer(token))
        assert response.status_code == 200
        assert response.json()["user"]["email"] == "ann@x.com"


class TestLogin:

    def test_login_success(self, client):
        registered = client.post(REGISTER_URL, json=test_user_data).json()

        response = client.post(LOGIN_URL, json=test_login_data)
        assert response.status_code == 200

        data = response.json()
        assert data["message"] == "Login successful"
        assert data["token"]
        assert data["user"]["id"] == registered["user"]["id"]

    def test_login_wrong_password(self, client):
        client.post(REGISTER_URL, json=test_user_data)

        response = client.post(LOGIN_URL, json={"email": "ann@x.com", "password": "wrong"})
        assert response.status_code == 401
        assert response.json() == {"message": "Invalid email or password"}

    def test_login_unknown_email(self, client):
        response = client.post(
            LOGIN_URL, json={"email": "nobody@x.com", "password": "longenough1"}
        )
        assert response.status_code == 401
        assert response.json() == {"message": "Invalid email or password"}

    def test_login_missing_fields(self, client):
        response = client.post(LOGIN_URL, json={"email": "ann@x.com"})
        assert response.status_code == 400
        assert response.json()["message"] == "Email and password are required"

    def test_login_empty_body(self, client):
        response = client.post(LOGIN_URL)
        assert response.status_code == 400

    def test_login_malformed_body(self, client):
        response = client.post(
            LOGIN_URL,
            content=b"{not json",
            headers={"Content-Type": "application/json"},
        )
        assert response.status_code == 400

    def test_login_deactivated(self, client, store):
        user_id = client.post(REGISTER_URL, json=test_user_data).json()["user"]["id"]
        store.set_active(user_id, False)

        response = client.post(LOGIN_URL, json=test_login_data)
        assert response.status_code == 401
        assert response.json()["message"] == "Account is deactivated"


class TestSession:

    def test_get_session(self, client):
        token = register_and_login(client)

        response = client.get(SESSION_URL, headers=bearer(token))
        assert response.status_code == 200

        data = response.json()
        assert data["isAuthenticated"] is True
        assert data["user"]["email"] == "ann@x.com"

    def test_missing_header(self, client):
        response = client.get(SESSION_URL)
        assert response.status_code == 401
        assert response.json()["message"] == "No valid token provided"

    def test_wrong_scheme(self, client):
        response = client.get(SESSION_URL, headers={"Authorization": "Basic abc"})
        assert response.status_code == 401

    def test_invalid_token(self, client):
        response = client.get(SESSION_URL, headers=bearer("invalid_token"))
        assert response.status_code == 401
        assert response.json()["message"] == "Invalid or expired token"

    def test_expired_token(self, client):
        token = register_and_login(client)
        user_id = client.get(SESSION_URL, headers=bearer(token)).json()["user"]["id"]

        eight_days_ago = datetime.now(timezone.utc) - timedelta(days=8)
        expired = TokenService(TEST_SECRET, clock=lambda: eight_days_ago).issue(
            user_id, "ann@x.com"
        )

        response = client.get(SESSION_URL, headers=bearer(expired))
        assert response.status_code == 401
        assert response.json()["message"] == "Invalid or expired token"

    def test_deactivated_account_loses_session(self, client, store):
        token = register_and_login(client)
        user_id = client.get(SESSION_URL, headers=bearer(token)).json()["user"]["id"]
        store.set_active(user_id, False)

        response = client.get(SESSION_URL, headers=bearer(token))
        assert response.status_code == 401
        assert response.json()["message"] == "User not found or inactive"

    def test_logout(self, client):
        token = register_and_login(client)

        response = client.post(SESSION_URL, json={"action": "logout"}, headers=bearer(token))
        assert response.status_code == 200
        assert response.json() == {"message": "Logged out successfully"}

    def test_logout_requires_token(self, client):
        response = client.post(SESSION_URL, json={"action": "logout"})
        assert response.status_code == 401

    def test_refresh(self, client):
        token = register_and_login(client)

        response = client.post(SESSION_URL, json={"action": "refresh"}, headers=bearer(token))
        assert response.status_code == 200

        data = response.json()
        assert data["message"] == "Token refreshed successfully"
        assert data["user"]["email"] == "ann@x.com"
        follow_up = client.get(SESSION_URL, headers=bearer(data["token"]))
        assert follow_up.status_code == 200

    def test_unknown_action(self, client):
        token = register_and_login(client)

        response = client.post(SESSION_URL, json={"action": "dance"}, headers=bearer(token))
        assert response.status_code == 400
        assert response.json()["message"] == "Invalid request"


class TestCombinedEndpoint:

    def test_register_then_login(self, client):
        response = client.post("/api/v1/auth", json={"action": "register", **test_user_data})
        assert response.status_code == 201

        response = client.post("/api/v1/auth", json={"action": "login", **test_login_data})
        assert response.status_code == 200
        assert response.json()["user"]["email"] == "ann@x.com"

    def test_invalid_action(self, client):
        response = client.post("/api/v1/auth", json={"action": "nope"})
        assert response.status_code == 400
        assert response.json()["message"] == "Invalid action"


class TestTransport:

    @pytest.mark.parametrize("path", ["/api/v1/auth", LOGIN_URL, REGISTER_URL, SESSION_URL])
    def test_options(self, client, path):
        response = client.options(path)
        assert response.status_code == 200
        assert response.headers["Access-Control-Allow-Origin"] == "*"

    def test_cors_headers_on_errors(self, client):
        response = client.post(LOGIN_URL, json={"email": "x@x.com", "password": "nope"})
        assert response.headers["Access-Control-Allow-Origin"] == "*"
        assert "Authorization" in response.headers["Access-Control-Allow-Headers"]
        assert response.headers["Content-Type"].startswith("application/json")

    def test_unsupported_method(self, client):
        response = client.get(LOGIN_URL)
        assert response.status_code == 405
        assert response.json()["message"] == "Method not allowed"

    def test_no_password_material_in_responses(self, client, store):
        responses = [
            client.post(REGISTER_URL, json=test_user_data),
            client.post(REGISTER_URL, json=test_user_data),
            client.post(LOGIN_URL, json=test_login_data),
            client.post(LOGIN_URL, json={"email": "ann@x.com", "password": "wrong"}),
        ]
        token = responses[2].json()["token"]
        responses.append(client.get(SESSION_URL, headers=bearer(token)))
        responses.append(
            client.post(SESSION_URL, json={"action": "refresh"}, headers=bearer(token))
        )

        stored_hash = store.find_by_email("ann@x.com").password_hash
        for response in responses:
            assert stored_hash not in response.text
            assert "passwordhash" not in response.text.lower()
            assert "password_hash" not in response.text.lower()

    def test_store_failure_is_generic(self, settings):
        class BrokenStore(InMemoryCredentialStore):
            def find_by_email(self, email):
                raise StoreUnavailable("connection refused by db-host-7")

        app = create_app(settings, store=BrokenStore())
        with TestClient(app) as client:
            login = client.post(LOGIN_URL, json=test_login_data)
            register = client.post(REGISTER_URL, json=test_user_data)

        assert login.status_code == 500
        assert login.json() == {"message": "Login failed. Please try again."}
        assert register.status_code == 500
        assert register.json() == {"message": "Registration failed. Please try again."}
        assert "db-host-7" not in login.text + register.text

    def test_health(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json()["store"] == "memory"


class TestDemoData:

    def test_seed_endpoint_disabled_by_default(self, client):
        response = client.post("/api/v1/demo/seed")
        assert response.status_code == 404

    def test_seed_endpoint(self, store):
        app = create_app(make_settings(DEMO_SEED_ENABLED=True), store=store)
        with TestClient(app) as client:
            first = client.post("/api/v1/demo/seed")
            second = client.post("/api/v1/demo/seed")

        assert first.status_code == 200
        assert first.json()["summary"]["created"] == 8
        assert second.json()["summary"] == {"created": 0, "skipped": 8, "total": 8}
        assert "$2b$" not in first.text

    def test_demo_accounts_seeded_at_startup(self):
        app = create_app(make_settings(SEED_DEMO_ACCOUNTS=True))
        with TestClient(app) as client:
            response = client.post(
                LOGIN_URL, json={"email": "demo@iwil.com", "password": "demo123"}
            )

        assert response.status_code == 200
        assert response.json()["user"]["role"] == "staff"


def test_sql_backed_application(tmp_path):
    settings = make_settings(
        STORE_BACKEND="sql",
        DATABASE_URL=f"sqlite:///{tmp_path / 'portal.db'}",
    )
    app = create_app(settings)
    with TestClient(app) as client:
        created = client.post(REGISTER_URL, json=test_user_data)
        duplicate = client.post(REGISTER_URL, json=test_user_data)
        login = client.post(LOGIN_URL, json=test_login_data)
        session = client.get(SESSION_URL, headers=bearer(login.json()["token"]))

    assert created.status_code == 201
    assert duplicate.status_code == 409
    assert login.json()["user"]["id"] == created.json()["user"]["id"]
    assert session.json()["user"]["email"] == "ann@x.com"
    assert session.json()["user"]["createdAt"] == created.json()["user"]["createdAt"]
    assert login.json()["user"]["createdAt"] == created.json()["user"]["createdAt"]
