import bcrypt
import pytest
from app.core.exceptions import NotFoundError
from app.models.user import User
from app.services.user_service import UserService
from tests.conftest import headers_for, register_user


class TestRegistration:
    """Tests for registering business accounts"""

    def test_register_success(self, client):
        """Registration returns the account without its password"""
        response = client.post(
            "/api/users",
            json={
                "username": "carol",
                "password": "hunter22",
                "company_name": "Carol Consulting",
                "business_type": "services",
            },
        )

        assert response.status_code == 201
        user = response.json()
        assert user["username"] == "carol"
        assert user["company_name"] == "Carol Consulting"
        assert user["business_type"] == "services"
        assert "password" not in user
        assert "id" in user

    def test_password_is_hashed(self, client, db_session):
        """Stored password is a bcrypt hash of the submitted one"""
        user = register_user(client, "dave")

        stored = db_session.get(User, user["id"])
        assert stored.password != "s3cret-pass"
        assert bcrypt.checkpw(b"s3cret-pass", stored.password.encode("utf-8"))

    def test_duplicate_username(self, client):
        """Usernames are unique"""
        register_user(client, "erin")

        response = client.post(
            "/api/users",
            json={"username": "erin", "password": "other", "company_name": "Other"},
        )

        assert response.status_code == 409
        assert response.json()["error"] == "unique_constraint"

    def test_missing_required_fields(self, client):
        """Every missing required field is reported"""
        response = client.post("/api/users", json={"username": "frank"})

        assert response.status_code == 422
        fields = {e["field"] for e in response.json()["errors"]}
        assert fields == {"password", "company_name"}

    def test_unknown_field(self, client):
        response = client.post(
            "/api/users",
            json={"username": "gina", "password": "x", "company_name": "G", "role": "admin"},
        )

        assert response.status_code == 400
        assert response.json()["error"] == "unknown_field"

    def test_body_must_be_object(self, client):
        response = client.post("/api/users", json=["gina", "x"])

        assert response.status_code == 400
        assert response.json()["error"] == "type_mismatch"


class TestProfile:
    """Tests for the authenticated account endpoints"""

    def test_get_me(self, client, user_a, auth_headers):
        response = client.get("/api/users/me", headers=auth_headers)

        assert response.status_code == 200
        assert response.json()["id"] == user_a["id"]
        assert response.json()["username"] == "alice"

    def test_update_me(self, client, auth_headers):
        """Only provided fields change"""
        response = client.patch(
            "/api/users/me", headers=auth_headers, json={"location": "Lisbon"}
        )

        assert response.status_code == 200
        assert response.json()["location"] == "Lisbon"
        assert response.json()["company_name"] == "Alice Bakery"

    def test_update_username_taken(self, client, auth_headers, user_b):
        response = client.patch("/api/users/me", headers=auth_headers, json={"username": "bob"})

        assert response.status_code == 409

    def test_update_password_rehashed(self, client, db_session, user_a, auth_headers):
        response = client.patch("/api/users/me", headers=auth_headers, json={"password": "new-pass"})

        assert response.status_code == 200
        stored = db_session.get(User, user_a["id"])
        assert bcrypt.checkpw(b"new-pass", stored.password.encode("utf-8"))
        assert not bcrypt.checkpw(b"s3cret-pass", stored.password.encode("utf-8"))

    def test_delete_me(self, client, user_a, auth_headers):
        response = client.delete("/api/users/me", headers=auth_headers)
        assert response.status_code == 204

        # Token now points at a missing user
        response = client.get("/api/users/me", headers=auth_headers)
        assert response.status_code == 401

    def test_delete_blocked_while_owning_records(self, client, auth_headers, make):
        make("customers", auth_headers, name="Acme")

        response = client.delete("/api/users/me", headers=auth_headers)

        assert response.status_code == 409
        blockers = response.json()["blockers"]
        assert {"kind": "customer", "field": "user_id", "count": 1} in blockers

    def test_users_are_isolated(self, client, user_a, user_b):
        response = client.get("/api/users/me", headers=headers_for(user_b))

        assert response.json()["username"] == "bob"


class TestUserService:
    def test_get_missing_user(self, db_session, registry):
        with pytest.raises(NotFoundError):
            UserService(db_session, registry).get_user(42)
