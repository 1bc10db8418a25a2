"""Login, registration and account management endpoints."""
import jwt
import pytest

from conftest import bearer, make_account
from reviewly.jwt_service import JWT_ALGORITHM, create_access_token
from reviewly.models import AdminAccount


class TestLogin:

    def test_login_returns_token_and_user(self, client, admin_account):
        response = client.post(
            "/api/auth/login", json={"username": "admin", "password": "secret123"}
        )
        assert response.status_code == 200
        body = response.get_json()
        assert body["user"]["username"] == "admin"
        assert body["user"]["role"] == "admin"
        assert "password_hash" not in body["user"]

        payload = jwt.decode(
            body["token"], "test-secret-key-for-reviewly", algorithms=[JWT_ALGORITHM]
        )
        assert payload["account_id"] == admin_account["id"]
        assert payload["type"] == "access"

    def test_wrong_password(self, client, admin_account):
        response = client.post("/api/auth/login", json={"username": "admin", "password": "nope"})
        assert response.status_code == 401
        assert response.get_json()["message"] == "Credenciales inválidas"

    def test_unknown_user(self, client):
        response = client.post("/api/auth/login", json={"username": "ghost", "password": "x"})
        assert response.status_code == 401

    def test_missing_fields(self, client):
        response = client.post("/api/auth/login", json={"username": "admin"})
        assert response.status_code == 400
        assert response.get_json()["message"] == "Por favor ingrese usuario y contraseña"

    def test_non_object_body(self, client):
        response = client.post("/api/auth/login", json=["admin", "secret123"])
        assert response.status_code == 400

    def test_inactive_account(self, client, database, admin_headers):
        other = make_account(database, "inactivo")
        client.patch(f"/api/auth/users/{other['id']}/deactivate", headers=admin_headers)

        response = client.post(
            "/api/auth/login", json={"username": "inactivo", "password": "secret123"}
        )
        assert response.status_code == 401
        assert response.get_json()["message"] == "Usuario inactivo"

    def test_password_is_stored_hashed(self, database, admin_account):
        with database.session() as session:
            stored = session.get(AdminAccount, admin_account["id"])
            assert stored.password_hash != "secret123"
            assert stored.verify_password("secret123")


class TestTokens:

    def test_me_requires_token(self, client):
        response = client.get("/api/auth/me")
        assert response.status_code == 401
        assert response.get_json()["message"] == "No hay token, autorización denegada"

    def test_me_with_token(self, client, admin_headers):
        response = client.get("/api/auth/me", headers=admin_headers)
        assert response.status_code == 200
        assert response.get_json()["user"]["username"] == "admin"

    def test_garbage_token(self, client):
        response = client.get("/api/auth/me", headers={"Authorization": "Bearer not-a-jwt"})
        assert response.status_code == 401
        assert response.get_json()["message"] == "Token inválido"

    def test_expired_token(self, app, client, admin_account):
        with app.app_context():
            token = create_access_token(
                account_id=admin_account["id"],
                username="admin",
                role="admin",
                expires_hours=-1,
            )
        response = client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"})
        assert response.status_code == 401
        assert response.get_json()["message"] == "Token expirado"

    def test_token_signed_with_other_secret(self, client, admin_account):
        token = jwt.encode(
            {"sub": "1", "account_id": admin_account["id"], "role": "admin", "type": "access"},
            "another-secret",
            algorithm=JWT_ALGORITHM,
        )
        response = client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"})
        assert response.status_code == 401


class TestRegister:

    def test_first_account_can_self_register(self, client):
        response = client.post(
            "/api/auth/register",
            json={"username": "primero", "email": "Primero@Example.com", "password": "secret123"},
        )
        assert response.status_code == 201
        user = response.get_json()["user"]
        assert user["role"] == "admin"
        assert user["email"] == "primero@example.com"

    def test_register_closed_once_accounts_exist(self, client, admin_account):
        response = client.post(
            "/api/auth/register",
            json={"username": "intruso", "email": "intruso@example.com", "password": "secret123"},
        )
        assert response.status_code == 401

    def test_manager_cannot_register(self, client, manager_headers):
        response = client.post(
            "/api/auth/register",
            json={"username": "otro", "email": "otro@example.com", "password": "secret123"},
            headers=manager_headers,
        )
        assert response.status_code == 403

    def test_admin_can_register(self, client, admin_headers):
        response = client.post(
            "/api/auth/register",
            json={
                "username": "nuevo",
                "email": "nuevo@example.com",
                "password": "secret123",
                "role": "manager",
            },
            headers=admin_headers,
        )
        assert response.status_code == 201
        assert response.get_json()["user"]["role"] == "manager"

    def test_short_password(self, client):
        response = client.post(
            "/api/auth/register",
            json={"username": "primero", "email": "primero@example.com", "password": "123"},
        )
        assert response.status_code == 400


class TestAccountManagement:

    def test_list_users(self, client, admin_headers, manager_account):
        response = client.get("/api/auth/users", headers=admin_headers)
        assert response.status_code == 200
        body = response.get_json()
        assert body["total"] == 2
        assert all("password_hash" not in user for user in body["users"])

    def test_create_duplicate_user(self, client, admin_headers, manager_account):
        response = client.post(
            "/api/auth/users",
            json={
                "username": "gerente",
                "email": "otro@example.com",
                "password": "secret123",
                "role": "manager",
            },
            headers=admin_headers,
        )
        assert response.status_code == 400
        assert response.get_json()["message"] == "El usuario o email ya existe"

    def test_create_with_invalid_role(self, client, admin_headers):
        response = client.post(
            "/api/auth/users",
            json={
                "username": "raro",
                "email": "raro@example.com",
                "password": "secret123",
                "role": "superuser",
            },
            headers=admin_headers,
        )
        assert response.status_code == 400

    def test_update_and_reactivate(self, client, admin_headers, manager_account):
        user_id = manager_account["id"]
        response = client.put(
            f"/api/auth/users/{user_id}", json={"role": "usuario"}, headers=admin_headers
        )
        assert response.status_code == 200
        assert response.get_json()["user"]["role"] == "usuario"

        response = client.patch(f"/api/auth/users/{user_id}/deactivate", headers=admin_headers)
        assert response.get_json()["user"]["is_active"] is False
        response = client.patch(f"/api/auth/users/{user_id}/activate", headers=admin_headers)
        assert response.get_json()["user"]["is_active"] is True

    def test_get_unknown_user(self, client, admin_headers):
        response = client.get("/api/auth/users/9999", headers=admin_headers)
        assert response.status_code == 404

    def test_delete_user(self, client, admin_headers, manager_account):
        response = client.delete(f"/api/auth/users/{manager_account['id']}", headers=admin_headers)
        assert response.status_code == 200
        response = client.get(f"/api/auth/users/{manager_account['id']}", headers=admin_headers)
        assert response.status_code == 404


class TestSelfProtection:

    def test_cannot_deactivate_self(self, client, admin_account, admin_headers):
        response = client.patch(
            f"/api/auth/users/{admin_account['id']}/deactivate", headers=admin_headers
        )
        assert response.status_code == 400
        assert response.get_json()["message"] == "No puedes desactivarte a ti mismo"

    def test_cannot_delete_self(self, client, admin_account, admin_headers):
        response = client.delete(f"/api/auth/users/{admin_account['id']}", headers=admin_headers)
        assert response.status_code == 400
        assert response.get_json()["message"] == "No puedes eliminarte a ti mismo"

    def test_cannot_demote_or_deactivate_self_via_update(
        self, client, admin_account, admin_headers
    ):
        url = f"/api/auth/users/{admin_account['id']}"
        assert client.put(url, json={"role": "manager"}, headers=admin_headers).status_code == 400
        assert client.put(url, json={"is_active": False}, headers=admin_headers).status_code == 400

    def test_can_update_own_email(self, client, admin_account, admin_headers):
        response = client.put(
            f"/api/auth/users/{admin_account['id']}",
            json={"email": "jefa@example.com"},
            headers=admin_headers,
        )
        assert response.status_code == 200
        assert response.get_json()["user"]["email"] == "jefa@example.com"


@pytest.mark.parametrize("role_headers", ["manager_headers", "usuario_headers"])
def test_account_management_is_admin_only(request, client, admin_account, role_headers):
    headers = request.getfixturevalue(role_headers)
    assert client.get("/api/auth/users", headers=headers).status_code == 403
    response = client.delete(f"/api/auth/users/{admin_account['id']}", headers=headers)
    assert response.status_code == 403
    assert response.get_json()["message"] == "No tienes permisos para realizar esta acción"


def test_bearer_helper_matches_login(app, client, admin_account):
    headers = bearer(app, admin_account)
    assert client.get("/api/auth/me", headers=headers).status_code == 200
