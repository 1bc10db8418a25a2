"""Fixtures for the Reviewly test-suite.

Every test gets a fresh application bound to an in-memory SQLite
database, a Flask test client and helpers that create accounts and staff
and issue bearer tokens per role.
"""
import os
from datetime import datetime

import pytest
from cryptography.fernet import Fernet

os.environ.setdefault("SECRET_KEY", "test-secret-key-for-reviewly")
os.environ.setdefault("PASSWORD_HASH_SALT", "test-pepper")
os.environ.setdefault("CUSTOMER_DATA_KEY", Fernet.generate_key().decode("utf-8"))

from reviewly.config import AppConfig  # noqa: E402
from reviewly.constants import REVIEW_CATEGORIES, Roles  # noqa: E402
from reviewly.db import Database  # noqa: E402
from reviewly.jwt_service import create_access_token  # noqa: E402
from reviewly.services import account_service, staff_service  # noqa: E402
from reviewly_api.app import create_app  # noqa: E402


def build_config(**overrides) -> AppConfig:
    values = {
        "app_name": "reviewly-tests",
        "db_host": "localhost",
        "db_port": 5432,
        "db_user": "reviewly",
        "db_password": "reviewly",
        "db_name": "reviewly",
        "db_sslmode": "disable",
        "database_url": "sqlite://",
        "secret_key": os.environ["SECRET_KEY"],
        "log_level": "WARNING",
        "debug_mode": False,
        "cors_allowed_origins": ["http://testserver.local"],
        "num_proxies": 0,
        "jwt_access_token_expires_hours": 168,
        "duplicate_window_hours": 24,
    }
    values.update(overrides)
    return AppConfig(**values)


@pytest.fixture
def config():
    return build_config()


@pytest.fixture
def database():
    """Yield a Database on a private in-memory SQLite engine."""
    db = Database("sqlite://")
    db.create_all()
    try:
        yield db
    finally:
        db.drop_all()
        db.dispose()


@pytest.fixture
def app(config, database):
    application = create_app(config, database)
    application.config["TESTING"] = True
    return application


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def session(database):
    """A transactional session committed when the test finishes.

    Only for service-level tests; API tests go through the client.
    """
    with database.session() as db_session:
        yield db_session


@pytest.fixture
def sample_now():
    """Stable datetime value for deterministic gatekeeper tests."""
    return datetime(2024, 3, 15, 20, 0, 0)


def full_scores(value=5, **overrides):
    """Helper: a score for every category, all ``value`` unless overridden."""
    scores = {category: value for category in REVIEW_CATEGORIES}
    scores.update(overrides)
    return scores


def make_account(database, username, role=Roles.ADMIN.value, password="secret123"):
    """Helper: create an account and return its serialized form."""
    with database.session() as db_session:
        return account_service.create_account(
            db_session,
            {
                "username": username,
                "email": f"{username}@example.com",
                "password": password,
                "role": role,
            },
        )


def make_staff(database, name="Ana López", is_active=True, gender="mesera"):
    """Helper: create a staff member and return its serialized form."""
    with database.session() as db_session:
        return staff_service.create_staff(
            db_session, {"name": name, "gender": gender, "is_active": is_active}
        )


def bearer(app, account):
    """Helper: Authorization header for ``account``."""
    with app.app_context():
        token = create_access_token(
            account_id=account["id"], username=account["username"], role=account["role"]
        )
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def admin_account(database):
    return make_account(database, "admin", Roles.ADMIN.value)


@pytest.fixture
def manager_account(database):
    return make_account(database, "gerente", Roles.MANAGER.value)


@pytest.fixture
def usuario_account(database):
    return make_account(database, "usuario1", Roles.USUARIO.value)


@pytest.fixture
def admin_headers(app, admin_account):
    return bearer(app, admin_account)


@pytest.fixture
def manager_headers(app, manager_account):
    return bearer(app, manager_account)


@pytest.fixture
def usuario_headers(app, usuario_account):
    return bearer(app, usuario_account)


@pytest.fixture
def staff(database):
    return make_staff(database)
