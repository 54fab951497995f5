"""
Pytest fixtures for the test suite.

- Core tests use the packaged catalog or small hand-built ones.
- Data-layer tests use an in-memory SQLite engine and a session that rolls
  back after each test.
- App tests run the full FastAPI app (lifespan included) against a fresh
  in-memory database seeded with the demo data.
"""
from __future__ import annotations

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker

from hr_authz.core import Authorizer, PermissionCatalog, default_catalog

TEST_DB_URL = "sqlite:///:memory:"
TEST_JWT_SECRET = "test-secret-with-enough-length-for-hs256"


def build_catalog(roles: dict[str, dict], modules: dict[str, dict[str, str]] | None = None) -> PermissionCatalog:
    """
    Build a catalog from a compact description. Roles not given get an empty
    permission list so the catalog stays total.
    """

    if modules is None:
        keys = sorted({p for entry in roles.values() for p in entry.get("permissions", [])})
        modules = {"test": {k.replace(".", "_"): k for k in keys}}

    full_roles = {
        "SuperAdmin": {"scope": "unrestricted", "permissions": []},
        "HRAdministrator": {"scope": "unrestricted", "permissions": []},
        "HRManager": {"scope": "department", "permissions": []},
        "Employee": {"scope": "none", "permissions": []},
    }
    full_roles.update(roles)
    return PermissionCatalog.from_mapping({"modules": modules, "roles": full_roles})


@pytest.fixture
def catalog() -> PermissionCatalog:
    return default_catalog()


@pytest.fixture
def authorizer(catalog) -> Authorizer:
    return Authorizer(catalog)


@pytest.fixture
def engine():
    """Create a fresh in-memory SQLite engine for each test."""
    return create_engine(
        TEST_DB_URL,
        connect_args={"check_same_thread": False},
        echo=False,
    )


@pytest.fixture
def tables(engine):
    """Create all ORM tables on the test engine."""
    import hr_authz.models  # noqa: F401  (register mappers)
    from hr_authz.db.base import Base

    Base.metadata.create_all(bind=engine)
    return engine


@pytest.fixture
def db_session(tables):
    """
    Provide a Session bound to the test DB; roll back after each test.
    """
    connection = tables.connect()
    transaction = connection.begin()
    TestSession = sessionmaker(
        bind=connection,
        autocommit=False,
        autoflush=False,
        class_=Session,
    )
    session = TestSession()
    yield session
    session.close()
    transaction.rollback()
    connection.close()


@pytest.fixture
def app_settings():
    from hr_authz.settings import Settings

    return Settings(db_url="sqlite://", jwt_secret=TEST_JWT_SECRET, log_level="DEBUG")


@pytest.fixture
def client(app_settings):
    from hr_authz.main import create_app

    app = create_app(app_settings)
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def auth_headers(app_settings):
    from hr_authz.security.identity import issue_token

    def make(user_id: int) -> dict[str, str]:
        return {"Authorization": f"Bearer {issue_token(user_id, app_settings)}"}

    return make


@pytest.fixture
def make_catalog():
    return build_catalog
