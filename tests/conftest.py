import asyncio

import pytest
from fastapi.testclient import TestClient

from address_book_api.app.core.config import settings
from address_book_api.app.core.db import init_db
from address_book_api.app.core.security import Capability, RequestContext
from address_book_api.app.main import app


TENANT = "tenant-a"


@pytest.fixture(autouse=True)
def database(tmp_path, monkeypatch):
    """Point every test at a fresh SQLite file."""
    monkeypatch.setattr(settings, "database_url", str(tmp_path / "address_book.db"))
    monkeypatch.setattr(settings, "hard_delete", False)
    monkeypatch.setattr(settings, "admin_roles", "admin,super_admin")
    init_db()
    return settings.database_url


@pytest.fixture
def client(database):
    with TestClient(app) as test_client:
        yield test_client


def identity(user_id, tenant_id=TENANT, roles=None):
    headers = {"X-Tenant-Id": tenant_id, "X-User-Id": user_id}
    if roles:
        headers["X-User-Roles"] = roles
    return headers


def owner(user_id, tenant_id=TENANT):
    return RequestContext(tenant_id=tenant_id, user_id=user_id)


def admin(user_id, tenant_id=TENANT):
    return RequestContext(tenant_id=tenant_id, user_id=user_id, capability=Capability.ADMIN)


def run(coro):
    return asyncio.run(coro)


def address_fields(**overrides):
    fields = {
        "line1": "221B Baker Street",
        "line2": "Flat 2",
        "city": "London",
        "state": "Greater London",
        "postcode": "NW1 6XE",
        "country": "GB",
    }
    fields.update(overrides)
    return fields
