"""Shared pytest fixtures: an in-memory Supabase, seeded callers and an API client."""

from __future__ import annotations

from collections.abc import Iterator

import pytest
from fastapi.testclient import TestClient

from hub.core.cache import auth_cache, read_cache
from hub.database.supabase_client import get_supabase
from hub.main import app
from tests.unit.mocks.fake_supabase import FakeSupabase

ADMIN_ID = "00000000-0000-0000-0000-00000000000a"
USER_ID = "00000000-0000-0000-0000-00000000000b"
SECTOR_ADMIN_ID = "00000000-0000-0000-0000-00000000000c"
SUBSECTOR_ADMIN_ID = "00000000-0000-0000-0000-00000000000d"

SECTOR_ID = "sector-1"
OTHER_SECTOR_ID = "sector-2"
SUBSECTOR_ID = "subsector-1"

CALLERS = {
    "admin": (ADMIN_ID, "admin@cresol.com.br"),
    "user": (USER_ID, "user@cresol.com.br"),
    "sector_admin": (SECTOR_ADMIN_ID, "setor@cresol.com.br"),
    "subsector_admin": (SUBSECTOR_ADMIN_ID, "subsetor@cresol.com.br"),
}


def auth_header(role: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {role}-token"}


@pytest.fixture(autouse=True)
def _clear_caches() -> Iterator[None]:
    auth_cache.clear()
    read_cache.clear()
    yield
    auth_cache.clear()
    read_cache.clear()


@pytest.fixture
def fake_db() -> FakeSupabase:
    """A FakeSupabase with one profile per role, two sectors and a subsector."""
    db = FakeSupabase()
    for role, (user_id, email) in CALLERS.items():
        db.auth.tokens[f"{role}-token"] = {"id": user_id, "email": email}
        db.seed("profiles", {"id": user_id, "email": email, "full_name": role.title(), "role": role})
    db.seed(
        "sectors",
        {"id": SECTOR_ID, "name": "Tecnologia", "description": "TI"},
        {"id": OTHER_SECTOR_ID, "name": "Crédito", "description": ""},
    )
    db.seed("subsectors", {"id": SUBSECTOR_ID, "name": "Infraestrutura", "sector_id": SECTOR_ID})
    db.seed("sector_admins", {"sector_id": SECTOR_ID, "user_id": SECTOR_ADMIN_ID})
    db.seed("subsector_admins", {"subsector_id": SUBSECTOR_ID, "user_id": SUBSECTOR_ADMIN_ID})
    return db


@pytest.fixture
def client(fake_db: FakeSupabase) -> Iterator[TestClient]:
    app.dependency_overrides[get_supabase] = lambda: fake_db
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()
