"""Tests for the authorization policy table."""

from __future__ import annotations

import re

import pytest
from fastapi.routing import APIRoute
from fastapi.testclient import TestClient

from hub.config import permissions_config
from hub.config.permissions_config import (
    MODULES, POLICY, ROLES, allowed_roles, get_policy_table, grants_for_role, is_allowed,
)
from hub.main import app
from tests.conftest import USER_ID, auth_header


class TestPolicyTable:
    def test_every_entry_uses_known_roles(self) -> None:
        for roles in POLICY.values():
            assert roles <= set(ROLES)

    def test_unknown_role_in_config_is_rejected(self, monkeypatch: pytest.MonkeyPatch) -> None:
        broken = {**MODULES, "banners": {"description": "", "actions": {"read": ("superuser",)}}}
        monkeypatch.setattr(permissions_config, "MODULES", broken)
        with pytest.raises(ValueError, match="superuser"):
            get_policy_table()

    def test_admin_only_resources(self) -> None:
        for resource in ("users", "banners", "gallery"):
            assert allowed_roles(resource, "create") == frozenset({"admin"})

    def test_sector_media_excludes_subsector_admin(self) -> None:
        assert not is_allowed("subsector_admin", "sector_media", "create")
        assert is_allowed("sector_admin", "sector_media", "create")

    def test_subsector_media_delete_allows_all_managers(self) -> None:
        for role in ("admin", "sector_admin", "subsector_admin"):
            assert is_allowed(role, "subsector_media", "delete")
        assert not is_allowed("user", "subsector_media", "delete")

    def test_unknown_pair_allows_nobody(self) -> None:
        assert allowed_roles("nope", "read") == frozenset()
        assert not is_allowed("admin", "banners", "explode")

    def test_no_implicit_inheritance(self) -> None:
        for (resource, action), roles in POLICY.items():
            if "user" in roles:
                assert "admin" in roles, f"{resource}:{action}"


class TestGrantsForRole:
    def test_user_grants_are_read_mostly(self) -> None:
        grants = grants_for_role("user")
        assert "dashboard:read" in grants
        assert "collections:read" in grants
        assert "banners:read" not in grants
        assert grants == sorted(grants)

    def test_admin_has_every_grant(self) -> None:
        assert len(grants_for_role("admin")) == len(POLICY)


WRITE_METHODS = ("POST", "PUT", "PATCH", "DELETE")

# Account routes check their body before the caller, so they need one that passes.
VALID_BODIES = {
    "/api/admin/create-user": {"email": "nova@cresol.com.br", "fullName": "Nova"},
    "/api/admin/update-user-role": {"userId": USER_ID, "newRole": "sector_admin"},
    "/api/admin/reset-password": {"userId": USER_ID, "newPassword": "segredo123"},
    "/api/admin/approve-access-request": {"accessRequestId": "missing", "targetStatus": "rejected"},
}


def _admin_write_routes() -> list[tuple[str, str]]:
    found = set()
    for route in app.routes:
        if isinstance(route, APIRoute) and route.path.startswith("/api/admin"):
            for method in route.methods & set(WRITE_METHODS):
                found.add((method, re.sub(r"\{[^}]+\}", "missing", route.path)))
    return sorted(found)


ADMIN_WRITE_ROUTES = _admin_write_routes()


class TestAdminRouteSweep:
    def test_sweep_covers_admin_routes(self) -> None:
        paths = {path for _, path in ADMIN_WRITE_ROUTES}
        assert "/api/admin/banners" in paths
        assert "/api/admin/general-news" in paths
        assert "/api/admin/sectors/missing/messages" in paths

    @pytest.mark.parametrize(("method", "path"), ADMIN_WRITE_ROUTES)
    def test_user_role_is_forbidden(self, client: TestClient, method: str, path: str) -> None:
        response = client.request(method, path, json=VALID_BODIES.get(path, {}), headers=auth_header("user"))
        assert response.status_code == 403

    @pytest.mark.parametrize(("method", "path"), ADMIN_WRITE_ROUTES)
    def test_admin_role_passes_the_gate(self, client: TestClient, method: str, path: str) -> None:
        response = client.request(method, path, json=VALID_BODIES.get(path, {}), headers=auth_header("admin"))
        assert response.status_code != 403
