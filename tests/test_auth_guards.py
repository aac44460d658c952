"""Tests for the auth guards module."""

from unittest.mock import MagicMock

import pytest
from litestar.datastructures import State
from litestar.exceptions import NotAuthorizedException, PermissionDeniedException

from consolenav.auth.guards import (
    ADMINISTRATOR_PERMISSION,
    AndRequirement,
    ManageNavigation,
    OrRequirement,
    Permission,
    UserPermissions,
    auth_guard,
    resolve_permissions,
    session_permission_resolver,
)


def _make_permissions(user_id: str = "user-1", permissions: set[str] | None = None) -> UserPermissions:
    return UserPermissions(user_id=user_id, permissions=permissions or set())


def _make_connection(session_data: dict | None = None, resolver=None):
    """Create a mock ASGIConnection with optional session data."""
    connection = MagicMock()
    connection.scope = {"session": session_data} if session_data is not None else {}
    connection.app.state = State({"permission_resolver": resolver} if resolver else {})
    return connection


def _make_route_handler(guards: list | None = None):
    handler = MagicMock()
    handler.guards = guards
    return handler


# ===========================================================================
# UserPermissions / Permission
# ===========================================================================

class TestPermissionCheck:
    async def test_has_permission(self):
        assert await Permission("settings.edit").check(_make_permissions(permissions={"settings.edit"})) is True

    async def test_does_not_have_permission(self):
        assert await Permission("settings.edit").check(_make_permissions(permissions={"settings.view"})) is False

    async def test_administrator_bypass(self):
        perms = _make_permissions(permissions={ADMINISTRATOR_PERMISSION})

        assert await Permission("some_obscure_permission").check(perms) is True

    def test_empty_permission_is_public(self):
        assert _make_permissions().has("") is True


class TestComposition:
    async def test_or(self):
        req = Permission("a") | Permission("b")

        assert isinstance(req, OrRequirement)
        assert await req.check(_make_permissions(permissions={"b"})) is True
        assert await req.check(_make_permissions(permissions={"c"})) is False

    async def test_and(self):
        req = Permission("a") & Permission("b")

        assert isinstance(req, AndRequirement)
        assert await req.check(_make_permissions(permissions={"a", "b"})) is True
        assert await req.check(_make_permissions(permissions={"a"})) is False


class TestManageNavigation:
    async def test_default_permission(self):
        assert await ManageNavigation().check(_make_permissions(permissions={"settings.edit"})) is True
        assert await ManageNavigation().check(_make_permissions(permissions={"settings.view"})) is False

    async def test_configured_permission(self, temp_app_yaml):
        import consolenav.config as config_mod

        config_mod._config_path_override = temp_app_yaml({"navigation": {"manage_permission": "nav.manage"}})
        config_mod.clear_settings_cache()

        assert await ManageNavigation().check(_make_permissions(permissions={"nav.manage"})) is True
        assert await ManageNavigation().check(_make_permissions(permissions={"settings.edit"})) is False


# ===========================================================================
# Resolution
# ===========================================================================

class TestResolvePermissions:
    def test_session_resolver(self):
        connection = _make_connection({"user_id": "u1", "permissions": ["settings.edit"]})

        assert session_permission_resolver(connection) == UserPermissions("u1", {"settings.edit"})

    @pytest.mark.parametrize("session_data", [None, {}, {"permissions": ["x"]}])
    def test_session_without_user(self, session_data):
        assert session_permission_resolver(_make_connection(session_data)) is None

    async def test_custom_async_resolver(self):
        async def resolver(connection):
            return UserPermissions("svc", {"administrator"})

        connection = _make_connection(resolver=resolver)

        assert await resolve_permissions(connection) == UserPermissions("svc", {"administrator"})


# ===========================================================================
# auth_guard()
# ===========================================================================

class TestAuthGuard:
    async def test_no_user_raises(self):
        with pytest.raises(NotAuthorizedException, match="Authentication required"):
            await auth_guard(_make_connection(), _make_route_handler())

    async def test_logged_in_without_requirements(self):
        connection = _make_connection({"user_id": "u1"})

        assert await auth_guard(connection, _make_route_handler(guards=[MagicMock()])) is None

    async def test_requirements_met(self):
        connection = _make_connection({"user_id": "u1", "permissions": ["settings.edit"]})
        handler = _make_route_handler(guards=[auth_guard, Permission("settings.edit")])

        assert await auth_guard(connection, handler) is None

    async def test_requirements_not_met(self):
        connection = _make_connection({"user_id": "u1", "permissions": ["settings.view"]})
        handler = _make_route_handler(guards=[Permission("settings.view"), Permission("settings.edit")])

        with pytest.raises(PermissionDeniedException, match="Insufficient permissions"):
            await auth_guard(connection, handler)

    async def test_requirement_itself_is_a_noop_guard(self):
        assert await Permission("x")(_make_connection(), _make_route_handler()) is None
