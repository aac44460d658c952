"""Capability checks consumed from the console's login flow.

Authentication and permission evaluation live outside this project. The login
flow writes ``user_id`` and ``permissions`` into the session; a different
source can be plugged in by setting ``app.state.permission_resolver`` to a
``(connection) -> UserPermissions | None`` callable (sync or async).

Route handlers declare requirements next to ``auth_guard``::

    @post("/reset", guards=[auth_guard, Permission("settings.edit")])

``auth_guard`` performs the login check and evaluates every
``AuthRequirement`` found in the handler's guards.
"""

from __future__ import annotations

import inspect
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from litestar.exceptions import NotAuthorizedException, PermissionDeniedException

if TYPE_CHECKING:
    from litestar.connection import ASGIConnection
    from litestar.handlers.base import BaseRouteHandler

# Grants every permission
ADMINISTRATOR_PERMISSION = "administrator"


@dataclass
class UserPermissions:
    """The capabilities of the current caller."""

    user_id: str
    permissions: set[str] = field(default_factory=set)

    def has(self, permission: str) -> bool:
        """Whether the caller holds ``permission``; an empty permission is public."""
        if not permission:
            return True
        return ADMINISTRATOR_PERMISSION in self.permissions or permission in self.permissions


class AuthRequirement(ABC):
    """A composable requirement evaluated by ``auth_guard``."""

    @abstractmethod
    async def check(self, permissions: UserPermissions) -> bool:
        ...

    async def __call__(self, connection: ASGIConnection, handler: BaseRouteHandler) -> None:
        # Evaluated by auth_guard, which has the resolved permissions
        return None

    def __or__(self, other: AuthRequirement) -> OrRequirement:
        return OrRequirement(self, other)

    def __and__(self, other: AuthRequirement) -> AndRequirement:
        return AndRequirement(self, other)


class Permission(AuthRequirement):
    def __init__(self, permission: str):
        self.permission = permission

    async def check(self, permissions: UserPermissions) -> bool:
        return permissions.has(self.permission)

    def __repr__(self) -> str:
        return f"Permission({self.permission!r})"


class OrRequirement(AuthRequirement):
    def __init__(self, left: AuthRequirement, right: AuthRequirement):
        self.left = left
        self.right = right

    async def check(self, permissions: UserPermissions) -> bool:
        return await self.left.check(permissions) or await self.right.check(permissions)


class AndRequirement(AuthRequirement):
    def __init__(self, left: AuthRequirement, right: AuthRequirement):
        self.left = left
        self.right = right

    async def check(self, permissions: UserPermissions) -> bool:
        return await self.left.check(permissions) and await self.right.check(permissions)


def session_permission_resolver(connection: ASGIConnection) -> UserPermissions | None:
    """Read the caller from the cookie session written by the login flow."""
    session = connection.scope.get("session")
    if not session or not session.get("user_id"):
        return None
    return UserPermissions(
        user_id=str(session["user_id"]),
        permissions=set(session.get("permissions") or ()),
    )


async def resolve_permissions(connection: ASGIConnection) -> UserPermissions | None:
    """Resolve the caller through the app's resolver, defaulting to the session."""
    resolver: Any = getattr(connection.app.state, "permission_resolver", None) or session_permission_resolver
    result = resolver(connection)
    if inspect.isawaitable(result):
        result = await result
    return result


async def auth_guard(connection: ASGIConnection, handler: BaseRouteHandler) -> None:
    """Require a logged-in caller that satisfies every requirement on the handler.

    Raises:
        NotAuthorizedException: No caller (401).
        PermissionDeniedException: A requirement is not met (403).
    """
    permissions = await resolve_permissions(connection)
    if permissions is None:
        raise NotAuthorizedException("Authentication required")

    requirements = [g for g in (handler.guards or []) if isinstance(g, AuthRequirement)]
    for requirement in requirements:
        if not await requirement.check(permissions):
            raise PermissionDeniedException("Insufficient permissions")


class ManageNavigation(AuthRequirement):
    """The capability configured as ``navigation.manage_permission``."""

    async def check(self, permissions: UserPermissions) -> bool:
        from consolenav.config import get_settings

        return permissions.has(get_settings().navigation.manage_permission)

    def __repr__(self) -> str:
        return "ManageNavigation()"
