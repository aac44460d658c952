"""Field checks shared by the section and page entry stores."""

import re

from consolenav.lib.exceptions import ValidationError
from consolenav.navigation.refs import UNGROUPED_KEY

KEY_PATTERN = re.compile(r"^[A-Za-z0-9][A-Za-z0-9_.-]*$")
KEY_MAX_LENGTH = 100


def require_text(value: str | None, field: str, max_length: int = 200) -> str:
    """Return ``value`` stripped, rejecting empty or oversized input."""
    value = (value or "").strip()
    if not value:
        raise ValidationError(f"{field} is required", field=field)
    if len(value) > max_length:
        raise ValidationError(f"{field} must be at most {max_length} characters", field=field)
    return value


def optional_text(value: str | None, field: str, max_length: int = 200) -> str | None:
    value = (value or "").strip()
    if len(value) > max_length:
        raise ValidationError(f"{field} must be at most {max_length} characters", field=field)
    return value or None


def validate_key(key: str | None, field: str = "key", reserved_ok: bool = False) -> str:
    key = require_text(key, field, KEY_MAX_LENGTH)
    if not KEY_PATTERN.match(key):
        raise ValidationError(
            f"{field} may only contain letters, digits, '.', '_' and '-'", field=field
        )
    if key == UNGROUPED_KEY and not reserved_ok:
        raise ValidationError(f"'{UNGROUPED_KEY}' is reserved", field=field)
    return key


def validate_route(route: str | None) -> str:
    route = require_text(route, "route", 500)
    if not route.startswith("/") or any(c.isspace() for c in route):
        raise ValidationError("route must be an absolute path without spaces", field="route")
    return route
