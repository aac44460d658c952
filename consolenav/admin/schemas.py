"""Request bodies accepted by the navigation admin API.

These only describe shapes; field rules (key format, route syntax, lengths)
are enforced by the services so the CLI and hooks share them.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict


class _Body(BaseModel):
    model_config = ConfigDict(extra="forbid")


class SectionCreate(_Body):
    key: str
    display_name: str
    icon_name: str = ""
    collapsed_by_default: bool = False


class SectionUpdate(_Body):
    display_name: str | None = None
    icon_name: str | None = None
    collapsed_by_default: bool | None = None


class SectionMove(_Body):
    moved_key: str
    target_index: int


class PageCreate(_Body):
    key: str
    title: str
    route: str
    icon_name: str = ""
    permission: str = ""
    description: str | None = None
    # "ungrouped" (or omitted) for the implicit section
    section_key: str | None = None
    visible: bool = True
    primary_action_label: str | None = None
    ai_action_label: str | None = None


class PageUpdate(_Body):
    title: str | None = None
    route: str | None = None
    icon_name: str | None = None
    permission: str | None = None
    description: str | None = None
    visible: bool | None = None
    primary_action_label: str | None = None
    ai_action_label: str | None = None


class VisibilityChange(_Body):
    visible: bool


class PageMove(_Body):
    """One drop: ``source`` and ``target`` are section keys or ``"ungrouped"``."""

    moved_key: str
    source: str
    target: str
    target_index: int


class ResetRequest(_Body):
    confirm: bool = False
