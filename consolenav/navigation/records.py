"""Detached, immutable copies of sections and page entries.

Caches, the baseline table and API responses use these instead of ORM rows so
nothing outlives the database session that loaded it.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any

from consolenav.navigation.refs import UNGROUPED_KEY


@dataclass(frozen=True)
class SectionRecord:
    key: str
    display_name: str
    icon_name: str = ""
    sort_order: int = 0
    collapsed_by_default: bool = False

    @classmethod
    def from_model(cls, section) -> SectionRecord:
        return cls(
            key=section.key,
            display_name=section.display_name,
            icon_name=section.icon_name,
            sort_order=section.sort_order,
            collapsed_by_default=section.collapsed_by_default,
        )

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class PageEntryRecord:
    key: str
    title: str
    route: str
    icon_name: str = ""
    permission: str = ""
    description: str | None = None
    section_key: str | None = None
    sort_order: int = 0
    visible: bool = True
    primary_action_label: str | None = None
    ai_action_label: str | None = None

    @classmethod
    def from_model(cls, page) -> PageEntryRecord:
        return cls(
            key=page.key,
            title=page.title,
            route=page.route,
            icon_name=page.icon_name,
            permission=page.permission,
            description=page.description,
            section_key=page.section_key,
            sort_order=page.sort_order,
            visible=page.visible,
            primary_action_label=page.primary_action_label,
            ai_action_label=page.ai_action_label,
        )

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["section_key"] = self.section_key or UNGROUPED_KEY
        return data
