"""The structure the console's sidebar renderer draws."""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from typing import Any

from consolenav.auth.guards import UserPermissions
from consolenav.lib.hooks import SIDEBAR_ITEMS, hooks
from consolenav.navigation.records import PageEntryRecord, SectionRecord
from consolenav.navigation.refs import UNGROUPED_KEY
from consolenav.navigation.reorder import ordered


def _page_item(page: PageEntryRecord) -> dict[str, Any]:
    return {
        "key": page.key,
        "title": page.title,
        "route": page.route,
        "icon_name": page.icon_name,
        "description": page.description,
        "primary_action_label": page.primary_action_label,
        "ai_action_label": page.ai_action_label,
    }


async def build_sidebar(
    sections: Iterable[SectionRecord],
    groups: Mapping[str, Sequence[PageEntryRecord]],
    permissions: UserPermissions,
) -> list[dict[str, Any]]:
    """Build the sidebar for one caller.

    Only visible entries the caller is permitted to see are kept (the
    permission is checked per entry). Sections left without entries are
    omitted and the ungrouped entries, if any, come last.

    Args:
        sections: All sections
        groups: Output of ``group_pages_by_section()``
        permissions: The caller's capabilities

    Returns:
        Ordered list of ``{key, display_name, icon_name, collapsed_by_default, pages}``
    """
    def allowed(pages: Sequence[PageEntryRecord]) -> list[dict[str, Any]]:
        return [_page_item(p) for p in ordered(pages) if p.visible and permissions.has(p.permission)]

    items = []
    for section in ordered(sections):
        pages = allowed(groups.get(section.key, ()))
        if pages:
            items.append(
                {
                    "key": section.key,
                    "display_name": section.display_name,
                    "icon_name": section.icon_name,
                    "collapsed_by_default": section.collapsed_by_default,
                    "pages": pages,
                }
            )

    ungrouped = allowed(groups.get(UNGROUPED_KEY, ()))
    if ungrouped:
        items.append(
            {
                "key": UNGROUPED_KEY,
                "display_name": None,
                "icon_name": "",
                "collapsed_by_default": False,
                "pages": ungrouped,
            }
        )

    return await hooks.apply_filters(SIDEBAR_ITEMS, items, permissions)
