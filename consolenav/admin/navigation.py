"""Navigation manager admin API (JSON)."""

from __future__ import annotations

from typing import Any

from litestar import Controller, Request, delete, get, patch, post
from litestar.status_codes import HTTP_200_OK
from sqlalchemy.ext.asyncio import AsyncSession

from consolenav.admin.schemas import (
    PageCreate,
    PageMove,
    PageUpdate,
    ResetRequest,
    SectionCreate,
    SectionMove,
    SectionUpdate,
    VisibilityChange,
)
from consolenav.auth.guards import ManageNavigation, auth_guard, resolve_permissions
from consolenav.config import get_settings
from consolenav.navigation import service
from consolenav.navigation.records import PageEntryRecord, SectionRecord
from consolenav.navigation.refs import section_ref
from consolenav.navigation.registry import registry
from consolenav.navigation.reorder import MoveIntent, OrderUpdate
from consolenav.navigation.sidebar import build_sidebar


def _updates_payload(updates: list[OrderUpdate]) -> list[dict[str, Any]]:
    return [
        {"key": u.key, "sort_order": u.sort_order, "section_key": u.section_key}
        for u in updates
    ]


class NavigationAdminController(Controller):
    """Sections and page entries of the console sidebar."""

    path = "/admin/navigation"
    guards = [auth_guard]

    @get("/", guards=[ManageNavigation()])
    async def show_tree(self, db_session: AsyncSession) -> dict[str, Any]:
        """Every section and page entry, hidden ones included, in display order."""
        sections = await registry.list_sections(db_session)
        groups = await registry.group_pages_by_section(db_session)
        return {
            "version": registry.version,
            "sections": [s.to_dict() for s in sections],
            "pages": {key: [p.to_dict() for p in pages] for key, pages in groups.items()},
        }

    @get("/sidebar")
    async def sidebar(self, request: Request, db_session: AsyncSession) -> dict[str, Any]:
        """What the sidebar renderer shows the current caller."""
        permissions = await resolve_permissions(request)
        sections = await registry.list_sections(db_session)
        groups = await registry.group_pages_by_section(db_session)
        return {
            "version": registry.version,
            "sections": await build_sidebar(sections, groups, permissions),
        }

    # --- Sections ---

    @post("/sections", guards=[ManageNavigation()])
    async def create_section(self, db_session: AsyncSession, data: SectionCreate) -> dict[str, Any]:
        section = await service.create_section(db_session, **data.model_dump())
        return SectionRecord.from_model(section).to_dict()

    @patch("/sections/{key:str}", guards=[ManageNavigation()])
    async def update_section(self, db_session: AsyncSession, key: str, data: SectionUpdate) -> dict[str, Any]:
        section = await service.update_section(db_session, key, **data.model_dump(exclude_unset=True))
        return SectionRecord.from_model(section).to_dict()

    @delete("/sections/{key:str}", guards=[ManageNavigation()], status_code=HTTP_200_OK)
    async def delete_section(self, db_session: AsyncSession, key: str, cascade: bool = False) -> dict[str, Any]:
        """Delete a section; ``?cascade=true`` also removes visible pages."""
        deleted_pages = await service.delete_section(db_session, key, cascade=cascade)
        return {"deleted": key, "deleted_pages": deleted_pages}

    @post("/sections/move", guards=[ManageNavigation()], status_code=HTTP_200_OK)
    async def move_section(self, db_session: AsyncSession, data: SectionMove) -> dict[str, Any]:
        updates = await service.move_section(db_session, data.moved_key, data.target_index)
        return {"updates": _updates_payload(updates)}

    # --- Page entries ---

    @post("/pages", guards=[ManageNavigation()])
    async def create_page(self, db_session: AsyncSession, data: PageCreate) -> dict[str, Any]:
        page = await service.create_page(db_session, **data.model_dump())
        return PageEntryRecord.from_model(page).to_dict()

    @patch("/pages/{key:str}", guards=[ManageNavigation()])
    async def update_page(self, db_session: AsyncSession, key: str, data: PageUpdate) -> dict[str, Any]:
        page = await service.update_page(db_session, key, **data.model_dump(exclude_unset=True))
        return PageEntryRecord.from_model(page).to_dict()

    @post("/pages/{key:str}/visibility", guards=[ManageNavigation()], status_code=HTTP_200_OK)
    async def set_visibility(self, db_session: AsyncSession, key: str, data: VisibilityChange) -> dict[str, Any]:
        """Hide or show a page entry (hiding is the step before deleting)."""
        page = await service.set_page_visibility(db_session, key, data.visible)
        return PageEntryRecord.from_model(page).to_dict()

    @delete("/pages/{key:str}", guards=[ManageNavigation()], status_code=HTTP_200_OK)
    async def delete_page(self, db_session: AsyncSession, key: str) -> dict[str, Any]:
        await service.delete_page(db_session, key)
        return {"deleted": key}

    @post("/pages/move", guards=[ManageNavigation()], status_code=HTTP_200_OK)
    async def move_page(self, db_session: AsyncSession, data: PageMove) -> dict[str, Any]:
        intent = MoveIntent(
            moved_key=data.moved_key,
            source=section_ref(data.source),
            target=section_ref(data.target),
            target_index=data.target_index,
        )
        updates = await service.move_page(db_session, intent)
        return {"updates": _updates_payload(updates)}

    # --- Reset ---

    @post("/reset", guards=[ManageNavigation()], status_code=HTTP_200_OK)
    async def reset(self, db_session: AsyncSession, data: ResetRequest) -> dict[str, Any]:
        """Restore the baseline hierarchy; requires ``{"confirm": true}``."""
        sections, pages = await service.reset_to_defaults(
            db_session,
            confirm=data.confirm,
            baseline_file=get_settings().navigation.baseline_file,
        )
        return {
            "sections": [SectionRecord.from_model(s).to_dict() for s in sections],
            "pages": [PageEntryRecord.from_model(p).to_dict() for p in pages],
        }
