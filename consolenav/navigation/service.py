"""Navigation manager operations.

Each function is one administrator action: validate, plan (reorder engine or
deletion guard), persist through the store in a single transaction, then drop
the registry cache. The cache is dropped on failure too, so the next read
resynchronizes with whatever the store actually holds.
"""

from __future__ import annotations

from functools import wraps
from typing import Any, Awaitable, Callable, TypeVar

from sqlalchemy.ext.asyncio import AsyncSession

from consolenav.db.models import PageEntry, Section
from consolenav.db.services import defaults_service, page_entry_service, section_service
from consolenav.lib.exceptions import NotFoundError, ValidationError
from consolenav.lib.hooks import AFTER_NAVIGATION_REORDER, hooks
from consolenav.navigation.baseline import get_baseline
from consolenav.navigation.refs import Named
from consolenav.navigation.registry import registry
from consolenav.navigation.reorder import MoveIntent, OrderUpdate, plan_page_move, plan_section_move

T = TypeVar("T")

_UNSET: Any = object()  # Sentinel for distinguishing None from "not provided"


def invalidates_registry(func: Callable[..., Awaitable[T]]) -> Callable[..., Awaitable[T]]:
    """Drop the registry cache once the wrapped operation finishes, whatever the outcome."""

    @wraps(func)
    async def wrapper(*args: Any, **kwargs: Any) -> T:
        try:
            return await func(*args, **kwargs)
        finally:
            registry.invalidate()

    return wrapper


async def _require_section(db_session: AsyncSession, key: str) -> Section:
    section = await section_service.get_section(db_session, key)
    if section is None:
        raise NotFoundError(f"Section '{key}' not found", key=key)
    return section


async def _require_page(db_session: AsyncSession, key: str) -> PageEntry:
    page = await page_entry_service.get_page(db_session, key)
    if page is None:
        raise NotFoundError(f"Page '{key}' not found", key=key)
    return page


# --- Sections ---


@invalidates_registry
async def create_section(
    db_session: AsyncSession,
    key: str,
    display_name: str,
    icon_name: str = "",
    collapsed_by_default: bool = False,
) -> Section:
    """Create a section at the end of the section list."""
    if await section_service.get_section(db_session, (key or "").strip()) is not None:
        raise ValidationError(f"Section '{key}' already exists", field="key")
    return await section_service.upsert_section(
        db_session,
        key=key,
        display_name=display_name,
        icon_name=icon_name,
        collapsed_by_default=collapsed_by_default,
    )


@invalidates_registry
async def update_section(
    db_session: AsyncSession,
    key: str,
    display_name: str = _UNSET,
    icon_name: str = _UNSET,
    collapsed_by_default: bool = _UNSET,
) -> Section:
    """Edit the mutable fields of a section; omitted fields keep their value."""
    section = await _require_section(db_session, key)
    return await section_service.upsert_section(
        db_session,
        key=key,
        display_name=section.display_name if display_name is _UNSET else display_name,
        icon_name=section.icon_name if icon_name is _UNSET else icon_name,
        collapsed_by_default=(
            section.collapsed_by_default if collapsed_by_default is _UNSET else collapsed_by_default
        ),
    )


@invalidates_registry
async def delete_section(db_session: AsyncSession, key: str, cascade: bool = False) -> list[str]:
    """Delete a section (and its pages), subject to the deletion guard."""
    return await section_service.delete_section(db_session, key, cascade=cascade)


@invalidates_registry
async def move_section(db_session: AsyncSession, moved_key: str, target_index: int) -> list[OrderUpdate]:
    """Move a section to ``target_index`` of the section list.

    Returns:
        The applied batch; empty when the section was already there
    """
    sections = await section_service.list_sections(db_session)
    updates = plan_section_move(sections, moved_key, target_index)
    if not updates:
        return []

    await section_service.reorder_sections(db_session, updates)
    await hooks.do_action(AFTER_NAVIGATION_REORDER, "sections", updates)
    return updates


# --- Page entries ---


@invalidates_registry
async def create_page(
    db_session: AsyncSession,
    key: str,
    title: str,
    route: str,
    icon_name: str = "",
    permission: str = "",
    description: str | None = None,
    section_key: str | None = None,
    visible: bool = True,
    primary_action_label: str | None = None,
    ai_action_label: str | None = None,
) -> PageEntry:
    """Create a page entry at the end of its section."""
    if await page_entry_service.get_page(db_session, (key or "").strip()) is not None:
        raise ValidationError(f"Page '{key}' already exists", field="key")
    return await page_entry_service.upsert_page(
        db_session,
        key=key,
        title=title,
        route=route,
        icon_name=icon_name,
        permission=permission,
        description=description,
        section_key=section_key,
        visible=visible,
        primary_action_label=primary_action_label,
        ai_action_label=ai_action_label,
    )


_PAGE_FIELDS = (
    "title",
    "route",
    "icon_name",
    "permission",
    "description",
    "visible",
    "primary_action_label",
    "ai_action_label",
)


@invalidates_registry
async def update_page(db_session: AsyncSession, key: str, **changes: Any) -> PageEntry:
    """Edit the mutable fields of a page entry.

    Only the fields in ``_PAGE_FIELDS`` can be changed; ordering and section
    membership change through ``move_page``.
    """
    unknown = sorted(set(changes) - set(_PAGE_FIELDS))
    if unknown:
        raise ValidationError(f"Cannot update field(s): {', '.join(unknown)}", field=unknown[0])

    page = await _require_page(db_session, key)
    values = {name: changes.get(name, getattr(page, name)) for name in _PAGE_FIELDS}
    return await page_entry_service.upsert_page(db_session, key=key, **values)


@invalidates_registry
async def set_page_visibility(db_session: AsyncSession, key: str, visible: bool) -> PageEntry:
    """Hide or show a page entry."""
    return await page_entry_service.set_page_visibility(db_session, key, visible)


@invalidates_registry
async def delete_page(db_session: AsyncSession, key: str) -> None:
    """Delete a page entry, which must have been hidden first."""
    await page_entry_service.delete_page(db_session, key)


@invalidates_registry
async def move_page(db_session: AsyncSession, intent: MoveIntent) -> list[OrderUpdate]:
    """Apply one drag-and-drop of a page entry.

    The plan is computed from a fresh read of the store right before the
    batch is written.

    Returns:
        The applied batch; empty when the entry was dropped where it was
    """
    if isinstance(intent.target, Named):
        await _require_section(db_session, intent.target.key)

    pages = await page_entry_service.list_pages(db_session)
    updates = plan_page_move(pages, intent)
    if not updates:
        return []

    await page_entry_service.reorder_pages(db_session, updates)
    await hooks.do_action(AFTER_NAVIGATION_REORDER, "pages", updates)
    return updates


# --- Reset ---


@invalidates_registry
async def reset_to_defaults(
    db_session: AsyncSession,
    confirm: bool = False,
    baseline_file: str | None = None,
) -> tuple[list[Section], list[PageEntry]]:
    """Discard all customization and restore the baseline hierarchy.

    Raises:
        ValidationError: Unless ``confirm`` is True; nothing is changed.
    """
    if confirm is not True:
        raise ValidationError("Resetting navigation is irreversible and must be confirmed", field="confirm")

    baseline = await get_baseline(baseline_file)
    return await defaults_service.reset_to_defaults(db_session, baseline)
