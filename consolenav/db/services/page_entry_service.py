"""Page entry store: ordered-record CRUD for sidebar page entries."""

from collections.abc import Sequence

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from consolenav.db.models import PageEntry, Section
from consolenav.db.session import store_transaction
from consolenav.lib.exceptions import NotFoundError, ValidationError
from consolenav.lib.hooks import (
    AFTER_PAGE_ENTRY_DELETE,
    AFTER_PAGE_ENTRY_SAVE,
    BEFORE_PAGE_ENTRY_DELETE,
    hooks,
)
from consolenav.navigation import guard
from consolenav.navigation.refs import UNGROUPED_KEY, SectionRef, section_ref
from consolenav.navigation.reorder import OrderUpdate, apply_updates, next_sort_order
from consolenav.navigation.validation import optional_text, require_text, validate_key, validate_route


async def list_pages(
    db_session: AsyncSession,
    section: SectionRef | None = None,
) -> list[PageEntry]:
    """List page entries ordered by section then ``sort_order``.

    Args:
        db_session: Database session
        section: Only return entries of this section (None for all)

    Returns:
        List of PageEntry objects
    """
    query = select(PageEntry)
    if section is not None:
        column_value = section.column_value
        if column_value is None:
            query = query.where(PageEntry.section_key.is_(None))
        else:
            query = query.where(PageEntry.section_key == column_value)

    query = query.order_by(PageEntry.section_key.asc(), PageEntry.sort_order.asc(), PageEntry.key.asc())
    result = await db_session.execute(query)
    return list(result.scalars().all())


async def get_page(db_session: AsyncSession, key: str) -> PageEntry | None:
    result = await db_session.execute(select(PageEntry).where(PageEntry.key == key))
    return result.scalar_one_or_none()


async def _require_section(db_session: AsyncSession, section_key: str | None) -> None:
    if section_key is None:
        return
    result = await db_session.execute(select(Section.key).where(Section.key == section_key))
    if result.scalar_one_or_none() is None:
        raise ValidationError(f"Section '{section_key}' does not exist", field="section_key")


async def _require_unique_route(db_session: AsyncSession, route: str, key: str) -> None:
    result = await db_session.execute(
        select(PageEntry.key).where(PageEntry.route == route, PageEntry.key != key)
    )
    taken_by = result.scalars().first()
    if taken_by is not None:
        raise ValidationError(f"Route '{route}' is already used by page '{taken_by}'", field="route")


async def upsert_page(
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
    """Create a page entry, or update the mutable fields of an existing one.

    A new entry is appended to the end of ``section_key`` (None or
    ``"ungrouped"`` for the implicit section). For an existing entry
    ``section_key`` is ignored: entries change section only by being moved.

    Args:
        db_session: Database session
        key: Page entry key (identity)
        title: Label shown in the sidebar
        route: Unique link target
        icon_name: Opaque icon identifier
        permission: Capability required to see the entry
        description: Optional longer description
        section_key: Section of a new entry
        visible: Whether the renderer shows the entry
        primary_action_label: Optional label passed through to the renderer
        ai_action_label: Optional label passed through to the renderer

    Returns:
        The created or updated PageEntry

    Raises:
        ValidationError: On a malformed field, a taken route or an unknown section.
    """
    key = validate_key(key, reserved_ok=True)
    title = require_text(title, "title")
    route = validate_route(route)
    fields = {
        "title": title,
        "route": route,
        "icon_name": optional_text(icon_name, "icon_name", 100) or "",
        "permission": optional_text(permission, "permission", 100) or "",
        "description": optional_text(description, "description", 2000),
        "visible": bool(visible),
        "primary_action_label": optional_text(primary_action_label, "primary_action_label"),
        "ai_action_label": optional_text(ai_action_label, "ai_action_label"),
    }

    async with store_transaction(db_session, "save_page_entry", [key]):
        await _require_unique_route(db_session, route, key)
        page = await get_page(db_session, key)
        is_new = page is None

        if is_new:
            ref = section_ref(section_key)
            await _require_section(db_session, ref.column_value)
            siblings = await list_pages(db_session, ref)
            page = PageEntry(key=key, section_key=ref.column_value, sort_order=next_sort_order(siblings))
            db_session.add(page)

        for name, value in fields.items():
            setattr(page, name, value)

    await db_session.refresh(page)
    await hooks.do_action(AFTER_PAGE_ENTRY_SAVE, page, is_new=is_new)
    return page


async def set_page_visibility(db_session: AsyncSession, key: str, visible: bool) -> PageEntry:
    """Show or hide a page entry."""
    async with store_transaction(db_session, "set_page_visibility", [key]):
        page = await get_page(db_session, key)
        if page is None:
            raise NotFoundError(f"Page '{key}' not found", key=key)
        page.visible = bool(visible)

    await db_session.refresh(page)
    await hooks.do_action(AFTER_PAGE_ENTRY_SAVE, page, is_new=False)
    return page


async def delete_page(db_session: AsyncSession, key: str) -> None:
    """Delete a hidden page entry.

    Raises:
        NotFoundError: If the entry does not exist.
        DeletionBlocked: If the entry is still visible.
    """
    async with store_transaction(db_session, "delete_page_entry", [key]):
        page = await get_page(db_session, key)
        if page is None:
            raise NotFoundError(f"Page '{key}' not found", key=key)

        guard.ensure_page_deletable(page)
        await hooks.do_action(BEFORE_PAGE_ENTRY_DELETE, page)
        await db_session.delete(page)

    await hooks.do_action(AFTER_PAGE_ENTRY_DELETE, key)


async def reorder_pages(db_session: AsyncSession, updates: Sequence[OrderUpdate]) -> None:
    """Apply a batch of ``{key, sort_order, section_key}`` updates atomically.

    Raises:
        NotFoundError: If any key in the batch no longer exists.
        ValidationError: If a target section does not exist.
        In both cases nothing is applied.
    """
    if not updates:
        return

    keys = [u.key for u in updates]
    async with store_transaction(db_session, "reorder_page_entries", keys):
        result = await db_session.execute(select(PageEntry).where(PageEntry.key.in_(keys)))
        pages = list(result.scalars().all())

        missing = sorted(set(keys) - {p.key for p in pages})
        if missing:
            raise NotFoundError(f"Pages no longer exist: {', '.join(missing)}", key=missing[0])

        for section_key in {u.section_key for u in updates}:
            if section_key == UNGROUPED_KEY:
                raise ValidationError("Use None for the ungrouped section in a batch", field="section_key")
            await _require_section(db_session, section_key)

        apply_updates(pages, updates)
