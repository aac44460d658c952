"""Section store: ordered-record CRUD for navigation sections."""

from collections.abc import Sequence

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from consolenav.db.models import PageEntry, Section
from consolenav.db.session import store_transaction
from consolenav.lib.exceptions import NotFoundError
from consolenav.lib.hooks import (
    AFTER_PAGE_ENTRY_DELETE,
    AFTER_SECTION_DELETE,
    AFTER_SECTION_SAVE,
    BEFORE_PAGE_ENTRY_DELETE,
    BEFORE_SECTION_DELETE,
    hooks,
)
from consolenav.navigation import guard
from consolenav.navigation.reorder import OrderUpdate, apply_updates, next_sort_order
from consolenav.navigation.validation import optional_text, require_text, validate_key


async def list_sections(db_session: AsyncSession) -> list[Section]:
    """List all sections in display order."""
    result = await db_session.execute(
        select(Section).order_by(Section.sort_order.asc(), Section.key.asc())
    )
    return list(result.scalars().all())


async def get_section(db_session: AsyncSession, key: str) -> Section | None:
    result = await db_session.execute(select(Section).where(Section.key == key))
    return result.scalar_one_or_none()


async def upsert_section(
    db_session: AsyncSession,
    key: str,
    display_name: str,
    icon_name: str = "",
    collapsed_by_default: bool = False,
) -> Section:
    """Create a section, or update the mutable fields of an existing one.

    New sections are appended after the current last section. The key and the
    ordering of an existing section are never changed here.

    Args:
        db_session: Database session
        key: Section key (identity)
        display_name: Label shown in the sidebar
        icon_name: Opaque icon identifier
        collapsed_by_default: Whether the sidebar starts with it collapsed

    Returns:
        The created or updated Section
    """
    key = validate_key(key)
    display_name = require_text(display_name, "display_name")
    icon_name = optional_text(icon_name, "icon_name", 100) or ""

    async with store_transaction(db_session, "save_section", [key]):
        section = await get_section(db_session, key)
        is_new = section is None

        if is_new:
            sections = await list_sections(db_session)
            section = Section(key=key, sort_order=next_sort_order(sections))
            db_session.add(section)

        section.display_name = display_name
        section.icon_name = icon_name
        section.collapsed_by_default = bool(collapsed_by_default)

    await db_session.refresh(section)
    await hooks.do_action(AFTER_SECTION_SAVE, section, is_new=is_new)
    return section


async def delete_section(db_session: AsyncSession, key: str, cascade: bool = False) -> list[str]:
    """Delete a section together with its page entries.

    Without ``cascade`` the delete is refused while any of the section's page
    entries is visible; hidden ones go with the section. Every removed entry
    fires the page entry delete hooks, like ``delete_page``.

    Returns:
        Keys of the page entries deleted with the section

    Raises:
        ValidationError: For the reserved ungrouped section.
        NotFoundError: If the section does not exist.
        DeletionBlocked: If a page entry is visible and ``cascade`` is False.
    """
    async with store_transaction(db_session, "delete_section", [key]):
        guard.ensure_not_ungrouped(key)
        section = await get_section(db_session, key)
        if section is None:
            raise NotFoundError(f"Section '{key}' not found", key=key)

        result = await db_session.execute(select(PageEntry).where(PageEntry.section_key == key))
        pages = list(result.scalars().all())
        guard.ensure_section_deletable(key, pages, cascade=cascade)

        await hooks.do_action(BEFORE_SECTION_DELETE, section, pages, cascade=cascade)
        for page in sorted(pages, key=lambda p: p.key):
            await hooks.do_action(BEFORE_PAGE_ENTRY_DELETE, page)

        page_keys = sorted(p.key for p in pages)
        await db_session.execute(delete(PageEntry).where(PageEntry.section_key == key))
        await db_session.execute(delete(Section).where(Section.key == key))

    for page_key in page_keys:
        await hooks.do_action(AFTER_PAGE_ENTRY_DELETE, page_key)
    await hooks.do_action(AFTER_SECTION_DELETE, key, page_keys, cascade=cascade)
    return page_keys


async def reorder_sections(db_session: AsyncSession, updates: Sequence[OrderUpdate]) -> None:
    """Apply a batch of section ``sort_order`` updates atomically.

    Raises:
        NotFoundError: If any key in the batch no longer exists; nothing is applied.
    """
    if not updates:
        return

    keys = [u.key for u in updates]
    async with store_transaction(db_session, "reorder_sections", keys):
        result = await db_session.execute(select(Section).where(Section.key.in_(keys)))
        sections = list(result.scalars().all())

        missing = sorted(set(keys) - {s.key for s in sections})
        if missing:
            raise NotFoundError(f"Sections no longer exist: {', '.join(missing)}", key=missing[0])

        apply_updates(sections, updates, pages=False)
