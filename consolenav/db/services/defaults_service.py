"""Restore the shipped navigation baseline."""

import logging

from sqlalchemy import delete
from sqlalchemy.ext.asyncio import AsyncSession

from consolenav.db.models import PageEntry, Section
from consolenav.db.services.page_entry_service import list_pages
from consolenav.db.services.section_service import list_sections
from consolenav.db.session import store_transaction
from consolenav.lib.hooks import AFTER_NAVIGATION_RESET, hooks
from consolenav.navigation.baseline import Baseline, get_baseline

logger = logging.getLogger(__name__)


async def reset_to_defaults(
    db_session: AsyncSession,
    baseline: Baseline | None = None,
) -> tuple[list[Section], list[PageEntry]]:
    """Replace every section and page entry with the baseline.

    This ignores the deletion guard: visible entries are removed too. Callers
    are responsible for having obtained an explicit confirmation.

    Args:
        db_session: Database session
        baseline: Hierarchy to restore (defaults to the shipped one)

    Returns:
        The restored sections and page entries, in display order
    """
    if baseline is None:
        baseline = await get_baseline()

    async with store_transaction(db_session, "reset_navigation"):
        await db_session.execute(delete(PageEntry))
        await db_session.execute(delete(Section))
        # Sections first so page foreign keys resolve
        db_session.add_all(
            Section(
                key=s.key,
                display_name=s.display_name,
                icon_name=s.icon_name,
                sort_order=s.sort_order,
                collapsed_by_default=s.collapsed_by_default,
            )
            for s in baseline.sections
        )
        await db_session.flush()
        db_session.add_all(
            PageEntry(
                key=p.key,
                title=p.title,
                description=p.description,
                icon_name=p.icon_name,
                route=p.route,
                permission=p.permission,
                section_key=p.section_key,
                sort_order=p.sort_order,
                visible=p.visible,
                primary_action_label=p.primary_action_label,
                ai_action_label=p.ai_action_label,
            )
            for p in baseline.pages
        )

    logger.info(
        "Navigation reset to baseline (%d sections, %d pages)",
        len(baseline.sections),
        len(baseline.pages),
    )

    sections = await list_sections(db_session)
    pages = await list_pages(db_session)
    await hooks.do_action(AFTER_NAVIGATION_RESET, sections, pages)
    return sections, pages
