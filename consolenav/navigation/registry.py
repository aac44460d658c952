"""Cached read views over the navigation store.

The registry owns no state of its own: it keeps the last snapshot loaded from
the store and drops it whenever a mutation succeeds or fails, bumping
``version`` so clients can tell their copy is stale.
"""

from __future__ import annotations

from collections.abc import Iterable

from sqlalchemy.ext.asyncio import AsyncSession

from consolenav.db.services import page_entry_service, section_service
from consolenav.navigation.records import PageEntryRecord, SectionRecord
from consolenav.navigation.refs import UNGROUPED_KEY
from consolenav.navigation.reorder import ordered


def group_pages(
    sections: Iterable[SectionRecord],
    pages: Iterable[PageEntryRecord],
) -> dict[str, list[PageEntryRecord]]:
    """Group page entries by section key in display order.

    Every section appears (empty ones included) in section order, followed by
    the ungrouped key, which is always present.
    """
    groups: dict[str, list[PageEntryRecord]] = {s.key: [] for s in ordered(sections)}
    groups[UNGROUPED_KEY] = []
    for page in ordered(pages):
        groups.setdefault(page.section_key or UNGROUPED_KEY, []).append(page)
    return groups


class NavigationRegistry:
    """Section and page registries backed by one invalidate-on-mutation cache."""

    def __init__(self) -> None:
        self._sections: tuple[SectionRecord, ...] | None = None
        self._pages: tuple[PageEntryRecord, ...] | None = None
        self.version = 0

    @property
    def loaded(self) -> bool:
        return self._sections is not None and self._pages is not None

    def invalidate(self) -> None:
        """Drop the cached snapshot; the next read refetches from the store."""
        self._sections = None
        self._pages = None
        self.version += 1

    async def refresh(
        self, db_session: AsyncSession
    ) -> tuple[tuple[SectionRecord, ...], tuple[PageEntryRecord, ...]]:
        """Load a fresh snapshot from the store.

        The snapshot is only cached if no invalidation happened while loading.
        """
        version = self.version
        sections = await section_service.list_sections(db_session)
        pages = await page_entry_service.list_pages(db_session)
        snapshot = (
            tuple(SectionRecord.from_model(s) for s in sections),
            tuple(PageEntryRecord.from_model(p) for p in pages),
        )
        if version == self.version:
            self._sections, self._pages = snapshot
        return snapshot

    async def _snapshot(
        self, db_session: AsyncSession
    ) -> tuple[tuple[SectionRecord, ...], tuple[PageEntryRecord, ...]]:
        if self.loaded:
            return self._sections, self._pages
        return await self.refresh(db_session)

    async def list_sections(self, db_session: AsyncSession) -> list[SectionRecord]:
        """All sections, ascending ``sort_order``."""
        sections, _ = await self._snapshot(db_session)
        return ordered(sections)

    async def list_pages(self, db_session: AsyncSession) -> list[PageEntryRecord]:
        """All page entries, each carrying its ``sort_order`` and ``section_key``."""
        _, pages = await self._snapshot(db_session)
        return list(pages)

    async def group_pages_by_section(self, db_session: AsyncSession) -> dict[str, list[PageEntryRecord]]:
        sections, pages = await self._snapshot(db_session)
        return group_pages(sections, pages)


# Process-wide registry used by the admin API and the sidebar feed
registry = NavigationRegistry()
