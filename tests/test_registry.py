"""Tests for the cached section and page registries."""

from unittest.mock import patch

from consolenav.navigation.records import PageEntryRecord, SectionRecord
from consolenav.navigation.registry import NavigationRegistry, group_pages


def _page(key, section_key, sort_order, visible=True):
    return PageEntryRecord(key, key.title(), f"/{key}", section_key=section_key,
                           sort_order=sort_order, visible=visible)


class TestGroupPages:
    def test_groups_in_section_order_with_ungrouped_last(self):
        sections = [SectionRecord("b", "B", sort_order=1), SectionRecord("a", "A", sort_order=0)]
        pages = [_page("b2", "b", 1), _page("loose", None, 0), _page("b1", "b", 0), _page("a1", "a", 0)]

        groups = group_pages(sections, pages)

        assert list(groups) == ["a", "b", "ungrouped"]
        assert [p.key for p in groups["b"]] == ["b1", "b2"]
        assert [p.key for p in groups["ungrouped"]] == ["loose"]

    def test_empty_sections_and_ungrouped_are_present(self):
        groups = group_pages([SectionRecord("a", "A")], [])

        assert groups == {"a": [], "ungrouped": []}

    def test_hidden_pages_are_kept(self):
        groups = group_pages([SectionRecord("a", "A")], [_page("h", "a", 0, visible=False)])

        assert [p.key for p in groups["a"]] == ["h"]


class TestNavigationRegistry:
    async def test_loads_lazily_and_caches(self, db_session, make_section, make_page):
        await make_section("a", 0)
        await make_page("p1", "a", 0)
        registry = NavigationRegistry()
        assert not registry.loaded

        sections = await registry.list_sections(db_session)
        assert registry.loaded
        assert [s.key for s in sections] == ["a"]

        with patch("consolenav.navigation.registry.section_service.list_sections") as list_sections:
            await registry.list_sections(db_session)
            await registry.group_pages_by_section(db_session)
            list_sections.assert_not_called()

    async def test_snapshots_are_detached_records(self, db_session, make_section, make_page):
        await make_section("a", 0)
        await make_page("p1", "a", 0)

        pages = await NavigationRegistry().list_pages(db_session)

        assert pages == [_page("p1", "a", 0)]
        assert isinstance(pages[0], PageEntryRecord)

    async def test_invalidate_refetches(self, db_session, make_section):
        await make_section("a", 0)
        registry = NavigationRegistry()
        await registry.list_sections(db_session)

        await make_section("b", 1)
        assert [s.key for s in await registry.list_sections(db_session)] == ["a"]

        registry.invalidate()
        assert registry.version == 1
        assert [s.key for s in await registry.list_sections(db_session)] == ["a", "b"]

    async def test_refresh_does_not_cache_when_invalidated_meanwhile(self, db_session, make_section):
        await make_section("a", 0)
        registry = NavigationRegistry()

        from consolenav.db.services import section_service

        original = section_service.list_sections

        async def list_and_invalidate(session):
            result = await original(session)
            registry.invalidate()
            return result

        with patch("consolenav.navigation.registry.section_service.list_sections", list_and_invalidate):
            sections, _ = await registry.refresh(db_session)

        assert [s.key for s in sections] == ["a"]
        assert not registry.loaded
