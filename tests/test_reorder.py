"""Tests for the pure reorder planning functions."""

import pytest

from consolenav.lib.exceptions import NotFoundError
from consolenav.navigation.records import PageEntryRecord, SectionRecord
from consolenav.navigation.refs import UNGROUPED, Named
from consolenav.navigation.reorder import (
    MoveIntent,
    OrderUpdate,
    apply_updates,
    clamp_index,
    next_sort_order,
    ordered,
    plan_page_move,
    plan_section_move,
)


class Row:
    """Mutable stand-in for an ORM row."""

    def __init__(self, key, sort_order, section_key=None):
        self.key = key
        self.sort_order = sort_order
        self.section_key = section_key

    def __repr__(self):
        return f"Row({self.key!r}, {self.sort_order}, {self.section_key!r})"


def _page(key, section_key, sort_order):
    return PageEntryRecord(key, key.title(), f"/{key}", section_key=section_key, sort_order=sort_order)


def _container(rows, section_key):
    return [(r.key, r.sort_order) for r in ordered(r for r in rows if r.section_key == section_key)]


class TestSectionMoves:
    def test_move_last_section_to_front(self):
        """[A(0), B(1), C(2)] moving C to index 0 gives [C(0), A(1), B(2)]."""
        sections = [SectionRecord("a", "A", sort_order=0), SectionRecord("b", "B", sort_order=1),
                    SectionRecord("c", "C", sort_order=2)]

        updates = plan_section_move(sections, "c", 0)

        rows = [Row(s.key, s.sort_order) for s in sections]
        apply_updates(rows, updates, pages=False)
        assert [(r.key, r.sort_order) for r in ordered(rows)] == [("c", 0), ("a", 1), ("b", 2)]

    def test_same_position_yields_empty_batch(self):
        sections = [SectionRecord("a", "A", sort_order=0), SectionRecord("b", "B", sort_order=1)]

        assert plan_section_move(sections, "b", 1) == []

    def test_target_index_is_clamped(self):
        sections = [SectionRecord("a", "A", sort_order=0), SectionRecord("b", "B", sort_order=1)]

        updates = plan_section_move(sections, "a", 99)

        assert updates == [OrderUpdate("b", 0), OrderUpdate("a", 1)]

    def test_negative_index_moves_to_front(self):
        sections = [SectionRecord("a", "A", sort_order=0), SectionRecord("b", "B", sort_order=1)]

        updates = plan_section_move(sections, "b", -3)

        assert updates == [OrderUpdate("b", 0), OrderUpdate("a", 1)]

    def test_base_offset_is_preserved(self):
        """Renumbering starts at the smallest existing sort_order."""
        sections = [SectionRecord("a", "A", sort_order=10), SectionRecord("b", "B", sort_order=25),
                    SectionRecord("c", "C", sort_order=40)]

        updates = plan_section_move(sections, "a", 2)

        assert {u.key: u.sort_order for u in updates} == {"b": 10, "c": 11, "a": 12}

    def test_only_changed_records_are_emitted(self):
        sections = [SectionRecord("a", "A", sort_order=0), SectionRecord("b", "B", sort_order=1),
                    SectionRecord("c", "C", sort_order=2), SectionRecord("d", "D", sort_order=3)]

        updates = plan_section_move(sections, "c", 1)

        assert updates == [OrderUpdate("c", 1), OrderUpdate("b", 2)]

    def test_missing_section_raises_not_found(self):
        sections = [SectionRecord("a", "A", sort_order=0)]

        with pytest.raises(NotFoundError) as exc_info:
            plan_section_move(sections, "gone", 0)

        assert exc_info.value.key == "gone"


class TestPageMoves:
    def test_cross_section_move_to_front(self):
        """A=[P1(0), P2(1)], B=[P3(0)]; moving P2 into B at 0 gives A=[P1(0)], B=[P2(0), P3(1)]."""
        rows = [Row("p1", 0, "a"), Row("p2", 1, "a"), Row("p3", 0, "b")]

        updates = plan_page_move(rows, MoveIntent("p2", Named("a"), Named("b"), 0))
        apply_updates(rows, updates)

        assert _container(rows, "a") == [("p1", 0)]
        assert _container(rows, "b") == [("p2", 0), ("p3", 1)]

    def test_cross_section_move_changes_exactly_one_section_key(self):
        rows = [Row("p1", 0, "a"), Row("p2", 1, "a"), Row("p3", 2, "a"), Row("p4", 0, "b"), Row("p5", 1, "b")]
        before = {r.key: r.section_key for r in rows}

        updates = plan_page_move(rows, MoveIntent("p1", Named("a"), Named("b"), 1))
        apply_updates(rows, updates)

        changed = [r.key for r in rows if r.section_key != before[r.key]]
        assert changed == ["p1"]
        assert _container(rows, "a") == [("p2", 0), ("p3", 1)]
        assert _container(rows, "b") == [("p4", 0), ("p1", 1), ("p5", 2)]

    def test_move_within_section(self):
        rows = [Row("p1", 0, "a"), Row("p2", 1, "a"), Row("p3", 2, "a")]

        updates = plan_page_move(rows, MoveIntent("p3", Named("a"), Named("a"), 0))
        apply_updates(rows, updates)

        assert _container(rows, "a") == [("p3", 0), ("p1", 1), ("p2", 2)]
        assert all(u.section_key == "a" for u in updates)

    def test_drop_in_place_yields_empty_batch(self):
        pages = [_page("p1", "a", 0), _page("p2", "a", 1)]

        assert plan_page_move(pages, MoveIntent("p2", Named("a"), Named("a"), 1)) == []

    def test_move_into_empty_section_starts_at_zero(self):
        rows = [Row("p1", 5, "a"), Row("p2", 6, "a")]

        updates = plan_page_move(rows, MoveIntent("p2", Named("a"), Named("b"), 3))

        assert OrderUpdate("p2", 0, "b") in updates

    def test_emptying_a_section_leaves_it_valid(self):
        rows = [Row("p1", 0, "a"), Row("p2", 0, "b")]

        updates = plan_page_move(rows, MoveIntent("p1", Named("a"), Named("b"), 0))
        apply_updates(rows, updates)

        assert _container(rows, "a") == []
        assert _container(rows, "b") == [("p1", 0), ("p2", 1)]

    def test_move_to_and_from_ungrouped(self):
        rows = [Row("p1", 0, "a"), Row("loose", 0, None)]

        updates = plan_page_move(rows, MoveIntent("p1", Named("a"), UNGROUPED, 1))
        apply_updates(rows, updates)
        assert _container(rows, None) == [("loose", 0), ("p1", 1)]

        updates = plan_page_move(rows, MoveIntent("loose", UNGROUPED, Named("a"), 0))
        apply_updates(rows, updates)
        assert _container(rows, "a") == [("loose", 0)]
        assert _container(rows, None) == [("p1", 0)]

    def test_moved_key_not_in_source_raises_not_found(self):
        pages = [_page("p1", "a", 0), _page("p2", "b", 0)]

        with pytest.raises(NotFoundError):
            plan_page_move(pages, MoveIntent("p2", Named("a"), Named("b"), 0))

    def test_repeated_moves_keep_orders_strictly_increasing(self):
        rows = [Row(f"p{i}", i, "a") for i in range(4)] + [Row(f"q{i}", i * 10, "b") for i in range(3)]
        moves = [
            ("p0", "a", "a", 3), ("q2", "b", "a", 0), ("p2", "a", "b", 1),
            ("q0", "b", "b", 5), ("p3", "a", "b", 0), ("q2", "a", "a", 2),
            ("p1", "a", "b", 2), ("q1", "b", "a", 0),
        ]
        visual = {
            "a": [r.key for r in ordered(r for r in rows if r.section_key == "a")],
            "b": [r.key for r in ordered(r for r in rows if r.section_key == "b")],
        }

        for key, source, target, index in moves:
            updates = plan_page_move(rows, MoveIntent(key, Named(source), Named(target), index))
            apply_updates(rows, updates)

            visual[source].remove(key)
            visual[target].insert(clamp_index(index, len(visual[target])), key)

            for container, expected in visual.items():
                current = _container(rows, container)
                orders = [order for _, order in current]
                assert orders == sorted(set(orders))
                assert [k for k, _ in current] == expected


class TestHelpers:
    def test_next_sort_order_empty(self):
        assert next_sort_order([]) == 0

    def test_next_sort_order_appends_after_tail(self):
        assert next_sort_order([Row("a", 3), Row("b", 7)]) == 8

    def test_ordered_breaks_ties_by_key(self):
        rows = [Row("b", 1), Row("a", 1), Row("c", 0)]
        assert [r.key for r in ordered(rows)] == ["c", "a", "b"]
