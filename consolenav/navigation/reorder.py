"""Turn a drag-and-drop result into a consistent batch of ordering updates.

Everything here is pure: functions take the current records (ORM rows or
snapshots, anything exposing ``key``/``sort_order`` and, for pages,
``section_key``) and return the ``OrderUpdate`` batch that the store applies
atomically. Records whose ordering does not change are left out of the batch,
so a drop onto the same position yields an empty batch.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from typing import Protocol

from consolenav.lib.exceptions import NotFoundError
from consolenav.navigation.refs import SectionRef, section_ref


class Orderable(Protocol):
    key: str
    sort_order: int


class PageOrderable(Orderable, Protocol):
    section_key: str | None


@dataclass(frozen=True)
class MoveIntent:
    """The final result of one drop: move ``moved_key`` to ``target_index`` of ``target``.

    ``target_index`` counts positions among the target's items once the moved
    item has been taken out of its source.
    """

    moved_key: str
    source: SectionRef
    target: SectionRef
    target_index: int


@dataclass(frozen=True)
class OrderUpdate:
    key: str
    sort_order: int
    section_key: str | None = None


def ordered(items: Iterable[Orderable]) -> list:
    """Display order: ascending ``sort_order``, ties broken by key."""
    return sorted(items, key=lambda item: (item.sort_order, item.key))


def clamp_index(index: int, length: int) -> int:
    return max(0, min(index, length))


def _base_offset(items: Sequence[Orderable]) -> int:
    return min((item.sort_order for item in items), default=0)


def _renumber(
    items: Sequence[Orderable],
    base: int,
    section_key: str | None,
    originals: dict[str, tuple[int, str | None]],
) -> list[OrderUpdate]:
    updates = []
    for position, item in enumerate(items):
        new_order = base + position
        if originals[item.key] != (new_order, section_key):
            updates.append(OrderUpdate(key=item.key, sort_order=new_order, section_key=section_key))
    return updates


def plan_section_move(sections: Iterable[Orderable], moved_key: str, target_index: int) -> list[OrderUpdate]:
    """Plan moving one section of the flat section list to ``target_index``."""
    current = ordered(sections)
    moved = next((s for s in current if s.key == moved_key), None)
    if moved is None:
        raise NotFoundError(f"Section '{moved_key}' no longer exists", key=moved_key)

    base = _base_offset(current)
    remaining = [s for s in current if s.key != moved_key]
    remaining.insert(clamp_index(target_index, len(remaining)), moved)

    originals = {s.key: (s.sort_order, None) for s in current}
    return _renumber(remaining, base, None, originals)


def plan_page_move(pages: Iterable[PageOrderable], intent: MoveIntent) -> list[OrderUpdate]:
    """Plan moving one page entry within its section or into another one.

    Raises:
        NotFoundError: If the moved key is not in the source section, e.g.
            because another session deleted or moved it.
    """
    pages = list(pages)
    source_items = ordered(p for p in pages if section_ref(p.section_key) == intent.source)
    moved = next((p for p in source_items if p.key == intent.moved_key), None)
    if moved is None:
        raise NotFoundError(
            f"Page '{intent.moved_key}' is not in section '{intent.source}'",
            key=intent.moved_key,
        )

    originals = {p.key: (p.sort_order, p.section_key) for p in pages}
    source_base = _base_offset(source_items)
    source_remaining = [p for p in source_items if p.key != intent.moved_key]

    if intent.target == intent.source:
        source_remaining.insert(clamp_index(intent.target_index, len(source_remaining)), moved)
        return _renumber(source_remaining, source_base, intent.source.column_value, originals)

    target_items = ordered(p for p in pages if section_ref(p.section_key) == intent.target)
    target_base = _base_offset(target_items)
    target_items.insert(clamp_index(intent.target_index, len(target_items)), moved)

    updates = _renumber(source_remaining, source_base, intent.source.column_value, originals)
    updates.extend(_renumber(target_items, target_base, intent.target.column_value, originals))
    return updates


def next_sort_order(items: Iterable[Orderable]) -> int:
    """The ``sort_order`` that appends a new item after the current tail."""
    return max((item.sort_order for item in items), default=-1) + 1


def apply_updates(items: Iterable, updates: Iterable[OrderUpdate], pages: bool = True) -> None:
    """Apply a batch to in-memory rows (used by the store inside its transaction)."""
    by_key = {item.key: item for item in items}
    for update in updates:
        row = by_key[update.key]
        row.sort_order = update.sort_order
        if pages:
            row.section_key = update.section_key
