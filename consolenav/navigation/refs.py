"""References to the section a page entry belongs to.

A page either lives in a named section or in the implicit "ungrouped" one,
which always exists, cannot be deleted and is stored as NULL.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Union

UNGROUPED_KEY = "ungrouped"


@dataclass(frozen=True)
class Named:
    key: str

    @property
    def column_value(self) -> str | None:
        return self.key

    def __str__(self) -> str:
        return self.key


@dataclass(frozen=True)
class Ungrouped:
    @property
    def column_value(self) -> str | None:
        return None

    def __str__(self) -> str:
        return UNGROUPED_KEY


UNGROUPED = Ungrouped()

SectionRef = Union[Named, Ungrouped]


def section_ref(value: str | None) -> SectionRef:
    """Build a ref from a stored ``section_key`` or its API spelling."""
    if value is None or value == UNGROUPED_KEY:
        return UNGROUPED
    return Named(value)
