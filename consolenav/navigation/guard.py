"""Deletion policy: nothing visible is ever removed by a plain delete.

Hiding and deleting are two separate, explicit steps. The only ways around the
policy are an explicit cascade on a section delete and the baseline reset.
"""

from __future__ import annotations

from collections.abc import Iterable

from consolenav.lib.exceptions import DeletionBlocked, ValidationError
from consolenav.navigation.refs import UNGROUPED_KEY


def ensure_page_deletable(page) -> None:
    """Reject deleting a page entry that is still visible."""
    if page.visible:
        raise DeletionBlocked(
            f"Page '{page.key}' is visible; hide it before deleting it",
            key=page.key,
            blocking_keys=[page.key],
        )


def ensure_section_deletable(section_key: str, pages: Iterable, cascade: bool = False) -> None:
    """Reject deleting a section that still shows pages, unless cascading.

    Args:
        section_key: Key of the section to delete
        pages: Page entries currently in that section
        cascade: Caller explicitly opted into deleting the pages too

    Raises:
        ValidationError: If the key is the reserved ungrouped section.
        DeletionBlocked: If a page is visible and ``cascade`` is False.
    """
    ensure_not_ungrouped(section_key)

    if cascade:
        return

    visible = sorted(p.key for p in pages if p.visible)
    if visible:
        raise DeletionBlocked(
            f"Section '{section_key}' still shows {len(visible)} visible page(s); "
            "hide them first or delete with cascade",
            key=section_key,
            blocking_keys=visible,
        )


def ensure_not_ungrouped(section_key: str) -> None:
    """The implicit ungrouped section always exists."""
    if section_key == UNGROUPED_KEY:
        raise ValidationError("The ungrouped section cannot be deleted", field="key")
