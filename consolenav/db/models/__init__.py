from consolenav.db.models.page_entry import PageEntry
from consolenav.db.models.section import Section

__all__ = ["PageEntry", "Section"]
