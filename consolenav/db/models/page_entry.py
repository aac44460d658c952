from sqlalchemy import Boolean, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from consolenav.db.base import Base


class PageEntry(Base):
    """A single navigable item of the sidebar."""

    __tablename__ = "nav_page_entries"

    # Identity (immutable after creation)
    key: Mapped[str] = mapped_column(String(100), nullable=False, unique=True, index=True)

    title: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    icon_name: Mapped[str] = mapped_column(String(100), nullable=False, default="")
    route: Mapped[str] = mapped_column(String(500), nullable=False, unique=True)

    # Opaque capability id evaluated by the auth collaborator
    permission: Mapped[str] = mapped_column(String(100), nullable=False, default="")

    # NULL means the implicit "ungrouped" section
    section_key: Mapped[str | None] = mapped_column(
        ForeignKey("nav_sections.key"), nullable=True, index=True
    )

    # Ordering within the section
    sort_order: Mapped[int] = mapped_column(Integer, default=0, nullable=False, index=True)

    visible: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    # Passed through to the renderer untouched
    primary_action_label: Mapped[str | None] = mapped_column(String(200), nullable=True)
    ai_action_label: Mapped[str | None] = mapped_column(String(200), nullable=True)
