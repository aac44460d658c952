from sqlalchemy import Boolean, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from consolenav.db.base import Base


class Section(Base):
    """A named, ordered group of page entries in the sidebar."""

    __tablename__ = "nav_sections"

    # Identity (immutable after creation)
    key: Mapped[str] = mapped_column(String(100), nullable=False, unique=True, index=True)

    display_name: Mapped[str] = mapped_column(String(200), nullable=False)
    icon_name: Mapped[str] = mapped_column(String(100), nullable=False, default="")

    # Ordering among sections (lower first, not necessarily contiguous)
    sort_order: Mapped[int] = mapped_column(Integer, default=0, nullable=False, index=True)

    collapsed_by_default: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
