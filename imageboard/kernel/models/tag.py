"""
Tag and tag alias models.

Usage count is never stored; it is the number of ``post_tags`` rows
pointing at the tag (see TagService.usage_count).
"""

from sqlalchemy import ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, validates

from imageboard.kernel.models.base import Base, TimestampMixin, fold_name


class Tag(Base, TimestampMixin):
    """Canonical tag."""

    __tablename__ = "tags"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(64), unique=True, nullable=False)
    name_lower: Mapped[str] = mapped_column(String(128), unique=True, nullable=False)
    category: Mapped[str] = mapped_column(String(32), default="default", nullable=False)

    @validates("name")
    def _sync_name_lower(self, key: str, value: str) -> str:
        self.name_lower = fold_name(value)
        return value

    def __repr__(self) -> str:
        return f"<Tag #{self.name}>"


class TagAlias(Base):
    """Alternate name resolving to a canonical tag."""

    __tablename__ = "tag_aliases"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(64), unique=True, nullable=False)
    tag_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("tags.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    def __repr__(self) -> str:
        return f"<TagAlias {self.name} -> {self.tag_id}>"
