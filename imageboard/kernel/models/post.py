"""
Post model and the post-tag association table.

Only the attributes tag maintenance and reverse search need are mapped.
"""

from typing import Optional

from sqlalchemy import Column, ForeignKey, Integer, String, Table
from sqlalchemy.orm import Mapped, mapped_column

from imageboard.kernel.models.base import Base, TimestampMixin


# Composite primary key: a post carries a given tag at most once.
post_tags = Table(
    "post_tags",
    Base.metadata,
    Column("post_id", Integer, ForeignKey("posts.id", ondelete="CASCADE"), primary_key=True),
    Column("tag_id", Integer, ForeignKey("tags.id", ondelete="CASCADE"), primary_key=True, index=True),
)


class Post(Base, TimestampMixin):
    """An uploaded post."""

    __tablename__ = "posts"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    content_url: Mapped[Optional[str]] = mapped_column(String(2048), nullable=True)

    def __repr__(self) -> str:
        return f"<Post @{self.id}>"
