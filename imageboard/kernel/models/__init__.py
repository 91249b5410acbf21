"""
Kernel Data Models

SQLAlchemy models for users, tags, posts and the audit log.
"""

from imageboard.kernel.models.base import Base, TimestampMixin, fold_name, generate_uuid
from imageboard.kernel.models.user import User, AccessRank, ACCESS_RANK_HIERARCHY
from imageboard.kernel.models.post import Post, post_tags
from imageboard.kernel.models.tag import Tag, TagAlias
from imageboard.kernel.models.audit_log import AuditLogEntry

__all__ = [
    # Base
    "Base",
    "TimestampMixin",
    "generate_uuid",
    "fold_name",
    # User
    "User",
    "AccessRank",
    "ACCESS_RANK_HIERARCHY",
    # Posts & tags
    "Post",
    "post_tags",
    "Tag",
    "TagAlias",
    # Audit
    "AuditLogEntry",
]
