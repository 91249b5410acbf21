"""
Stable Kernel Layer

Foundational components every job builds on:
- Data models (users, tags, posts, audit log)
- Identity Core (credentials, caller context)
- Permission Core (rank thresholds, sub-privileges, policy selectors)
- Audit trail and outbound mail

Invariants:
- Every mutation happens inside the dispatcher's transaction
- Audit lines and mail are released only after that transaction commits
"""

from imageboard.kernel.models import AccessRank, User, Tag, TagAlias, Post, AuditLogEntry
from imageboard.kernel.errors import ErrorKind, JobError

__all__ = [
    "AccessRank",
    "User",
    "Tag",
    "TagAlias",
    "Post",
    "AuditLogEntry",
    "ErrorKind",
    "JobError",
]
