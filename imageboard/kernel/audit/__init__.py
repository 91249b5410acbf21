"""
Audit trail of completed jobs.
"""

from imageboard.kernel.audit.audit_log import (
    AuditEntry,
    AuditLog,
    read_audit_lines,
    repr_post,
    repr_tag,
    repr_user,
)

__all__ = [
    "AuditEntry",
    "AuditLog",
    "read_audit_lines",
    "repr_post",
    "repr_tag",
    "repr_user",
]
