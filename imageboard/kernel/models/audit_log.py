"""
Append-only audit log table.

One row per successfully completed job, added inside the job's
transaction so it commits or rolls back together with the job's
mutations. No updates or deletes.
"""

import uuid
from datetime import datetime

from sqlalchemy import DateTime, String, Text, func, Index, JSON, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from imageboard.kernel.models.base import Base, generate_uuid


class AuditLogEntry(Base):
    """Immutable audit record."""

    __tablename__ = "audit_log"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(),
        primary_key=True,
        default=generate_uuid,
    )
    job_type: Mapped[str] = mapped_column(
        String(64),
        nullable=False,
        index=True,
    )
    actor: Mapped[str] = mapped_column(
        String(64),
        nullable=False,
    )
    # Rendered template, e.g. "+alice merged #cat with #kitty"
    message: Mapped[str] = mapped_column(
        Text,
        nullable=False,
    )
    # Structured values the template was rendered from
    fields: Mapped[dict] = mapped_column(
        JSON,
        nullable=False,
        default=dict,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
        index=True,
    )

    __table_args__ = (
        Index("ix_audit_log_type_time", "job_type", "created_at"),
    )

    def __repr__(self) -> str:
        return f"<AuditLogEntry {self.job_type} by {self.actor}>"
