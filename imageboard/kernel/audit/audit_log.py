"""
Audit log: one human-readable line per completed job.

Entries are rendered from a template with named placeholders
(``"{user} merged {source} with {target}"``) and structured field values.
During a job run they are buffered; the dispatcher flushes the buffer to
the log file only after the job's transaction has committed, so failed or
rolled-back jobs never leave a line behind.
"""

import asyncio
import re
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from imageboard.kernel.models.audit_log import AuditLogEntry
from imageboard.kernel.models.user import User

_PLACEHOLDER = re.compile(r"\{(\w+)\}")


def repr_user(user: Optional[User]) -> str:
    if user is None:
        return "anonymous"
    return "+" + user.name


def repr_tag(name: str) -> str:
    return "#" + name


def repr_post(post_id: int) -> str:
    return "@" + str(post_id)


@dataclass(frozen=True)
class AuditEntry:
    """What a job reports about itself once it succeeded."""

    template: str
    fields: Dict[str, str] = field(default_factory=dict)

    def render(self) -> str:
        # Unknown placeholders are left as-is
        return _PLACEHOLDER.sub(
            lambda m: str(self.fields.get(m.group(1), m.group(0))),
            self.template,
        )


class AuditLog:
    """
    Buffered audit sink for a single dispatcher invocation.

    Usage:
        audit = AuditLog(settings.audit_log_path)
        await audit.append(session, "merge-tags", actor, entry)  # inside the transaction
        ...commit...
        await audit.flush()
    """

    def __init__(self, path: str):
        self.path = Path(path)
        self._buffer: List[str] = []

    @property
    def pending(self) -> int:
        return len(self._buffer)

    async def append(
        self,
        session: AsyncSession,
        job_type: str,
        actor: str,
        entry: AuditEntry,
    ) -> AuditLogEntry:
        """Render the entry, add its row to the session and buffer its line."""
        message = entry.render()
        record = AuditLogEntry(
            job_type=job_type,
            actor=actor,
            message=message,
            fields=dict(entry.fields),
        )
        session.add(record)

        timestamp = datetime.now(timezone.utc).isoformat(timespec="seconds")
        self._buffer.append(f"{timestamp} {message}")
        return record

    def _write(self, lines: List[str]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with self.path.open("a", encoding="utf-8") as fh:
            fh.write("".join(line + "\n" for line in lines))

    async def flush(self) -> None:
        """Append buffered lines to the log file off the event loop."""
        if not self._buffer:
            return
        lines, self._buffer = self._buffer, []
        await asyncio.to_thread(self._write, lines)


def read_audit_lines(path: str) -> List[str]:
    """Lines currently in the audit log file (empty if it does not exist)."""
    log_path = Path(path)
    if not log_path.exists():
        return []
    return log_path.read_text(encoding="utf-8").splitlines()
