"""
Job contract.

A job declares what it needs (arguments, privileges, authentication,
confirmed e-mail), performs one state change in ``execute`` and describes
the outcome for the audit log. Jobs hold no state of their own; everything
a run needs arrives in the JobContext.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, ClassVar, List, Optional, Type

from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from imageboard.config import Settings
from imageboard.jobs.arguments import ArgumentSet, Requirement
from imageboard.kernel.audit import AuditEntry
from imageboard.kernel.identity.context import AuthContext
from imageboard.kernel.mail import MailOutbox
from imageboard.kernel.permissions import AccessResolver, PrivilegeRequirement
from imageboard.search.reverse_search import SimilarityLookup


@dataclass(frozen=True)
class JobContext:
    """Everything one job run may touch. Lives for a single dispatcher call."""

    arguments: ArgumentSet
    auth: AuthContext
    settings: Settings
    session: AsyncSession
    outbox: MailOutbox
    reverse_search: Optional[SimilarityLookup] = None

    @property
    def access(self) -> AccessResolver:
        return AccessResolver(self.settings)


class Job(ABC):
    """Interface every job implements."""

    # Identifier used by Api.invoke and the HTTP layer
    job_type: ClassVar[str]
    # Schema the result is serialized through
    response_model: ClassVar[Type[BaseModel]]
    success_status: ClassVar[int] = 200

    @abstractmethod
    def required_arguments(self) -> Requirement:
        ...

    @abstractmethod
    def required_main_privilege(self) -> Optional[PrivilegeRequirement]:
        ...

    @abstractmethod
    def required_sub_privileges(self, arguments: ArgumentSet) -> List[PrivilegeRequirement]:
        """Resource-specific privileges; empty when the job has none."""

    @abstractmethod
    def authentication_required(self) -> bool:
        ...

    @abstractmethod
    def confirmed_email_required(self) -> bool:
        ...

    @abstractmethod
    async def execute(self, context: JobContext) -> Any:
        """Perform the state change. Runs inside the dispatcher's transaction."""

    @abstractmethod
    def audit_entry(self, context: JobContext, result: Any) -> AuditEntry:
        """The single audit line written when the run succeeds."""

    def serialize(self, result: Any) -> Any:
        return self.response_model.model_validate(result).model_dump(mode="json")
