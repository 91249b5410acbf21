"""
Job dispatcher.

``Api.run`` takes a job from arguments to committed result:

1. required arguments      -> ValidationError (all missing keys at once)
2. authentication          -> AuthenticationError
3. confirmed e-mail        -> UnconfirmedEmailError
4. main + sub privileges   -> InsufficientPrivilegeError
5. execute in one transaction, audit row included, queued mail delivered
   last; any error (a failed mail transport included) rolls back
6. after commit: flush the audit line, return

A job that fails leaves no user-visible trace: no rows, no mail, no audit
line. ``run``
raises the typed JobError subclasses; ``invoke`` resolves a job by type
name and turns the outcome into a JobOutcome value for the HTTP layer.
"""

from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional, Type

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from imageboard.config import Settings
from imageboard.jobs.arguments import ArgumentSet
from imageboard.jobs.base import Job, JobContext
from imageboard.jobs.registry import JOB_REGISTRY
from imageboard.kernel.audit import AuditLog, repr_user
from imageboard.kernel.errors import (
    AuthenticationError,
    JobError,
    NotFoundError,
    UnconfirmedEmailError,
    ValidationError,
)
from imageboard.kernel.identity.context import AuthContext
from imageboard.kernel.mail import Mailer, MailOutbox
from imageboard.kernel.permissions import AccessResolver
from imageboard.logging_config import get_logger, job_type_var
from imageboard.search.reverse_search import SimilarityLookup

logger = get_logger(__name__)


@dataclass(frozen=True)
class JobOutcome:
    """Result of ``Api.invoke``: either a serialized result or an error."""

    status_code: int
    result: Any = None
    error: Optional[Dict[str, Any]] = None

    @property
    def ok(self) -> bool:
        return self.error is None


class Api:
    """Runs jobs. One instance can serve many concurrent requests."""

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        settings: Settings,
        mailer: Mailer,
        reverse_search: Optional[SimilarityLookup] = None,
        registry: Optional[Mapping[str, Type[Job]]] = None,
    ):
        self.session_factory = session_factory
        self.settings = settings
        self.mailer = mailer
        self.reverse_search = reverse_search
        self.registry = registry if registry is not None else JOB_REGISTRY
        self.access = AccessResolver(settings)

    def _validate(self, job: Job, arguments: ArgumentSet) -> None:
        verdict = job.required_arguments().evaluate(arguments)
        if not verdict.satisfied:
            raise ValidationError(missing=verdict.missing)

    def _authorize(self, job: Job, arguments: ArgumentSet, auth: AuthContext) -> None:
        if job.authentication_required() and not auth.is_authenticated:
            raise AuthenticationError()

        if job.confirmed_email_required() and not auth.has_confirmed_email:
            raise UnconfirmedEmailError()

        main = job.required_main_privilege()
        if main is not None:
            self.access.assert_granted(auth, main)
        for sub in job.required_sub_privileges(arguments):
            self.access.assert_granted(auth, sub)

    async def run(self, job: Job, arguments: ArgumentSet, auth: AuthContext) -> Any:
        """Validate, authorize and execute ``job``; raises JobError on failure."""
        token = job_type_var.set(job.job_type)
        try:
            logger.debug("Job started", extra={"actor": repr_user(auth.user)})
            self._validate(job, arguments)
            self._authorize(job, arguments, auth)

            # Mail goes out as the last step before commit, audit lines after it
            outbox = MailOutbox()
            audit = AuditLog(self.settings.audit_log_path)
            async with self.session_factory() as session:
                async with session.begin():
                    context = JobContext(
                        arguments=arguments,
                        auth=auth,
                        settings=self.settings,
                        session=session,
                        outbox=outbox,
                        reverse_search=self.reverse_search,
                    )
                    result = await job.execute(context)
                    await audit.append(
                        session,
                        job.job_type,
                        repr_user(auth.user),
                        job.audit_entry(context, result),
                    )
                    await outbox.deliver(self.mailer)

            await audit.flush()
            logger.info("Job completed", extra={"actor": repr_user(auth.user)})
            return result
        except JobError as exc:
            logger.info(
                "Job rejected: %s",
                exc.message,
                extra={"kind": exc.kind.value, "actor": repr_user(auth.user)},
            )
            raise
        finally:
            job_type_var.reset(token)

    async def invoke(
        self,
        job_type: str,
        arguments: Mapping[str, Any],
        auth: AuthContext,
    ) -> JobOutcome:
        """Run a job by type name and report the outcome as a value."""
        job_class = self.registry.get(job_type)
        if job_class is None:
            error = NotFoundError(f"Unknown job type: {job_type}")
            return JobOutcome(status_code=error.status_code, error=error.to_dict())

        job = job_class()
        try:
            result = await self.run(job, ArgumentSet(arguments), auth)
        except JobError as exc:
            return JobOutcome(status_code=exc.status_code, error=exc.to_dict())
        return JobOutcome(status_code=job.success_status, result=job.serialize(result))
