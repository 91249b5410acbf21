"""Integration tests for the job dispatcher."""

from typing import List, Optional

import pytest
from pydantic import BaseModel
from sqlalchemy import select

from imageboard.jobs import Api, ArgumentSet, Conjunction, Job, JobArgs
from imageboard.kernel.audit import AuditEntry, read_audit_lines
from imageboard.kernel.errors import (
    AuthenticationError,
    InsufficientPrivilegeError,
    PolicyError,
    ServiceUnavailableError,
    UnconfirmedEmailError,
    ValidationError,
)
from imageboard.kernel.identity import AuthContext
from imageboard.kernel.mail import MailMessage, Mailer
from imageboard.kernel.models import AuditLogEntry, Tag, User
from imageboard.kernel.permissions import Privilege, PrivilegeRequirement


class BrokenMailer(Mailer):
    async def send(self, message):
        raise ConnectionError("relay down")


class Created(BaseModel):
    name: str


class CreateTagJob(Job):
    """Adds a tag and queues a mail; optionally fails afterwards."""

    job_type = "create-tag"
    response_model = Created

    def __init__(self, fail: bool = False, needs_login: bool = False, needs_email: bool = False,
                 privilege: Optional[PrivilegeRequirement] = None):
        self.fail = fail
        self.needs_login = needs_login
        self.needs_email = needs_email
        self.privilege = privilege
        self.executed = False

    def required_arguments(self):
        return Conjunction(JobArgs.SOURCE_TAG_NAME)

    def required_main_privilege(self):
        return self.privilege

    def required_sub_privileges(self, arguments) -> List[PrivilegeRequirement]:
        return []

    def authentication_required(self) -> bool:
        return self.needs_login

    def confirmed_email_required(self) -> bool:
        return self.needs_email

    async def execute(self, context):
        self.executed = True
        name = context.arguments.get_str(JobArgs.SOURCE_TAG_NAME)
        tag = Tag(name=name)
        context.session.add(tag)
        await context.session.flush()
        context.outbox.queue(MailMessage(to="mod@example.com", subject="new tag", body=name))
        if self.fail:
            raise PolicyError("changed my mind")
        return tag

    def audit_entry(self, context, result):
        return AuditEntry("{user} created {tag}", {"user": "x", "tag": result.name})


def tag_args(name: str = "cat") -> ArgumentSet:
    return ArgumentSet({JobArgs.SOURCE_TAG_NAME: name})


class TestOrdering:
    """Checks run in a fixed order and stop at the first failure."""

    @pytest.mark.asyncio
    async def test_validation_before_authentication(self, api):
        job = CreateTagJob(needs_login=True)

        with pytest.raises(ValidationError):
            await api.run(job, ArgumentSet(), AuthContext.anonymous())
        assert not job.executed

    @pytest.mark.asyncio
    async def test_authentication_required(self, api):
        job = CreateTagJob(needs_login=True)

        with pytest.raises(AuthenticationError):
            await api.run(job, tag_args(), AuthContext.anonymous())
        assert not job.executed

    @pytest.mark.asyncio
    async def test_confirmed_email_required(self, api, register):
        user = await register(api, "alice")
        job = CreateTagJob(needs_login=True, needs_email=True)

        with pytest.raises(UnconfirmedEmailError):
            await api.run(job, tag_args(), AuthContext.for_user(user))
        assert not job.executed

    @pytest.mark.asyncio
    async def test_confirmed_email_passes(self, api, admin):
        job = CreateTagJob(needs_login=True, needs_email=True)

        result = await api.run(job, tag_args(), admin)

        assert result.name == "cat"

    @pytest.mark.asyncio
    async def test_email_check_before_privileges(self, api, register):
        user = await register(api, "alice")
        job = CreateTagJob(needs_email=True, privilege=PrivilegeRequirement(Privilege.MERGE_TAGS))

        with pytest.raises(UnconfirmedEmailError):
            await api.run(job, tag_args(), AuthContext.for_user(user))

    @pytest.mark.asyncio
    async def test_privilege_denied_has_no_side_effects(self, api, session_factory, mailer, settings):
        job = CreateTagJob(privilege=PrivilegeRequirement(Privilege.MERGE_TAGS))

        with pytest.raises(InsufficientPrivilegeError):
            await api.run(job, tag_args(), AuthContext.anonymous())

        assert not job.executed
        assert mailer.mail_counter == 0
        assert read_audit_lines(settings.audit_log_path) == []


class TestTransaction:
    """Atomicity of execute, mail and audit."""

    @pytest.mark.asyncio
    async def test_success_commits_and_releases_side_effects(self, api, session_factory, mailer, settings):
        await api.run(CreateTagJob(), tag_args("cat"), AuthContext.anonymous())

        async with session_factory() as session:
            assert (await session.execute(select(Tag.name))).scalars().all() == ["cat"]
            audit_rows = (await session.execute(select(AuditLogEntry))).scalars().all()
        assert [row.message for row in audit_rows] == ["x created cat"]
        assert mailer.mail_counter == 1
        assert len(read_audit_lines(settings.audit_log_path)) == 1

    @pytest.mark.asyncio
    async def test_failure_rolls_back_everything(self, api, session_factory, mailer, settings):
        with pytest.raises(PolicyError):
            await api.run(CreateTagJob(fail=True), tag_args("cat"), AuthContext.anonymous())

        async with session_factory() as session:
            assert (await session.execute(select(Tag))).scalars().all() == []
            assert (await session.execute(select(AuditLogEntry))).scalars().all() == []
        assert mailer.mail_counter == 0
        assert read_audit_lines(settings.audit_log_path) == []

    @pytest.mark.asyncio
    async def test_n_successes_n_audit_lines(self, api, session_factory, settings):
        for n in range(5):
            await api.run(CreateTagJob(), tag_args(f"tag{n}"), AuthContext.anonymous())
        with pytest.raises(PolicyError):
            await api.run(CreateTagJob(fail=True), tag_args("broken"), AuthContext.anonymous())

        assert len(read_audit_lines(settings.audit_log_path)) == 5

    @pytest.mark.asyncio
    async def test_mail_failure_rolls_back(self, session_factory, settings):
        api = Api(session_factory=session_factory, settings=settings, mailer=BrokenMailer())

        with pytest.raises(ServiceUnavailableError):
            await api.run(CreateTagJob(), tag_args("cat"), AuthContext.anonymous())

        async with session_factory() as session:
            assert (await session.execute(select(Tag))).scalars().all() == []
            assert (await session.execute(select(AuditLogEntry))).scalars().all() == []
        assert read_audit_lines(settings.audit_log_path) == []

    @pytest.mark.asyncio
    async def test_mail_failure_during_registration(self, make_settings, session_factory, register):
        settings = make_settings(
            registration={"need_email_for_registering": True},
            privileges={"editUserEmailNoConfirm": "admin"},
        )
        api = Api(session_factory=session_factory, settings=settings, mailer=BrokenMailer())

        await register(api, "first", email="first@example.com")
        with pytest.raises(ServiceUnavailableError):
            await register(api, "second", email="second@example.com")

        async with session_factory() as session:
            names = (await session.execute(select(User.name))).scalars().all()
            audit_rows = (await session.execute(select(AuditLogEntry))).scalars().all()
        assert names == ["first"]
        assert len(audit_rows) == 1
        assert len(read_audit_lines(settings.audit_log_path)) == 1


class TestInvoke:
    """Api.invoke reports outcomes as values."""

    @pytest.mark.asyncio
    async def test_unknown_job_type(self, api):
        outcome = await api.invoke("frobnicate", {}, AuthContext.anonymous())

        assert outcome.status_code == 404
        assert outcome.error["kind"] == "NotFoundError"
        assert not outcome.ok

    @pytest.mark.asyncio
    async def test_success(self, api):
        outcome = await api.invoke(
            "register-user",
            {JobArgs.NEW_USER_NAME: "alice", JobArgs.NEW_PASSWORD: "secret-password"},
            AuthContext.anonymous(),
        )

        assert outcome.ok
        assert outcome.status_code == 201
        assert outcome.result["name"] == "alice"
        assert outcome.result["access_rank"] == "admin"
        assert "password_hash" not in outcome.result

    @pytest.mark.asyncio
    async def test_error_kinds_map_to_status(self, api):
        anonymous = AuthContext.anonymous()

        missing = await api.invoke("register-user", {}, anonymous)
        assert missing.status_code == 400
        assert missing.error["missing"] == [JobArgs.NEW_USER_NAME, JobArgs.NEW_PASSWORD]

        short = await api.invoke(
            "register-user", {JobArgs.NEW_USER_NAME: "alice", JobArgs.NEW_PASSWORD: "abc"}, anonymous
        )
        assert (short.status_code, short.error["kind"]) == (400, "PolicyError")

        denied = await api.invoke(
            "merge-tags", {JobArgs.SOURCE_TAG_NAME: "a", JobArgs.TARGET_TAG_NAME: "b"}, anonymous
        )
        assert (denied.status_code, denied.error["kind"]) == (403, "InsufficientPrivilegeError")

        await api.invoke(
            "register-user", {JobArgs.NEW_USER_NAME: "alice", JobArgs.NEW_PASSWORD: "secret-password"}, anonymous
        )
        duplicate = await api.invoke(
            "register-user", {JobArgs.NEW_USER_NAME: "ALICE", JobArgs.NEW_PASSWORD: "secret-password"}, anonymous
        )
        assert (duplicate.status_code, duplicate.error["kind"]) == (409, "DuplicateNameError")
