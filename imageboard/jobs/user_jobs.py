"""
Account jobs.
"""

import re
import secrets
from typing import List, Optional

from pydantic import EmailStr, TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from imageboard.config import RegistrationSettings, Settings
from imageboard.jobs.arguments import ArgumentSet, Conjunction, JobArgs, Requirement
from imageboard.jobs.base import Job, JobContext
from imageboard.kernel.audit import AuditEntry, repr_user
from imageboard.kernel.errors import (
    DuplicateEmailError,
    DuplicateNameError,
    PolicyError,
    ValidationError,
)
from imageboard.kernel.identity import IdentityService
from imageboard.kernel.mail import MailMessage
from imageboard.kernel.models.user import AccessRank, User
from imageboard.kernel.permissions import Privilege, PrivilegeRequirement
from imageboard.logging_config import get_logger
from imageboard.schemas.users import UserResponse

logger = get_logger(__name__)

_EMAIL = TypeAdapter(EmailStr)

# Ranks an account can be created with
ASSIGNABLE_RANKS = (
    AccessRank.REGISTERED,
    AccessRank.POWER_USER,
    AccessRank.MODERATOR,
    AccessRank.ADMIN,
)


def requested_rank(arguments: ArgumentSet) -> Optional[AccessRank]:
    """The explicitly requested rank, if any."""
    value = arguments.get_str(JobArgs.NEW_ACCESS_RANK)
    if value is None:
        return None
    try:
        rank = AccessRank.parse(value)
    except ValueError:
        raise ValidationError(f"Invalid access rank: {value}")
    if rank not in ASSIGNABLE_RANKS:
        raise ValidationError(f"Access rank cannot be assigned: {value}")
    return rank


def normalize_email(value: Optional[str]) -> Optional[str]:
    if value is None or not value.strip():
        return None
    try:
        return _EMAIL.validate_python(value.strip())
    except PydanticValidationError:
        raise ValidationError(f"Invalid e-mail address: {value}")


def check_user_name(name: str, rules: RegistrationSettings) -> None:
    if len(name) < rules.name_min_length:
        raise PolicyError(f"User name must have at least {rules.name_min_length} characters")
    if len(name) > rules.name_max_length:
        raise PolicyError(f"User name must have at most {rules.name_max_length} characters")
    if not re.match(rules.name_regex, name):
        raise PolicyError("User name contains invalid characters")


def confirmation_mail(user: User, settings: Settings) -> MailMessage:
    link = f"{settings.confirmation_url}?token={user.email_token}"
    return MailMessage(
        to=user.email_unconfirmed,
        subject=f"{settings.project_name} - e-mail confirmation",
        body=(
            f"Hello {user.name},\n\n"
            f"please confirm your e-mail address by visiting:\n{link}\n\n"
            "If you did not register, ignore this message.\n"
        ),
    )


class RegisterUserJob(Job):
    """
    Create an account.

    The first account in the system is always an admin. Later accounts are
    registered users unless a higher rank is requested, which the caller
    needs ``changeAccessRank:<rank>`` for.

    With ``registration.need_email_for_registering`` on, the new user's
    rank is checked against the ``editUserEmailNoConfirm`` policy: passing
    stores the address as confirmed, otherwise it stays unconfirmed and one
    confirmation mail is queued.
    """

    job_type = "register-user"
    response_model = UserResponse
    success_status = 201

    def required_arguments(self) -> Requirement:
        return Conjunction(JobArgs.NEW_USER_NAME, JobArgs.NEW_PASSWORD)

    def required_main_privilege(self) -> Optional[PrivilegeRequirement]:
        return PrivilegeRequirement(Privilege.REGISTER_ACCOUNT)

    def required_sub_privileges(self, arguments: ArgumentSet) -> List[PrivilegeRequirement]:
        rank = requested_rank(arguments)
        if rank is None or rank <= AccessRank.REGISTERED:
            return []
        return [PrivilegeRequirement(Privilege.CHANGE_ACCESS_RANK, rank.value)]

    def authentication_required(self) -> bool:
        return False

    def confirmed_email_required(self) -> bool:
        return False

    async def execute(self, context: JobContext) -> User:
        arguments = context.arguments
        rules = context.settings.registration
        identity = IdentityService(context.session, context.settings)

        name = arguments.get_str(JobArgs.NEW_USER_NAME).strip()
        check_user_name(name, rules)

        password = arguments.get_str(JobArgs.NEW_PASSWORD)
        if len(password) < rules.pass_min_length:
            raise PolicyError(f"Password must have at least {rules.pass_min_length} characters")

        # Held until commit: the user count below must not change under us
        await identity.lock_registrations()

        if await identity.get_user_by_name(name) is not None:
            raise DuplicateNameError("User with this name is already registered")

        email = normalize_email(arguments.get_str(JobArgs.NEW_EMAIL))
        if email is not None and await identity.get_user_by_confirmed_email(email) is not None:
            raise DuplicateEmailError("User with this e-mail is already registered")

        if await identity.count_users() == 0:
            rank = AccessRank.ADMIN
        else:
            rank = requested_rank(arguments) or AccessRank.REGISTERED

        email_confirmed = email_unconfirmed = email_token = None
        if email is not None:
            skips_confirmation = context.access.is_granted(
                rank, PrivilegeRequirement(Privilege.EDIT_USER_EMAIL_NO_CONFIRM)
            )
            if not rules.need_email_for_registering or skips_confirmation:
                email_confirmed = email
            else:
                email_unconfirmed = email
                email_token = secrets.token_urlsafe(32)

        user = await identity.create_user(
            name=name,
            password=password,
            access_rank=rank,
            email_confirmed=email_confirmed,
            email_unconfirmed=email_unconfirmed,
            email_token=email_token,
        )

        if email_unconfirmed is not None:
            context.outbox.queue(confirmation_mail(user, context.settings))

        logger.info("User registered", extra={"user_name": user.name, "rank": rank.value})
        return user

    def audit_entry(self, context: JobContext, result: User) -> AuditEntry:
        return AuditEntry(
            "{user} registered {subject}",
            {"user": repr_user(context.auth.user), "subject": repr_user(result)},
        )
