"""
Privilege table and access resolution.

Each privilege name maps, through ``Settings.privileges``, to the minimum
AccessRank allowed to use it. Sub-privileges narrow a privilege to a
resource context and are configured as ``<privilege>:<context>``; when no
such entry exists the plain privilege applies. Unconfigured privileges
resolve to NOBODY.

Some entries are policy selectors rather than thresholds (e.g.
``editUserEmailNoConfirm``): ``nobody`` and ``anonymous`` select a rule
class instead of naming a rank. They are parsed into PolicySelector
values once and evaluated by ``policy_allows``.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Union

from imageboard.config import Settings
from imageboard.kernel.errors import InsufficientPrivilegeError
from imageboard.kernel.identity.context import AuthContext
from imageboard.kernel.models.user import AccessRank
from imageboard.logging_config import get_logger

logger = get_logger(__name__)


class Privilege(str, Enum):
    """Privilege names as they appear in configuration."""
    REGISTER_ACCOUNT = "registerAccount"
    CHANGE_ACCESS_RANK = "changeAccessRank"
    EDIT_USER_EMAIL_NO_CONFIRM = "editUserEmailNoConfirm"
    MERGE_TAGS = "mergeTags"
    REVERSE_SEARCH_POSTS = "reverseSearchPosts"


@dataclass(frozen=True)
class PrivilegeRequirement:
    privilege: Privilege
    context: Optional[str] = None

    @property
    def key(self) -> str:
        if self.context is None:
            return self.privilege.value
        return f"{self.privilege.value}:{self.context}"


@dataclass(frozen=True)
class ExactRank:
    """Users at or above ``rank`` pass."""
    rank: AccessRank


@dataclass(frozen=True)
class Nobody:
    """No one passes."""


@dataclass(frozen=True)
class Anonymous:
    """Everyone passes, including anonymous callers."""


PolicySelector = Union[ExactRank, Nobody, Anonymous]


def parse_policy(value: Optional[str]) -> PolicySelector:
    """Turn a configured value into a selector. Unknown values fail closed."""
    if value is None:
        return Nobody()
    normalized = value.strip().lower()
    if normalized == AccessRank.NOBODY.value:
        return Nobody()
    if normalized == AccessRank.ANONYMOUS.value:
        return Anonymous()
    try:
        return ExactRank(AccessRank.parse(normalized))
    except ValueError:
        logger.warning("Unknown privilege value %r, treating as 'nobody'", value)
        return Nobody()


def policy_allows(selector: PolicySelector, rank: AccessRank) -> bool:
    if isinstance(selector, Anonymous):
        return True
    if isinstance(selector, ExactRank):
        return rank >= selector.rank and rank != AccessRank.NOBODY
    return False


def threshold_of(selector: PolicySelector) -> AccessRank:
    if isinstance(selector, Anonymous):
        return AccessRank.ANONYMOUS
    if isinstance(selector, ExactRank):
        return selector.rank
    return AccessRank.NOBODY


class AccessResolver:
    """Resolves privilege requirements against the configured table."""

    def __init__(self, settings: Settings):
        # Keys are stored lower-cased by Settings
        self.table = settings.privileges

    def _configured_value(self, requirement: PrivilegeRequirement) -> Optional[str]:
        if requirement.context is not None:
            value = self.table.get(requirement.key.lower())
            if value is not None:
                return value
        return self.table.get(requirement.privilege.value.lower())

    def resolve_policy(self, requirement: PrivilegeRequirement) -> PolicySelector:
        return parse_policy(self._configured_value(requirement))

    def resolve_threshold(self, requirement: PrivilegeRequirement) -> AccessRank:
        """Minimum rank for the requirement; NOBODY when unconfigured."""
        return threshold_of(self.resolve_policy(requirement))

    def is_granted(self, rank: AccessRank, requirement: PrivilegeRequirement) -> bool:
        return policy_allows(self.resolve_policy(requirement), rank)

    def assert_granted(self, auth: AuthContext, requirement: PrivilegeRequirement) -> None:
        if not self.is_granted(auth.access_rank, requirement):
            logger.info(
                "Privilege denied",
                extra={
                    "privilege": requirement.key,
                    "rank": auth.access_rank.value,
                    "threshold": self.resolve_threshold(requirement).value,
                },
            )
            raise InsufficientPrivilegeError(f"Insufficient privileges ({requirement.key})")
