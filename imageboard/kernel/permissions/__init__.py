"""
Permission Core - rank thresholds, sub-privileges and policy selectors.
"""

from imageboard.kernel.permissions.access import (
    AccessResolver,
    Anonymous,
    ExactRank,
    Nobody,
    PolicySelector,
    Privilege,
    PrivilegeRequirement,
    parse_policy,
    policy_allows,
)

__all__ = [
    "AccessResolver",
    "Anonymous",
    "ExactRank",
    "Nobody",
    "PolicySelector",
    "Privilege",
    "PrivilegeRequirement",
    "parse_policy",
    "policy_allows",
]
