"""
Job arguments and the requirement combinators jobs declare over them.

    Conjunction(JobArgs.SOURCE_TAG_NAME, JobArgs.TARGET_TAG_NAME)
    Disjunction(JobArgs.POST_ID, JobArgs.POST_CONTENT_URL, JobArgs.POST_CONTENT)

Evaluation never raises. A conjunction reports every missing key in one
pass; a disjunction passes as soon as one branch is fully satisfied.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Iterator, Mapping, Optional, Tuple, Union

from imageboard.kernel.errors import ValidationError


class JobArgs:
    """Argument keys understood by the jobs."""

    NEW_USER_NAME = "new-user-name"
    NEW_PASSWORD = "new-password"
    NEW_EMAIL = "new-email"
    NEW_ACCESS_RANK = "new-access-rank"

    SOURCE_TAG_NAME = "source-tag-name"
    TARGET_TAG_NAME = "target-tag-name"

    POST_ID = "post-id"
    POST_CONTENT_URL = "post-content-url"
    POST_CONTENT = "post-content"

    OFFSET = "offset"
    LIMIT = "limit"


class ArgumentSet(Mapping[str, Any]):
    """Read-only mapping of argument key to value."""

    def __init__(self, values: Optional[Mapping[str, Any]] = None, **kwargs: Any):
        data = dict(values or {})
        data.update(kwargs)
        self._data = MappingProxyType(data)

    def __getitem__(self, key: str) -> Any:
        return self._data[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._data)

    def __len__(self) -> int:
        return len(self._data)

    def __repr__(self) -> str:
        return f"ArgumentSet({sorted(self._data)})"

    def has(self, key: str) -> bool:
        """Present means supplied with a value other than None."""
        return self._data.get(key) is not None

    def get_str(self, key: str, default: Optional[str] = None) -> Optional[str]:
        value = self._data.get(key)
        if value is None:
            return default
        if isinstance(value, bytes):
            raise ValidationError(f"Argument '{key}' must be text")
        return str(value)

    def get_int(self, key: str, default: Optional[int] = None) -> Optional[int]:
        value = self._data.get(key)
        if value is None:
            return default
        if isinstance(value, bool):
            raise ValidationError(f"Argument '{key}' must be an integer")
        try:
            return int(value)
        except (TypeError, ValueError):
            raise ValidationError(f"Argument '{key}' must be an integer")


@dataclass(frozen=True)
class RequirementVerdict:
    satisfied: bool
    missing: Tuple[str, ...] = ()


class Requirement(ABC):
    @abstractmethod
    def evaluate(self, arguments: ArgumentSet) -> RequirementVerdict:
        ...


@dataclass(frozen=True)
class Leaf(Requirement):
    key: str

    def evaluate(self, arguments: ArgumentSet) -> RequirementVerdict:
        if arguments.has(self.key):
            return RequirementVerdict(True)
        return RequirementVerdict(False, (self.key,))


def _as_requirement(item: Union[str, Requirement]) -> Requirement:
    return Leaf(item) if isinstance(item, str) else item


def _merge_missing(verdicts) -> Tuple[str, ...]:
    seen = []
    for verdict in verdicts:
        for key in verdict.missing:
            if key not in seen:
                seen.append(key)
    return tuple(seen)


class Conjunction(Requirement):
    """All children must be satisfied."""

    def __init__(self, *children: Union[str, Requirement]):
        self.children = tuple(_as_requirement(c) for c in children)

    def evaluate(self, arguments: ArgumentSet) -> RequirementVerdict:
        verdicts = [child.evaluate(arguments) for child in self.children]
        missing = _merge_missing(verdicts)
        return RequirementVerdict(not missing, missing)

    def __repr__(self) -> str:
        return f"Conjunction{self.children!r}"


class Disjunction(Requirement):
    """At least one child must be satisfied."""

    def __init__(self, *children: Union[str, Requirement]):
        self.children = tuple(_as_requirement(c) for c in children)

    def evaluate(self, arguments: ArgumentSet) -> RequirementVerdict:
        if not self.children:
            return RequirementVerdict(True)
        verdicts = [child.evaluate(arguments) for child in self.children]
        if any(v.satisfied for v in verdicts):
            return RequirementVerdict(True)
        return RequirementVerdict(False, _merge_missing(verdicts))

    def __repr__(self) -> str:
        return f"Disjunction{self.children!r}"
