"""Format versions and the tables that make everything version dependant

Anything that changes across versions (which fields exist, how they are
written, their default values, which positional layout a line uses) is
described by a VersionTable : an ordered list of rules, each one covering a
contiguous range of versions. Tables are checked when they are built so that
every version from MIN_VERSION onwards is covered exactly once."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Generic, Optional, Tuple, TypeVar, Union

from osutools.codecs import Codec
from osutools.diagnostics import DiagnosticKind, FieldError

MIN_VERSION = 3
LATEST_VERSION = 14

T = TypeVar("T")


class NotApplicable(Enum):
    """The field does not exist in the requested format version"""

    NOT_APPLICABLE = "not applicable"

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "NOT_APPLICABLE"


NOT_APPLICABLE = NotApplicable.NOT_APPLICABLE


def check_version(version: int) -> int:
    if isinstance(version, bool) or not isinstance(version, int):
        raise TypeError(f"format version must be an int, not {type(version)}")
    if version < MIN_VERSION:
        raise ValueError(
            f"osu file format v{version} is not supported, the oldest known "
            f"version is v{MIN_VERSION}"
        )
    return version


@dataclass(frozen=True)
class VersionRange:
    """Inclusive range, last=None means every version from first onwards"""

    first: int = MIN_VERSION
    last: Optional[int] = None

    def __post_init__(self) -> None:
        if self.last is not None and self.last < self.first:
            raise ValueError(f"Empty version range : {self.first} > {self.last}")

    def __contains__(self, version: object) -> bool:
        if not isinstance(version, int):
            return False
        if version < self.first:
            return False
        return self.last is None or version <= self.last

    def __str__(self) -> str:
        if self.last is None:
            return f"v{self.first}+"
        elif self.last == self.first:
            return f"v{self.first}"
        else:
            return f"v{self.first}-v{self.last}"


def since(first: int) -> VersionRange:
    return VersionRange(first)


def between(first: int, last: int) -> VersionRange:
    return VersionRange(first, last)


def only(version: int) -> VersionRange:
    return VersionRange(version, version)


EVERY_VERSION = VersionRange()


class VersionTable(Generic[T]):
    """Maps every supported version to exactly one value"""

    def __init__(self, name: str, *rules: Tuple[VersionRange, T]) -> None:
        self.name = name
        self.rules = rules
        self._check()

    def _check(self) -> None:
        if not self.rules:
            raise ValueError(f"{self.name} : version table is empty")

        expected_first = MIN_VERSION
        for i, (versions, _) in enumerate(self.rules):
            if versions.first != expected_first:
                raise ValueError(
                    f"{self.name} : rule {i} covers {versions} but should start "
                    f"at v{expected_first}"
                )
            if versions.last is None:
                if i != len(self.rules) - 1:
                    raise ValueError(
                        f"{self.name} : only the last rule can be open-ended"
                    )
            else:
                expected_first = versions.last + 1

        if self.rules[-1][0].last is not None:
            raise ValueError(
                f"{self.name} : the last rule must cover every version after "
                f"v{self.rules[-1][0].first}"
            )

    def __getitem__(self, version: int) -> T:
        check_version(version)
        for versions, value in self.rules:
            if version in versions:
                return value

        # _check makes this unreachable
        raise LookupError(f"{self.name} has no rule for v{version}")


@dataclass(frozen=True)
class Rule(Generic[T]):
    """How a field behaves over a range of versions, codec=None means the
    field does not exist there"""

    versions: VersionRange
    codec: Optional[Codec[T]] = None
    default: Optional[T] = None


class VersionedField(Generic[T]):
    def __init__(self, name: str, *rules: Rule[T]) -> None:
        self.name = name
        self.table: VersionTable[Rule[T]] = VersionTable(
            name, *((r.versions, r) for r in rules)
        )

    def __repr__(self) -> str:
        return f"VersionedField({self.name!r})"

    def applies_to(self, version: int) -> bool:
        return self.table[version].codec is not None

    def parse(self, text: str, version: int) -> T:
        codec = self.table[version].codec
        if codec is None:
            raise FieldError(
                DiagnosticKind.UNKNOWN_KEY,
                f"{self.name} does not exist in osu file format v{version}",
            )
        return codec.parse(text)

    def format(self, value: T, version: int) -> Optional[str]:
        codec = self.table[version].codec
        if codec is None:
            return None
        return codec.format(value)

    def default(self, version: int) -> Union[T, None, NotApplicable]:
        rule = self.table[version]
        if rule.codec is None:
            return NOT_APPLICABLE
        return rule.default


def simple_field(
    name: str, codec: Codec[T], default: Optional[T] = None
) -> VersionedField[T]:
    """Field that exists and is written the same way in every version"""
    return VersionedField(name, Rule(EVERY_VERSION, codec, default))
