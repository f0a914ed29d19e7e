"""Small value types shared by several sections"""

from __future__ import annotations

from dataclasses import astuple, dataclass
from enum import IntEnum, IntFlag
from functools import wraps
from typing import Any, Callable, Iterator, Optional

from osutools.codecs import parse_int
from osutools.diagnostics import DiagnosticKind, FieldError
from osutools.lines import split_tokens


def convert_other(
    f: Callable[[Position, Position], Position]
) -> Callable[[Position, Any], Position]:
    @wraps(f)
    def wrapped(self: Position, other: Any) -> Position:
        if isinstance(other, Position):
            other_pos = other
        else:
            try:
                other_pos = Position(*other)
            except (TypeError, ValueError):
                raise ValueError(
                    f"Could not convert {type(other)} to a Position"
                ) from None

        return f(self, other_pos)

    return wrapped


@dataclass(frozen=True, order=True)
class Position:
    """Integer point in osu!pixels, (0, 0) is the top-left corner of the
    512×384 playfield"""

    x: int
    y: int

    def __iter__(self) -> Iterator[int]:
        yield from astuple(self)

    @convert_other
    def __add__(self, other: Position) -> Position:
        return Position(self.x + other.x, self.y + other.y)

    @convert_other
    def __sub__(self, other: Position) -> Position:
        return Position(self.x - other.x, self.y - other.y)


class SampleSet(IntEnum):
    """Sample bank as written in timing points and hit samples, DEFAULT
    means 'inherit from the timing point' (or from the map for timing
    points)"""

    DEFAULT = 0
    NORMAL = 1
    SOFT = 2
    DRUM = 3


class HitSound(IntFlag):
    NONE = 0
    NORMAL = 1
    WHISTLE = 2
    FINISH = 4
    CLAP = 8


@dataclass(frozen=True)
class Colour:
    red: int
    green: int
    blue: int
    alpha: Optional[int] = None

    def __post_init__(self) -> None:
        for name, value in zip(("red", "green", "blue", "alpha"), astuple(self)):
            if value is None:
                continue
            if isinstance(value, bool) or not isinstance(value, int):
                raise TypeError(f"{name} must be an int, got {value!r}")
            if not 0 <= value <= 255:
                raise ValueError(f"{name} out of [0, 255] range : {value}")

    def __str__(self) -> str:
        return ",".join(str(c) for c in astuple(self) if c is not None)


class ColourCodec:
    """r,g,b with an optional alpha"""

    def parse(self, text: str) -> Colour:
        tokens = split_tokens(text)
        if not 3 <= len(tokens) <= 4:
            raise FieldError(
                DiagnosticKind.MISSING_FIELD
                if len(tokens) < 3
                else DiagnosticKind.UNEXPECTED_FIELD,
                f"Expected 3 or 4 comma separated components, found {len(tokens)}",
            )
        components = [t.parse(lambda s: parse_int(s, 0, 255)) for t in tokens]
        return Colour(*components)

    def format(self, value: Colour) -> Optional[str]:
        if not isinstance(value, Colour):
            raise TypeError(f"Expected a Colour, got {value!r}")
        return str(value)
