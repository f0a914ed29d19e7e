"""Primitive value codecs

A codec turns the (already stripped) text of a single field into a python
value and back. `parse` raises FieldError, `format` returns None when the
value exists but cannot be written by this codec, and raises TypeError when
it is not even the right kind of value."""

from __future__ import annotations

import re
from decimal import Decimal, InvalidOperation
from enum import Enum, IntEnum
from typing import (
    Generic,
    Mapping,
    Optional,
    Protocol,
    Tuple,
    Type,
    TypeVar,
    Union,
)

from osutools.diagnostics import DiagnosticKind, FieldError

T = TypeVar("T")
T_co = TypeVar("T_co", covariant=True)
E = TypeVar("E", bound=Enum)
I = TypeVar("I", bound=IntEnum)

INTEGER = re.compile(r"[+-]?\d+")
DECIMAL = re.compile(r"[+-]?(\d+(\.\d*)?|\.\d+)([eE][+-]?\d+)?")


class Codec(Protocol[T]):
    def parse(self, text: str) -> T:
        ...

    def format(self, value: T) -> Optional[str]:
        ...


def parse_int(
    text: str, min_value: Optional[int] = None, max_value: Optional[int] = None
) -> int:
    if not INTEGER.fullmatch(text):
        raise FieldError(DiagnosticKind.INVALID_NUMBER, f"{text!r} is not an integer")

    value = int(text)
    if min_value is not None and value < min_value:
        raise FieldError(
            DiagnosticKind.INVALID_VALUE, f"{value} is lower than {min_value}"
        )
    if max_value is not None and value > max_value:
        raise FieldError(
            DiagnosticKind.INVALID_VALUE, f"{value} is greater than {max_value}"
        )
    return value


def parse_decimal(text: str) -> Decimal:
    if not DECIMAL.fullmatch(text):
        raise FieldError(DiagnosticKind.INVALID_NUMBER, f"{text!r} is not a number")
    try:
        return Decimal(text)
    except InvalidOperation:
        raise FieldError(
            DiagnosticKind.INVALID_NUMBER, f"{text!r} is not a number"
        ) from None


def format_int(value: int) -> str:
    if isinstance(value, bool) or not isinstance(value, int):
        raise TypeError(f"Expected an int, got {value!r}")
    return str(value)


def format_decimal(value: Union[Decimal, int, float]) -> str:
    if isinstance(value, bool):
        raise TypeError(f"Expected a number, got {value!r}")
    if isinstance(value, float):
        # repr gives the shortest string that reads back as the same float
        return repr(value)
    if not isinstance(value, (int, Decimal)):
        raise TypeError(f"Expected a number, got {value!r}")
    if isinstance(value, Decimal) and not value.is_finite():
        raise ValueError(f"{value} cannot be written in an osu file")
    return str(value)


class Text:
    def parse(self, text: str) -> str:
        return text

    def format(self, value: str) -> Optional[str]:
        if not isinstance(value, str):
            raise TypeError(f"Expected a str, got {value!r}")
        if "\n" in value or "\r" in value:
            raise ValueError("Values cannot span several lines")
        return value


class Integer:
    def __init__(
        self, min_value: Optional[int] = None, max_value: Optional[int] = None
    ) -> None:
        self.min_value = min_value
        self.max_value = max_value

    def parse(self, text: str) -> int:
        return parse_int(text, self.min_value, self.max_value)

    def format(self, value: int) -> Optional[str]:
        return format_int(value)


class DecimalNumber:
    def parse(self, text: str) -> Decimal:
        return parse_decimal(text)

    def format(self, value: Decimal) -> Optional[str]:
        return format_decimal(value)


class ZeroOneBool:
    def parse(self, text: str) -> bool:
        value = parse_int(text)
        if value not in (0, 1):
            raise FieldError(
                DiagnosticKind.INVALID_ENUM_VARIANT, f"Expected 0 or 1, got {text!r}"
            )
        return bool(value)

    def format(self, value: bool) -> Optional[str]:
        if not isinstance(value, bool):
            raise TypeError(f"Expected a bool, got {value!r}")
        return "1" if value else "0"


class IntEnumCodec(Generic[I]):
    """Enum written as its integer value"""

    def __init__(self, enum: Type[I]) -> None:
        self.enum = enum

    def parse(self, text: str) -> I:
        value = parse_int(text)
        try:
            return self.enum(value)
        except ValueError:
            allowed = ", ".join(str(int(e)) for e in self.enum)
            raise FieldError(
                DiagnosticKind.INVALID_ENUM_VARIANT,
                f"{value} is not a valid {self.enum.__name__}, expected one of "
                f"{allowed}",
            ) from None

    def format(self, value: I) -> Optional[str]:
        if not isinstance(value, self.enum):
            raise TypeError(f"Expected a {self.enum.__name__}, got {value!r}")
        return str(int(value))


class TokenCodec(Generic[E]):
    """Enum written as a word. Aliases are read but never written, values
    missing from `tokens` cannot be written at all"""

    def __init__(
        self,
        enum: Type[E],
        tokens: Mapping[str, E],
        aliases: Optional[Mapping[str, E]] = None,
    ) -> None:
        self.enum = enum
        self.tokens = dict(tokens)
        self.aliases = dict(aliases or {})
        self.names = {v: k for k, v in self.tokens.items()}

    @classmethod
    def by_value(cls, enum: Type[E]) -> TokenCodec[E]:
        return cls(enum, {e.value: e for e in enum})

    def parse(self, text: str) -> E:
        try:
            return self.tokens[text]
        except KeyError:
            pass

        try:
            return self.aliases[text]
        except KeyError:
            raise FieldError(
                DiagnosticKind.INVALID_ENUM_VARIANT,
                f"{text!r} is not a valid {self.enum.__name__}, expected one of "
                f"{list(self.tokens)}",
            ) from None

    def format(self, value: E) -> Optional[str]:
        if not isinstance(value, self.enum):
            raise TypeError(f"Expected a {self.enum.__name__}, got {value!r}")
        return self.names.get(value)


class Separated(Generic[T]):
    """Homogeneous list, an empty text is an empty tuple. separator=None
    splits on runs of whitespace"""

    def __init__(self, item: Codec[T], separator: Optional[str] = ",") -> None:
        self.item = item
        self.separator = separator

    def parse(self, text: str) -> Tuple[T, ...]:
        if not text.strip():
            return ()

        items = []
        position = 0
        for piece in text.split(self.separator):
            offset = text.index(piece, position)
            position = offset + len(piece)
            stripped = piece.strip()
            try:
                items.append(self.item.parse(stripped))
            except FieldError as e:
                lead = offset + len(piece) - len(piece.lstrip())
                raise e.shifted(lead, lead + len(stripped)) from None
        return tuple(items)

    def format(self, value: Tuple[T, ...]) -> Optional[str]:
        if isinstance(value, (str, bytes)):
            raise TypeError(f"Expected a sequence of values, got {value!r}")
        formatted = []
        for item in value:
            text = self.item.format(item)
            if text is None:
                return None
            formatted.append(text)
        return (self.separator or " ").join(formatted)
