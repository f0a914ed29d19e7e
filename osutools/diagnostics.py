"""Errors and warnings produced while reading .osu and .osb text

Positions use 1-based line numbers and 0-based, half-open column ranges
counted in characters (code points, not bytes), so that
`diagnostic.snippet[span.start:span.end]` is always the offending token
whatever the encoding the caller decoded the file with."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Optional, Sequence, Tuple


class Severity(Enum):
    ERROR = "error"
    WARNING = "warning"


class DiagnosticKind(Enum):
    MISSING_KEY = "MissingKey"
    UNKNOWN_KEY = "UnknownKey"
    INVALID_NUMBER = "InvalidNumber"
    INVALID_ENUM_VARIANT = "InvalidEnumVariant"
    MALFORMED_SLIDER_PATH = "MalformedSliderPath"
    MALFORMED_STORYBOARD_COMMAND = "MalformedStoryboardCommand"
    UNTERMINATED_BLOCK = "UnterminatedBlock"
    VERSION_HEADER_INVALID = "VersionHeaderInvalid"
    AMBIGUOUS_HIT_OBJECT_TYPE = "AmbiguousHitObjectType"
    MISSING_FIELD = "MissingField"
    UNEXPECTED_FIELD = "UnexpectedField"
    INVALID_VALUE = "InvalidValue"
    INHERITED_FLAG_MISMATCH = "InheritedFlagMismatch"
    DUPLICATE_SECTION = "DuplicateSection"
    UNKNOWN_SECTION = "UnknownSection"
    DUPLICATE_KEY = "DuplicateKey"
    CONTENT_OUTSIDE_SECTION = "ContentOutsideSection"
    MALFORMED_VARIABLE = "MalformedVariable"


@dataclass(frozen=True)
class Span:
    line: int
    start: int
    end: int

    def __str__(self) -> str:
        return f"line {self.line}, column {self.start + 1}"


@dataclass(frozen=True)
class Diagnostic:
    kind: DiagnosticKind
    message: str
    span: Span
    snippet: str
    severity: Severity = Severity.ERROR

    @property
    def is_fatal(self) -> bool:
        return self.severity is Severity.ERROR

    def pretty(self) -> str:
        """Message followed by the source line with the token underlined"""
        width = max(1, self.span.end - self.span.start)
        underline = " " * self.span.start + "^" * width
        return f"{self}\n    {self.snippet}\n    {underline}"

    def __str__(self) -> str:
        return f"{self.span} : {self.kind.value} : {self.message}"


class FieldError(ValueError):
    """Raised by codecs and sub-grammars, the column range is relative to
    whatever text they were handed until a line parser re-anchors it"""

    def __init__(
        self,
        kind: DiagnosticKind,
        message: str,
        start: Optional[int] = None,
        end: Optional[int] = None,
    ) -> None:
        super().__init__(message)
        self.kind = kind
        self.message = message
        self.start = start
        self.end = end

    def shifted(self, offset: int, default_end: int) -> FieldError:
        """Return a copy positioned inside a token found at `offset`, when no
        position is known the whole token is blamed"""
        if self.start is None:
            return FieldError(self.kind, self.message, offset, default_end)

        end = self.end if self.end is not None else self.start + 1
        return FieldError(self.kind, self.message, offset + self.start, offset + end)

    def to_diagnostic(self, line: int, snippet: str) -> Diagnostic:
        start = self.start if self.start is not None else 0
        end = self.end if self.end is not None else len(snippet)
        return Diagnostic(
            kind=self.kind,
            message=self.message,
            span=Span(line, start, max(start, end)),
            snippet=snippet,
        )


class OsuParseError(ValueError):
    """At least one section could not be parsed"""

    def __init__(
        self,
        diagnostics: Sequence[Diagnostic],
        warnings: Iterable[Diagnostic] = (),
    ) -> None:
        if not diagnostics:
            raise ValueError("OsuParseError needs at least one diagnostic")

        self.diagnostics: Tuple[Diagnostic, ...] = tuple(diagnostics)
        self.warnings: Tuple[Diagnostic, ...] = tuple(warnings)
        super().__init__("\n".join(d.pretty() for d in self.diagnostics))

    @property
    def diagnostic(self) -> Diagnostic:
        return self.diagnostics[0]

    @property
    def kind(self) -> DiagnosticKind:
        return self.diagnostic.kind

    @property
    def span(self) -> Span:
        return self.diagnostic.span


class NotApplicableError(ValueError):
    """A value cannot be written at the version of the document"""


class UnknownKeyWarning(UserWarning):
    def __init__(self, diagnostic: Diagnostic) -> None:
        super().__init__(str(diagnostic))
        self.diagnostic = diagnostic


def unknown_key(
    key: str, reason: str, line: int, snippet: str, start: int
) -> Diagnostic:
    return Diagnostic(
        kind=DiagnosticKind.UNKNOWN_KEY,
        message=f"{key!r} {reason}, it will be kept as is",
        span=Span(line, start, start + len(key)),
        snippet=snippet,
        severity=Severity.WARNING,
    )
