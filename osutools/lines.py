"""Splitting text into lines and comma separated fields while keeping track of
where everything came from"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, List, TypeVar

from osutools.diagnostics import Diagnostic, DiagnosticKind, FieldError, Span

T = TypeVar("T")


@dataclass(frozen=True)
class SourceLine:
    number: int
    text: str
    ending: str

    @property
    def is_blank(self) -> bool:
        return not self.text.strip()

    @property
    def is_comment(self) -> bool:
        return self.text.lstrip().startswith("//")

    @property
    def is_trivia(self) -> bool:
        return self.is_blank or self.is_comment

    def span(self, start: int = 0, end: int = -1) -> Span:
        if end < 0:
            end = len(self.text)
        return Span(self.number, start, end)

    def diagnostic(self, error: FieldError) -> Diagnostic:
        return error.to_diagnostic(self.number, self.text)


def split_lines(text: str, first_line: int = 1) -> List[SourceLine]:
    """Split on \\n only, a \\r right before it is part of the line ending.
    Joining `text + ending` of every line gives back the input"""
    lines = []
    pieces = text.split("\n")
    for i, piece in enumerate(pieces):
        if i == len(pieces) - 1:
            ending = ""
        elif piece.endswith("\r"):
            piece = piece[:-1]
            ending = "\r\n"
        else:
            ending = "\n"
        lines.append(SourceLine(first_line + i, piece, ending))

    return lines


@dataclass(frozen=True)
class Token:
    """A piece of a line, start and end are columns in that line"""

    text: str
    start: int
    end: int

    def strip(self) -> Token:
        stripped = self.text.lstrip()
        start = self.start + len(self.text) - len(stripped)
        stripped = stripped.rstrip()
        return Token(stripped, start, start + len(stripped))

    def split(self, separator: str) -> List[Token]:
        return split_tokens(self.text, separator, offset=self.start)

    def parse(self, parser: Callable[[str], T]) -> T:
        """Run a parser on the stripped text, errors get positioned on this
        token"""
        token = self.strip()
        try:
            return parser(token.text)
        except FieldError as e:
            raise e.shifted(token.start, token.end) from None


def split_tokens(
    text: str, separator: str = ",", offset: int = 0, quoted: bool = False
) -> List[Token]:
    """Like str.split but remembers columns. With quoted=True the separator is
    ignored between double quotes"""
    tokens = []
    start = 0
    in_quotes = False
    for i, char in enumerate(text):
        if quoted and char == '"':
            in_quotes = not in_quotes
        elif char == separator and not in_quotes:
            tokens.append(Token(text[start:i], offset + start, offset + i))
            start = i + 1

    tokens.append(Token(text[start:], offset + start, offset + len(text)))
    return tokens


def depth_of(text: str) -> int:
    """Storyboard nesting depth : length of the leading run of spaces or
    underscores"""
    depth = 0
    for char in text:
        if char not in " _":
            break
        depth += 1
    return depth


def check_field_count(
    text: str, tokens: List[Token], least: int, most: int, kind: str
) -> None:
    if len(tokens) < least:
        raise FieldError(
            DiagnosticKind.MISSING_FIELD,
            f"A {kind} needs at least {least} fields, found {len(tokens)}",
            len(text),
            len(text) + 1,
        )
    if len(tokens) > most:
        extra = tokens[most]
        raise FieldError(
            DiagnosticKind.UNEXPECTED_FIELD,
            f"A {kind} has at most {most} fields, found {len(tokens)}",
            extra.start,
            len(text),
        )
