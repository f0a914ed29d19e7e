"""What .osu and .osb files have in common : text before the first section
and a list of [Sections]"""

from __future__ import annotations

import warnings
from typing import ClassVar, Dict, Iterable, Iterator, List, Optional, Type

from more_itertools import split_before
from parsimonious import Grammar, NodeVisitor, ParseError
from parsimonious.nodes import Node

from osutools.diagnostics import (
    Diagnostic,
    DiagnosticKind,
    FieldError,
    OsuParseError,
    UnknownKeyWarning,
)
from osutools.lines import SourceLine, Token
from osutools.sections.base import Chunk, Provenance, Row, Section, parse_line
from osutools.versioning import LATEST_VERSION, MIN_VERSION, check_version

file_header_grammar = Grammar(
    r"""
    header   = bom? ws "osu file format v" version ws
    bom      = "\ufeff"
    version  = ~r"\d+"
    ws       = ~r"[ \t]*"
    """
)


class FileHeaderVisitor(NodeVisitor):

    unwrapped_exceptions = (FieldError,)

    def visit_header(self, node: Node, visited_children: List[int]) -> int:
        return next(c for c in visited_children if isinstance(c, int))

    def visit_version(self, node: Node, visited_children: List[Node]) -> int:
        version = int(node.text)
        if version < MIN_VERSION:
            raise FieldError(
                DiagnosticKind.VERSION_HEADER_INVALID,
                f"osu file format v{version} is not supported, the oldest known "
                f"version is v{MIN_VERSION}",
                node.start,
                node.end,
            )
        return version

    def generic_visit(self, node: Node, visited_children: List[Node]) -> None:
        ...


def parse_file_header(text: str) -> int:
    try:
        tree = file_header_grammar.parse(text)
    except ParseError:
        raise FieldError(
            DiagnosticKind.VERSION_HEADER_INVALID,
            f"Expected 'osu file format vN' on the first line, got {text!r}",
        ) from None

    return FileHeaderVisitor().visit(tree)  # type: ignore[no-any-return]


section_header_grammar = Grammar(
    r"""
    section_header = ws "[" name "]" ws
    name           = ~r"[^\[\]]*"
    ws             = ~r"[ \t]*"
    """
)


class SectionHeaderVisitor(NodeVisitor):
    def visit_section_header(
        self, node: Node, visited_children: List[Optional[Token]]
    ) -> Token:
        return next(c for c in visited_children if isinstance(c, Token))

    def visit_name(self, node: Node, visited_children: List[Node]) -> Token:
        return Token(node.text, node.start, node.end)

    def generic_visit(self, node: Node, visited_children: List[Node]) -> None:
        ...


def is_section_header(line: SourceLine) -> bool:
    return not line.is_trivia and line.text.lstrip().startswith("[")


def parse_section_header(text: str) -> Token:
    """Returns the section name with its columns"""
    try:
        tree = section_header_grammar.parse(text)
    except ParseError:
        if "]" not in text:
            start = text.index("[")
            raise FieldError(
                DiagnosticKind.UNTERMINATED_BLOCK,
                "Section header is missing its closing ']'",
                start,
                len(text),
            ) from None
        raise FieldError(
            DiagnosticKind.UNKNOWN_SECTION, f"Malformed section header : {text!r}"
        ) from None

    return SectionHeaderVisitor().visit(tree)  # type: ignore[no-any-return]


def render(chunks: Iterable[Chunk], newline: str) -> str:
    """Join text chunks, chunks without a known line ending get the document's
    newline, except for the very last one if it was the end of the source"""
    chunk_list = list(chunks)
    parts = []
    for i, (text, ending) in enumerate(chunk_list):
        if ending is None or (not ending and i < len(chunk_list) - 1):
            ending = newline
        parts.append(text + ending)
    return "".join(parts)


def emit(diagnostics: Iterable[Diagnostic]) -> None:
    for diagnostic in diagnostics:
        warnings.warn(UnknownKeyWarning(diagnostic), stacklevel=3)


class VerbatimSection(Section):
    """Section that is only kept around to be written back"""

    NAME = ""

    def read(
        self,
        lines: List[SourceLine],
        warnings: List[Diagnostic],
        *,
        strict: bool = False,
        provenance: Provenance = Provenance.OSU,
    ) -> None:
        self._rows.extend(Row.trivia(line, provenance) for line in lines)


class Document:
    # known sections, in canonical order
    SECTION_TYPES: ClassVar[Dict[str, Type[Section]]] = {}
    PROVENANCE: ClassVar[Provenance] = Provenance.OSU

    def __init__(self, version: int = LATEST_VERSION) -> None:
        self._version = check_version(version)
        self.preamble: List[Row] = []
        self._sections: Dict[str, Section] = {}
        self.warnings: List[Diagnostic] = []
        self.newline = "\r\n"

    @property
    def version(self) -> int:
        return self._version

    @property
    def section_names(self) -> List[str]:
        return list(self._sections)

    def section(self, name: str) -> Optional[Section]:
        return self._sections.get(name)

    def add_section(self, name: str) -> Section:
        """Create an empty section at its usual place"""
        if name in self._sections:
            raise ValueError(f"This document already has a [{name}] section")
        section = self._new_section(name)
        self._insert_section(name, section)
        return section

    def remove_section(self, name: str) -> None:
        try:
            del self._sections[name]
        except KeyError:
            raise KeyError(f"This document has no [{name}] section") from None

    def _new_section(self, name: str) -> Section:
        try:
            cls = self.SECTION_TYPES[name]
        except KeyError:
            raise ValueError(f"Unknown section : {name!r}") from None

        section = cls(self.version)
        section.default_provenance = self.PROVENANCE
        # blank line before the next section
        section._rows.append(Row(text="", provenance=self.PROVENANCE))
        return section

    def _insert_section(self, name: str, section: Section) -> None:
        order = list(self.SECTION_TYPES)
        rank = order.index(name)
        items = list(self._sections.items())
        position = next(
            (
                i
                for i, (other, _) in enumerate(items)
                if other in order and order.index(other) > rank
            ),
            len(items),
        )
        items.insert(position, (name, section))
        self._sections = dict(items)

    def _unknown_section(
        self, name: Token, header: SourceLine, body: List[SourceLine]
    ) -> Section:
        error = FieldError(
            DiagnosticKind.UNKNOWN_SECTION,
            f"Unknown section [{name.text}]",
            name.start,
            max(name.end, name.start + 1),
        )
        raise OsuParseError([header.diagnostic(error)])

    def _includes(self, section: Section) -> bool:
        return True

    def _read(self, lines: List[SourceLine], *, strict: bool = False) -> None:
        """Fill the document with the sections found in `lines`. Each section
        stops at its first error, then everything that went wrong is raised
        at once"""
        self.preamble = []
        errors: List[Diagnostic] = []
        found: List[Diagnostic] = []
        for group in split_before(lines, is_section_header):
            header, *body = group
            if not is_section_header(header):
                outside = next((line for line in group if not line.is_trivia), None)
                if outside is not None:
                    error = FieldError(
                        DiagnosticKind.CONTENT_OUTSIDE_SECTION,
                        "Found content before the first [Section]",
                    )
                    errors.append(outside.diagnostic(error))
                self.preamble = [Row.trivia(line, self.PROVENANCE) for line in group]
                continue

            try:
                self._read_section(header, body, found, strict=strict)
            except OsuParseError as e:
                errors.extend(e.diagnostics)

        if errors:
            raise OsuParseError(errors, found)

        self.warnings = found

    def _read_section(
        self,
        header: SourceLine,
        body: List[SourceLine],
        found: List[Diagnostic],
        *,
        strict: bool = False,
    ) -> None:
        name = parse_line(header, parse_section_header)
        if name.text in self._sections:
            error = FieldError(
                DiagnosticKind.DUPLICATE_SECTION,
                f"[{name.text}] appears more than once",
                name.start,
                name.end,
            )
            raise OsuParseError([header.diagnostic(error)])

        cls = self.SECTION_TYPES.get(name.text)
        if cls is None:
            section = self._unknown_section(name, header, body)
        else:
            section, section_warnings = cls.parse(
                header, body, self.version, strict=strict, provenance=self.PROVENANCE
            )
            found.extend(section_warnings)
        self._sections[name.text] = section

    def chunks(self, version: int) -> Iterator[Chunk]:
        for row in self.preamble:
            yield row.text or "", row.ending
        for section in self._sections.values():
            if self._includes(section):
                yield from section.chunks(version, self.PROVENANCE)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Document):
            return NotImplemented
        return (
            type(self) is type(other)
            and self.version == other.version
            and [r.comparable() for r in self.preamble]
            == [r.comparable() for r in other.preamble]
            and list(self._sections.items()) == list(other._sections.items())
        )

    def __repr__(self) -> str:
        sections = ", ".join(self._sections)
        return f"{type(self).__name__}(v{self.version}, [{sections}])"
