"""Sections made of `Key: Value` lines : [General], [Editor], [Metadata],
[Difficulty] and [Colours]"""

from __future__ import annotations

from dataclasses import dataclass, replace
from functools import partial
from typing import (
    Any,
    ClassVar,
    Iterator,
    List,
    Mapping,
    MutableMapping,
    Optional,
    Tuple,
    Union,
)

from parsimonious import Grammar, NodeVisitor, ParseError
from parsimonious.nodes import Node

from osutools.codecs import Text
from osutools.diagnostics import (
    Diagnostic,
    DiagnosticKind,
    FieldError,
    NotApplicableError,
    OsuParseError,
    Severity,
    unknown_key,
)
from osutools.lines import SourceLine, Token, split_lines
from osutools.sections.base import Provenance, Row, Section, parse_line
from osutools.versioning import NOT_APPLICABLE, NotApplicable, VersionedField

key_value_grammar = Grammar(
    r"""
    line  = key ":" value
    key   = ~r"[^:]*"
    value = ~r".*"
    """
)


class KeyValueVisitor(NodeVisitor):

    """Returns (key, value) tokens"""

    def __init__(self) -> None:
        super().__init__()
        self.key: Optional[Token] = None
        self.value: Optional[Token] = None

    def visit_line(
        self, node: Node, visited_children: List[Node]
    ) -> Tuple[Token, Token]:
        if self.key is None or self.value is None:
            raise ValueError("No key found after parsing line")
        return self.key, self.value

    def visit_key(self, node: Node, visited_children: List[Node]) -> None:
        self.key = Token(node.text, node.start, node.end).strip()

    def visit_value(self, node: Node, visited_children: List[Node]) -> None:
        self.value = Token(node.text, node.start, node.end).strip()

    def generic_visit(self, node: Node, visited_children: List[Node]) -> None:
        ...


def parse_key_value(line: str) -> Tuple[Token, Token]:
    try:
        key, value = KeyValueVisitor().visit(key_value_grammar.parse(line))
    except ParseError:
        raise FieldError(
            DiagnosticKind.MISSING_KEY, "Expected a 'Key: Value' line"
        ) from None

    if not key.text:
        raise FieldError(
            DiagnosticKind.MISSING_KEY, "Missing key before ':'", 0, value.start
        )
    return key, value


@dataclass(frozen=True)
class Setting:
    """A single Key: Value line. known=False means the value is the verbatim
    text of a key this version doesn't know about"""

    key: str
    value: Any
    known: bool = True


class KeyValueSection(Section, MutableMapping[str, Any]):
    FIELDS: ClassVar[Mapping[str, VersionedField[Any]]] = {}
    SEPARATOR: ClassVar[str] = ": "
    DROP_UNREPRESENTABLE = True

    def field_for(self, key: str) -> Optional[VersionedField[Any]]:
        return self.FIELDS.get(key)

    def read(
        self,
        lines: List[SourceLine],
        warnings: List[Diagnostic],
        *,
        strict: bool = False,
        provenance: Provenance = Provenance.OSU,
    ) -> None:
        seen = set()
        for line in lines:
            if line.is_trivia:
                self._rows.append(Row.trivia(line, provenance))
                continue

            key, value = parse_line(line, parse_key_value)
            field = self.field_for(key.text)
            if field is None or not field.applies_to(self.version):
                if field is None:
                    reason = f"is not a known [{self.NAME}] key"
                else:
                    reason = f"does not exist in osu file format v{self.version}"
                warning = unknown_key(
                    key.text, reason, line.number, line.text, key.start
                )
                if strict:
                    raise OsuParseError([replace(warning, severity=Severity.ERROR)])
                warnings.append(warning)
                setting = Setting(key.text, value.text, known=False)
            else:
                if key.text in seen:
                    error = FieldError(
                        DiagnosticKind.DUPLICATE_KEY,
                        f"{key.text} is set more than once",
                        key.start,
                        key.end,
                    )
                    raise OsuParseError([line.diagnostic(error)])
                seen.add(key.text)
                setting = Setting(key.text, self._parse_value(line, field, value))

            self._rows.append(Row.from_line(setting, line, provenance))

    def format_value(self, value: Any, version: int) -> Optional[List[str]]:
        setting: Setting = value
        if not setting.known:
            return [f"{setting.key}{self.SEPARATOR}{setting.value}"]

        field = self.field_for(setting.key)
        if field is None:
            return None
        text = field.format(setting.value, version)
        if text is None:
            return None
        return [f"{setting.key}{self.SEPARATOR}{text}"]

    def reparse(self, lines: List[str]) -> Setting:
        (line,) = split_lines("\n".join(lines))
        key, value = parse_line(line, parse_key_value)
        field = self.field_for(key.text)
        if field is None or not field.applies_to(self.version):
            return Setting(key.text, value.text, known=False)
        return Setting(key.text, self._parse_value(line, field, value))

    def _parse_value(
        self, line: SourceLine, field: VersionedField[Any], value: Token
    ) -> Any:
        try:
            return value.parse(partial(field.parse, version=self.version))
        except FieldError as e:
            raise OsuParseError([line.diagnostic(e)]) from None

    def _find(self, key: str) -> Optional[Row]:
        for row in self._rows:
            if not row.is_trivia and row.value.key == key:
                return row
        return None

    def __getitem__(self, key: str) -> Any:
        row = self._find(key)
        if row is None:
            raise KeyError(key)
        return row.value.value

    def __setitem__(self, key: str, value: Any) -> None:
        field = self.field_for(key)
        if field is None:
            setting = self.validated(Setting(key, Text().format(value), known=False))
        elif not field.applies_to(self.version):
            raise NotApplicableError(
                f"{key} does not exist in osu file format v{self.version}"
            )
        else:
            setting = self.validated(Setting(key, value))

        row = self._find(key)
        if row is None:
            row = Row(setting, provenance=self.default_provenance)
            self._rows.insert(self._insertion_point(row.provenance), row)
        else:
            row.value = setting
            row.text = None
        if row.provenance is Provenance.OSU:
            self.native = True

    def __delitem__(self, key: str) -> None:
        row = self._find(key)
        if row is None:
            raise KeyError(key)
        self._rows.remove(row)

    def __iter__(self) -> Iterator[str]:
        seen = set()
        for row in self._rows:
            if row.is_trivia or row.value.key in seen:
                continue
            seen.add(row.value.key)
            yield row.value.key

    def __len__(self) -> int:
        return sum(1 for _ in self)

    def resolve(self, key: str) -> Union[Any, None, NotApplicable]:
        """The value as written, else the version's default value. Fields
        that don't exist in this version are always NOT_APPLICABLE, even if
        the source had a line for them"""
        field = self.field_for(key)
        if field is not None and not field.applies_to(self.version):
            return NOT_APPLICABLE

        row = self._find(key)
        if row is not None:
            return row.value.value
        elif field is not None:
            return field.default(self.version)
        else:
            return None

    def raw(self, key: str) -> Optional[str]:
        """Verbatim value text from the source, None if the key is absent or
        its value was replaced"""
        row = self._find(key)
        if row is None or row.text is None:
            return None
        _, value = parse_key_value(row.text)
        return value.text

    def unknown_keys(self) -> List[str]:
        return [
            row.value.key
            for row in self._rows
            if not row.is_trivia and not row.value.known
        ]
