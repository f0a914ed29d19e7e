"""What every section has in common : a header line and an ordered list of
rows, each row remembering the exact text it was read from so that untouched
rows are written back byte for byte"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import (
    Any,
    Callable,
    ClassVar,
    Iterator,
    List,
    MutableSequence,
    Optional,
    Tuple,
    TypeVar,
    Union,
    overload,
)

from osutools.diagnostics import (
    Diagnostic,
    FieldError,
    NotApplicableError,
    OsuParseError,
)
from osutools.lines import SourceLine, split_lines
from osutools.versioning import check_version

T = TypeVar("T")

# A chunk of output : text + line ending, None meaning "whatever the
# document uses"
Chunk = Tuple[str, Optional[str]]


class Provenance(Enum):
    OSU = "osu"
    OSB = "osb"


@dataclass(eq=False)
class Row:
    """value is None for blank lines and comments. text is what was read
    from the source, it's dropped as soon as the value is replaced"""

    value: Any = None
    text: Optional[str] = None
    ending: Optional[str] = None
    provenance: Provenance = Provenance.OSU

    @classmethod
    def trivia(
        cls, line: SourceLine, provenance: Provenance = Provenance.OSU
    ) -> Row:
        return cls(None, line.text, line.ending, provenance)

    @classmethod
    def from_line(
        cls, value: Any, line: SourceLine, provenance: Provenance = Provenance.OSU
    ) -> Row:
        return cls(value, line.text, line.ending, provenance)

    @property
    def is_trivia(self) -> bool:
        return self.value is None

    def comparable(self) -> Tuple[Any, ...]:
        if self.is_trivia:
            return (self.provenance, None, self.text)
        else:
            return (self.provenance, self.value)


def parse_line(line: SourceLine, parser: Callable[[str], T]) -> T:
    """Turns FieldErrors raised while parsing a line into a parse error
    pointing inside this line"""
    try:
        return parser(line.text)
    except FieldError as e:
        raise OsuParseError([line.diagnostic(e)]) from None


class Section:
    NAME: ClassVar[str]
    # When converting to another version, rows that the target version
    # can't represent are either dropped (key:value sections) or an error
    DROP_UNREPRESENTABLE: ClassVar[bool] = False

    def __init__(self, version: int, header: Optional[Row] = None) -> None:
        self._version = check_version(version)
        self.header = header or Row(text=f"[{self.NAME}]")
        self._rows: List[Row] = []
        # False when the section only exists because of an appended .osb
        self.native = True
        # Provenance of the rows added through the mutation API
        self.default_provenance = Provenance.OSU

    @property
    def version(self) -> int:
        return self._version

    @classmethod
    def parse(
        cls,
        header: SourceLine,
        lines: List[SourceLine],
        version: int,
        *,
        strict: bool = False,
        provenance: Provenance = Provenance.OSU,
    ) -> Tuple[Section, List[Diagnostic]]:
        """Returns the section and the warnings found along the way, raises
        OsuParseError on the first fatal problem"""
        section = cls(version, Row(None, header.text, header.ending, provenance))
        section.native = provenance is Provenance.OSU
        section.default_provenance = provenance
        warnings: List[Diagnostic] = []
        section.read(lines, warnings, strict=strict, provenance=provenance)
        return section, warnings

    def read(
        self,
        lines: List[SourceLine],
        warnings: List[Diagnostic],
        *,
        strict: bool = False,
        provenance: Provenance = Provenance.OSU,
    ) -> None:
        """Append rows read from `lines` to the section"""
        raise NotImplementedError

    def format_value(self, value: Any, version: int) -> Optional[List[str]]:
        """Canonical text of a value, one string per line, None when the
        version has no way of writing it"""
        raise NotImplementedError

    def reparse(self, lines: List[str]) -> Any:
        """Inverse of format_value for the section's own version"""
        raise NotImplementedError

    def validated(self, value: Any) -> Any:
        """Check that a value can be written at the section's version and
        return it the way it will read back"""
        lines = self.format_value(value, self.version)
        if lines is None:
            raise NotApplicableError(
                f"{value!r} cannot be written in osu file format v{self.version}"
            )
        try:
            return self.reparse(lines)
        except OsuParseError as e:
            raise ValueError(
                f"{value!r} does not read back as a valid {self.NAME} entry : "
                f"{e.diagnostic.message}"
            ) from None

    def chunks(
        self,
        version: int,
        provenance: Provenance = Provenance.OSU,
        header: Optional[Row] = None,
    ) -> Iterator[Chunk]:
        header = header or self.header
        yield header.text or f"[{self.NAME}]", header.ending
        for row in self._rows:
            if row.provenance is not provenance:
                continue
            if row.is_trivia:
                yield row.text or "", row.ending
            elif row.text is not None and version == self.version:
                yield row.text, row.ending
            else:
                lines = self.format_value(row.value, version)
                if lines is None:
                    if self.DROP_UNREPRESENTABLE:
                        continue
                    raise NotApplicableError(
                        f"{row.value!r} cannot be written in [{self.NAME}] at "
                        f"osu file format v{version}"
                    )
                *first_lines, last_line = lines
                for line in first_lines:
                    yield line, None
                yield last_line, row.ending

    def _insertion_point(self, provenance: Provenance = Provenance.OSU) -> int:
        """New rows go right after the last non-trivia row, before the blank
        lines that usually separate sections"""
        for i in range(len(self._rows) - 1, -1, -1):
            row = self._rows[i]
            if not row.is_trivia and row.provenance is provenance:
                return i + 1
        return 0

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Section):
            return NotImplemented
        return (
            type(self) is type(other)
            and self.version == other.version
            and [r.comparable() for r in self._rows]
            == [r.comparable() for r in other._rows]
        )

    def __repr__(self) -> str:
        values = [r.value for r in self._rows if not r.is_trivia]
        return f"{type(self).__name__}(v{self.version}, {values!r})"


class EntrySection(Section, MutableSequence[T]):
    """Section made of positional entries, one per line. Indexing only sees
    the entries, blank lines and comments keep their place around them"""

    def parse_entry(self, text: str) -> T:
        raise NotImplementedError

    def format_entry(self, entry: T, version: int) -> Optional[str]:
        raise NotImplementedError

    def format_value(self, value: Any, version: int) -> Optional[List[str]]:
        text = self.format_entry(value, version)
        return None if text is None else [text]

    def reparse(self, lines: List[str]) -> Any:
        (line,) = split_lines("\n".join(lines))
        return parse_line(line, self.parse_entry)

    def read(
        self,
        lines: List[SourceLine],
        warnings: List[Diagnostic],
        *,
        strict: bool = False,
        provenance: Provenance = Provenance.OSU,
    ) -> None:
        for line in lines:
            if line.is_trivia:
                self._rows.append(Row.trivia(line, provenance))
            else:
                entry = parse_line(line, self.parse_entry)
                self._rows.append(Row.from_line(entry, line, provenance))

    def _entry_rows(self) -> List[int]:
        return [i for i, row in enumerate(self._rows) if not row.is_trivia]

    def _row_index(self, index: int) -> int:
        entries = self._entry_rows()
        try:
            return entries[index]
        except IndexError:
            raise IndexError(f"{self.NAME} index out of range : {index}") from None

    def __len__(self) -> int:
        return len(self._entry_rows())

    @overload
    def __getitem__(self, index: int) -> T:
        ...

    @overload
    def __getitem__(self, index: slice) -> List[T]:
        ...

    def __getitem__(self, index: Union[int, slice]) -> Union[T, List[T]]:
        if isinstance(index, slice):
            return [self._rows[i].value for i in self._entry_rows()[index]]
        return self._rows[self._row_index(index)].value  # type: ignore[no-any-return]

    def __setitem__(self, index: Any, value: Any) -> None:
        if isinstance(index, slice):
            raise TypeError(f"{self.NAME} does not support slice assignment")
        row = self._rows[self._row_index(index)]
        row.value = self.validated(value)
        row.text = None
        if row.provenance is Provenance.OSU:
            self.native = True

    def __delitem__(self, index: Any) -> None:
        if isinstance(index, slice):
            for i in reversed(self._entry_rows()[index]):
                del self._rows[i]
        else:
            del self._rows[self._row_index(index)]

    def insert(self, index: int, value: T) -> None:
        row = Row(self.validated(value), provenance=self.default_provenance)
        entries = self._entry_rows()
        if index < 0:
            index = max(0, len(entries) + index)
        if index < len(entries):
            self._rows.insert(entries[index], row)
        else:
            self._rows.insert(self._insertion_point(row.provenance), row)
        if row.provenance is Provenance.OSU:
            self.native = True

    def provenance(self, index: int) -> Provenance:
        return self._rows[self._row_index(index)].provenance
