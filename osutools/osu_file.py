"""Beatmap files (.osu)

    osu file format v14

    [General]
    AudioFilename: audio.mp3
    ...

    [HitObjects]
    256,192,1000,1,0,0:0:0:0:

The first line gives the format version, every other line belongs to a
[Section]. Parsing keeps the exact text of everything it reads so that
`load_osu(text).to_string() == text` as long as nothing was changed."""

from __future__ import annotations

from itertools import chain
from typing import Optional, cast

from osutools.document import Document, emit, parse_file_header, render
from osutools.lines import split_lines
from osutools.osb import Osb, load_osb
from osutools.sections.base import Provenance, Row, Section, parse_line
from osutools.sections.colours import Colours
from osutools.sections.difficulty import Difficulty
from osutools.sections.editor import Editor
from osutools.sections.events import Events
from osutools.sections.general import General
from osutools.sections.hit_objects import HitObjects
from osutools.sections.metadata import Metadata
from osutools.sections.timing_points import TimingPoints
from osutools.sections.variables import Variables
from osutools.versioning import LATEST_VERSION, check_version


class OsuFile(Document):
    SECTION_TYPES = {
        section.NAME: section
        for section in (
            General,
            Editor,
            Metadata,
            Difficulty,
            Events,
            TimingPoints,
            Colours,
            HitObjects,
        )
    }

    def __init__(self, version: int = LATEST_VERSION) -> None:
        super().__init__(version)
        self.header = Row(text=f"osu file format v{self.version}")
        self.preamble = [Row(text="")]
        self._osb: Optional[Osb] = None

    @property
    def general(self) -> Optional[General]:
        return cast(Optional[General], self.section(General.NAME))

    @property
    def editor(self) -> Optional[Editor]:
        return cast(Optional[Editor], self.section(Editor.NAME))

    @property
    def metadata(self) -> Optional[Metadata]:
        return cast(Optional[Metadata], self.section(Metadata.NAME))

    @property
    def difficulty(self) -> Optional[Difficulty]:
        return cast(Optional[Difficulty], self.section(Difficulty.NAME))

    @property
    def events(self) -> Optional[Events]:
        return cast(Optional[Events], self.section(Events.NAME))

    @property
    def timing_points(self) -> Optional[TimingPoints]:
        return cast(Optional[TimingPoints], self.section(TimingPoints.NAME))

    @property
    def colours(self) -> Optional[Colours]:
        return cast(Optional[Colours], self.section(Colours.NAME))

    @property
    def hit_objects(self) -> Optional[HitObjects]:
        return cast(Optional[HitObjects], self.section(HitObjects.NAME))

    @property
    def variables(self) -> Optional[Variables]:
        """Only ever set by an appended .osb"""
        if self._osb is None:
            return None
        return self._osb.variables

    @property
    def has_osb(self) -> bool:
        return self._osb is not None

    def _includes(self, section: Section) -> bool:
        return section.native

    def to_string(self, version: Optional[int] = None) -> str:
        """Text of the beatmap without anything that came from an .osb. When
        asked for another version every entry is written again in its
        canonical form for that version"""
        if version is None or version == self.version:
            target = self.version
            header = self.header
        else:
            target = check_version(version)
            header = Row(text=f"osu file format v{target}", ending=self.header.ending)

        first_chunk = (header.text or "", header.ending)
        return render(chain([first_chunk], self.chunks(target)), self.newline)

    def append_osb(self, text: str, *, emit_warnings: bool = True) -> None:
        """Merge the storyboard of an .osb file into this beatmap. The merged
        events are marked as coming from the .osb, they are left out of
        to_string() and make up osb_to_string()"""
        if self._osb is not None:
            raise ValueError("An .osb file was already appended to this beatmap")

        osb = load_osb(text, version=self.version, emit_warnings=emit_warnings)
        if osb.events is not None:
            events = self.events
            if events is None:
                events = Events(self.version)
                events.native = False
                self._insert_section(Events.NAME, events)
            events._rows.extend(osb.events._rows)

        self.warnings.extend(osb.warnings)
        self._osb = osb

    def osb_to_string(self) -> str:
        """Text of the appended .osb, with any change made to its events
        through this beatmap"""
        if self._osb is None:
            raise ValueError("No .osb file was appended to this beatmap")

        osb = self._osb
        events = self.events
        chunks = []
        for row in osb.preamble:
            chunks.append((row.text or "", row.ending))
        for name, section in osb._sections.items():
            if name == Events.NAME and events is not None:
                chunks.extend(
                    events.chunks(self.version, Provenance.OSB, header=section.header)
                )
            else:
                chunks.extend(section.chunks(self.version, Provenance.OSB))
        return render(chunks, osb.newline)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, OsuFile):
            return NotImplemented
        return super().__eq__(other) and self.variables == other.variables


def load_osu(
    text: str, *, strict: bool = False, emit_warnings: bool = True
) -> OsuFile:
    """Raises OsuParseError listing the first error of every broken section.
    Unknown keys are kept and reported as warnings, or as errors when
    strict=True"""
    first_line, *lines = split_lines(text)
    version = parse_line(first_line, parse_file_header)
    osu = OsuFile(version)
    osu.header = Row(None, first_line.text, first_line.ending)
    if first_line.ending:
        osu.newline = first_line.ending
    osu._read(lines, strict=strict)
    if emit_warnings:
        emit(osu.warnings)
    return osu


def dump_osu(osu: OsuFile, *, version: Optional[int] = None) -> str:
    return osu.to_string(version)
