"""Storyboard files (.osb) shared by every difficulty of a beatmapset

They have no version header and only two sections this library reads :
[Variables] and [Events]. Anything else is kept verbatim."""

from __future__ import annotations

from typing import List, Optional, cast

from osutools.document import Document, VerbatimSection, emit, render
from osutools.lines import SourceLine, Token, split_lines
from osutools.sections.base import Provenance, Section
from osutools.sections.events import Events
from osutools.sections.variables import Variables
from osutools.versioning import LATEST_VERSION


class Osb(Document):
    SECTION_TYPES = {
        Variables.NAME: Variables,
        Events.NAME: Events,
    }
    PROVENANCE = Provenance.OSB

    @property
    def variables(self) -> Optional[Variables]:
        return cast(Optional[Variables], self.section(Variables.NAME))

    @property
    def events(self) -> Optional[Events]:
        return cast(Optional[Events], self.section(Events.NAME))

    def _new_section(self, name: str) -> Section:
        section = super()._new_section(name)
        if isinstance(section, Events):
            section.allow_variables = True
        return section

    def _unknown_section(
        self, name: Token, header: SourceLine, body: List[SourceLine]
    ) -> Section:
        section, _ = VerbatimSection.parse(
            header, body, self.version, provenance=self.PROVENANCE
        )
        return section

    def to_string(self) -> str:
        return render(self.chunks(self.version), self.newline)


def load_osb(
    text: str, *, version: int = LATEST_VERSION, emit_warnings: bool = True
) -> Osb:
    """.osb files don't say which version they follow, `version` is the one of
    the beatmap they go with"""
    osb = Osb(version)
    lines = split_lines(text)
    if lines[0].ending:
        osb.newline = lines[0].ending
    osb._read(lines)
    if emit_warnings:
        emit(osb.warnings)
    return osb


def dump_osb(osb: Osb) -> str:
    return osb.to_string()
