"""[TimingPoints]

    time,beatLength,meter,sampleSet,sampleIndex,volume,uninherited,effects

Older versions only write a prefix of these fields. The sign of beatLength
tells the two kinds of timing points apart : positive (or zero) means an
uninherited point that sets the tempo, negative means an inherited point
that scales the slider velocity by -100 / beatLength. When the line also has
an explicit uninherited flag it has to agree with the sign."""

from __future__ import annotations

from dataclasses import astuple, dataclass, fields
from decimal import Decimal
from enum import IntFlag
from typing import List, Optional

from osutools.codecs import (
    IntEnumCodec,
    ZeroOneBool,
    format_decimal,
    parse_decimal,
    parse_int,
)
from osutools.common import SampleSet
from osutools.diagnostics import DiagnosticKind, FieldError
from osutools.lines import check_field_count, split_tokens
from osutools.sections.base import EntrySection
from osutools.versioning import LATEST_VERSION, VersionTable, only, since

# How many fields a timing point line has in each version, lines always have
# exactly that many
LAYOUTS: VersionTable[int] = VersionTable(
    "timing point layout",
    (only(3), 2),
    (only(4), 5),
    (only(5), 6),
    (since(6), 8),
)


class Effects(IntFlag):
    NONE = 0
    KIAI = 1
    OMIT_FIRST_BARLINE = 8


@dataclass(frozen=True)
class TimingPoint:
    time: Decimal
    beat_length: Decimal
    meter: int = 4
    sample_set: SampleSet = SampleSet.NORMAL
    sample_index: int = 1
    volume: int = 100
    effects: Effects = Effects.NONE

    def __post_init__(self) -> None:
        if not 0 <= self.volume <= 100:
            raise ValueError(f"volume out of [0, 100] range : {self.volume}")
        if self.sample_index < 0:
            raise ValueError(f"Negative sample index : {self.sample_index}")

    @property
    def uninherited(self) -> bool:
        return self.beat_length >= 0

    @property
    def inherited(self) -> bool:
        return not self.uninherited

    @property
    def sv_multiplier(self) -> Optional[Decimal]:
        """Slider velocity multiplier of an inherited point"""
        if self.uninherited:
            return None
        return Decimal(-100) / Decimal(self.beat_length)

    @property
    def bpm(self) -> Optional[Decimal]:
        if self.inherited or self.beat_length == 0:
            return None
        return Decimal(60000) / Decimal(self.beat_length)

    @property
    def kiai(self) -> bool:
        return bool(self.effects & Effects.KIAI)

    @property
    def omit_first_barline(self) -> bool:
        return bool(self.effects & Effects.OMIT_FIRST_BARLINE)

    def dump(self, version: int) -> Optional[str]:
        """None if this point uses fields the version doesn't have"""
        layout = LAYOUTS[version]
        defaults = [f.default for f in fields(self)]
        for i, value in enumerate(astuple(self)):
            # uninherited is not stored, the effects field is the 8th one
            position = i + 1 if i == 6 else i
            if position >= layout and value != defaults[i]:
                return None

        parts = [
            format_decimal(self.time),
            format_decimal(self.beat_length),
            str(self.meter),
            str(int(self.sample_set)),
            str(self.sample_index),
            str(self.volume),
            "1" if self.uninherited else "0",
            str(int(self.effects)),
        ]
        return ",".join(parts[:layout])


sample_set_codec = IntEnumCodec(SampleSet)


def parse_timing_point(text: str, version: int = LATEST_VERSION) -> TimingPoint:
    tokens = split_tokens(text)
    layout = LAYOUTS[version]
    check_field_count(text, tokens, layout, layout, f"v{version} timing point")

    time = tokens[0].parse(parse_decimal)
    beat_length = tokens[1].parse(parse_decimal)
    point = TimingPoint(time, beat_length)
    values: List[object] = list(astuple(point))
    parsers = [
        lambda s: parse_int(s, 0),
        sample_set_codec.parse,
        lambda s: parse_int(s, 0),
        lambda s: parse_int(s, 0, 100),
    ]
    for i, (token, parser) in enumerate(zip(tokens[2:6], parsers), start=2):
        values[i] = token.parse(parser)

    if len(tokens) > 6:
        flag = tokens[6].parse(ZeroOneBool().parse)
        if flag != point.uninherited:
            stripped = tokens[6].strip()
            kind = "uninherited" if flag else "inherited"
            raise FieldError(
                DiagnosticKind.INHERITED_FLAG_MISMATCH,
                f"The point is marked as {kind} but its beat length is "
                f"{beat_length}",
                stripped.start,
                stripped.end,
            )
    if len(tokens) > 7:
        values[6] = Effects(tokens[7].parse(lambda s: parse_int(s, 0)))

    return TimingPoint(*values)  # type: ignore[arg-type]


class TimingPoints(EntrySection[TimingPoint]):
    NAME = "TimingPoints"

    def parse_entry(self, text: str) -> TimingPoint:
        return parse_timing_point(text, self.version)

    def format_entry(self, entry: TimingPoint, version: int) -> Optional[str]:
        if not isinstance(entry, TimingPoint):
            raise TypeError(f"Expected a TimingPoint, got {entry!r}")
        return entry.dump(version)
