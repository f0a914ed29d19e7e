from __future__ import annotations

from decimal import Decimal
from enum import Enum, IntEnum

from osutools.codecs import (
    DecimalNumber,
    Integer,
    IntEnumCodec,
    Text,
    TokenCodec,
    ZeroOneBool,
)
from osutools.common import SampleSet
from osutools.sections.key_value import KeyValueSection
from osutools.versioning import (
    Rule,
    VersionedField,
    between,
    only,
    simple_field,
    since,
)


class Countdown(IntEnum):
    NO_COUNTDOWN = 0
    NORMAL = 1
    HALF = 2
    DOUBLE = 3


class Mode(IntEnum):
    OSU = 0
    TAIKO = 1
    CATCH = 2
    MANIA = 3


class OverlayPosition(str, Enum):
    NO_CHANGE = "NoChange"
    BELOW = "Below"
    ABOVE = "Above"


SAMPLE_SET_TOKENS = {
    "Normal": SampleSet.NORMAL,
    "Soft": SampleSet.SOFT,
    "Drum": SampleSet.DRUM,
}

FIELDS = {
    f.name: f
    for f in [
        simple_field("AudioFilename", Text(), ""),
        simple_field("AudioLeadIn", Integer(), 0),
        VersionedField(
            "AudioHash",
            Rule(between(3, 13), Text()),
            Rule(since(14)),
        ),
        simple_field("PreviewTime", Integer(), -1),
        VersionedField(
            "Countdown",
            Rule(between(3, 4)),
            Rule(since(5), IntEnumCodec(Countdown), Countdown.NORMAL),
        ),
        VersionedField(
            "SampleSet",
            Rule(only(3)),
            Rule(
                between(4, 13),
                TokenCodec(
                    SampleSet, {**SAMPLE_SET_TOKENS, "None": SampleSet.DEFAULT}
                ),
                SampleSet.NORMAL,
            ),
            # "None" stopped being a thing, it's read as Normal
            Rule(
                since(14),
                TokenCodec(SampleSet, SAMPLE_SET_TOKENS, {"None": SampleSet.NORMAL}),
                SampleSet.NORMAL,
            ),
        ),
        simple_field("StackLeniency", DecimalNumber(), Decimal("0.7")),
        simple_field("Mode", IntEnumCodec(Mode), Mode.OSU),
        simple_field("LetterboxInBreaks", ZeroOneBool(), False),
        simple_field("StoryFireInFront", ZeroOneBool(), True),
        simple_field("UseSkinSprites", ZeroOneBool(), False),
        simple_field("AlwaysShowPlayfield", ZeroOneBool(), False),
        VersionedField(
            "OverlayPosition",
            Rule(between(3, 13)),
            Rule(
                since(14),
                TokenCodec.by_value(OverlayPosition),
                OverlayPosition.NO_CHANGE,
            ),
        ),
        simple_field("SkinPreference", Text(), ""),
        simple_field("EpilepsyWarning", ZeroOneBool(), False),
        simple_field("CountdownOffset", Integer(), 0),
        simple_field("SpecialStyle", ZeroOneBool(), False),
        simple_field("WidescreenStoryboard", ZeroOneBool(), False),
        simple_field("SamplesMatchPlaybackRate", ZeroOneBool(), False),
    ]
}


class General(KeyValueSection):
    NAME = "General"
    FIELDS = FIELDS
    SEPARATOR = ": "
