from __future__ import annotations

from decimal import Decimal

from osutools.codecs import DecimalNumber
from osutools.sections.key_value import KeyValueSection
from osutools.versioning import Rule, VersionedField, between, simple_field, since

FIELDS = {
    f.name: f
    for f in [
        simple_field("HPDrainRate", DecimalNumber(), Decimal(5)),
        simple_field("CircleSize", DecimalNumber(), Decimal(5)),
        simple_field("OverallDifficulty", DecimalNumber(), Decimal(5)),
        # Before v8 the approach rate was the overall difficulty
        VersionedField(
            "ApproachRate",
            Rule(between(3, 7)),
            Rule(since(8), DecimalNumber(), Decimal(5)),
        ),
        VersionedField(
            "SliderMultiplier",
            Rule(between(3, 4), DecimalNumber(), Decimal(1)),
            Rule(since(5), DecimalNumber(), Decimal("1.4")),
        ),
        simple_field("SliderTickRate", DecimalNumber(), Decimal(1)),
    ]
}


class Difficulty(KeyValueSection):
    NAME = "Difficulty"
    FIELDS = FIELDS
    SEPARATOR = ":"
