from __future__ import annotations

from osutools.codecs import DecimalNumber, Integer, Separated
from osutools.sections.key_value import KeyValueSection
from osutools.versioning import simple_field

FIELDS = {
    f.name: f
    for f in [
        simple_field("Bookmarks", Separated(Integer(), ",")),
        simple_field("DistanceSpacing", DecimalNumber()),
        simple_field("BeatDivisor", Integer()),
        simple_field("GridSize", Integer()),
        simple_field("TimelineZoom", DecimalNumber()),
    ]
}


class Editor(KeyValueSection):
    NAME = "Editor"
    FIELDS = FIELDS
    SEPARATOR = ": "
