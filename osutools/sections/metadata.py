from __future__ import annotations

from osutools.codecs import Integer, Separated, Text
from osutools.sections.key_value import KeyValueSection
from osutools.versioning import simple_field

FIELDS = {
    f.name: f
    for f in [
        simple_field("Title", Text()),
        simple_field("TitleUnicode", Text()),
        simple_field("Artist", Text()),
        simple_field("ArtistUnicode", Text()),
        simple_field("Creator", Text()),
        simple_field("Version", Text()),
        simple_field("Source", Text()),
        # space separated
        simple_field("Tags", Separated(Text(), None)),
        simple_field("BeatmapID", Integer()),
        simple_field("BeatmapSetID", Integer()),
    ]
}


class Metadata(KeyValueSection):
    NAME = "Metadata"
    FIELDS = FIELDS
    SEPARATOR = ":"
