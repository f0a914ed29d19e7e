from __future__ import annotations

import re
from typing import Any, Optional

from osutools.common import ColourCodec
from osutools.sections.key_value import KeyValueSection
from osutools.versioning import VersionedField, simple_field

COMBO_KEY = re.compile(r"Combo\d+")

COMBO_COLOUR = simple_field("Combo<N>", ColourCodec())

FIELDS = {
    f.name: f
    for f in [
        simple_field("SliderTrackOverride", ColourCodec()),
        simple_field("SliderBorder", ColourCodec()),
    ]
}


class Colours(KeyValueSection):
    NAME = "Colours"
    FIELDS = FIELDS
    SEPARATOR = " : "

    def field_for(self, key: str) -> Optional[VersionedField[Any]]:
        if COMBO_KEY.fullmatch(key):
            return COMBO_COLOUR
        return super().field_for(key)
