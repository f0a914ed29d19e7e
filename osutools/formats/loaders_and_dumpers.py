from typing import Dict

from osutools.osb import dump_osb, load_osb
from osutools.osu_file import dump_osu, load_osu

from .enum import Format
from .typing import Dumper, Loader

LOADERS: Dict[Format, Loader] = {
    Format.OSU: load_osu,
    Format.OSB: load_osb,
}

DUMPERS: Dict[Format, Dumper] = {
    Format.OSU: dump_osu,
    Format.OSB: dump_osb,
}
