"""
One module per [Section] of .osu and .osb files
"""
from .base import EntrySection, Provenance, Section
from .colours import Colours
from .difficulty import Difficulty
from .editor import Editor
from .events import Events
from .general import General
from .hit_objects import HitObjects
from .key_value import KeyValueSection, Setting
from .metadata import Metadata
from .timing_points import TimingPoints
from .variables import Variables
