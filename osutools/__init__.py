"""
Parse and write osu! beatmaps (.osu) and storyboards (.osb) without losing a
single byte of the original text
"""
from .diagnostics import (
    Diagnostic,
    DiagnosticKind,
    NotApplicableError,
    OsuParseError,
    Severity,
    Span,
    UnknownKeyWarning,
)
from .osb import Osb, dump_osb, load_osb
from .osu_file import OsuFile, dump_osu, load_osu
from .versioning import LATEST_VERSION, MIN_VERSION, NOT_APPLICABLE
