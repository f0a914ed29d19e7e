from osutools.diagnostics import FieldError
from osutools.document import (
    is_section_header,
    parse_file_header,
    parse_section_header,
)
from osutools.lines import split_lines
from osutools.osb import Osb

from .enum import Format


def guess_format(text: str) -> Format:
    lines = split_lines(text)
    if looks_like_osu(lines[0].text):
        return Format.OSU

    for line in lines:
        if not is_section_header(line):
            continue
        try:
            name = parse_section_header(line.text)
        except FieldError:
            continue
        if name.text in Osb.SECTION_TYPES:
            return Format.OSB

    raise ValueError("Unrecognized file format")


def looks_like_osu(first_line: str) -> bool:
    try:
        parse_file_header(first_line)
    except FieldError:
        return False
    return True
