from decimal import Decimal
from typing import cast

import pytest

from osutools import (
    NotApplicableError,
    OsuFile,
    OsuParseError,
    UnknownKeyWarning,
    dump_osu,
    load_osu,
)
from osutools.diagnostics import DiagnosticKind
from osutools.sections.general import General
from osutools.testutils.samples import MANIA_HOLDS, V3_BEATMAP, V14_BEATMAP


def load_error(text: str) -> OsuParseError:
    with pytest.raises(OsuParseError) as excinfo:
        load_osu(text, emit_warnings=False)
    return excinfo.value


def test_minimal_beatmap() -> None:
    text = "osu file format v14\n[General]\nAudioFilename: test.mp3\n"
    osu = load_osu(text)
    assert osu.version == 14
    assert osu.general is not None
    assert dict(osu.general) == {"AudioFilename": "test.mp3"}
    assert osu.section_names == ["General"]
    for absent in (
        osu.editor,
        osu.metadata,
        osu.difficulty,
        osu.events,
        osu.timing_points,
        osu.colours,
        osu.hit_objects,
    ):
        assert absent is None
    assert osu.to_string() == text
    assert osu.to_string(14) == text


@pytest.mark.parametrize("text", [V14_BEATMAP, MANIA_HOLDS, V3_BEATMAP])
def test_that_untouched_files_are_written_back_identically(text: str) -> None:
    osu = load_osu(text, emit_warnings=False)
    assert osu.to_string() == text
    assert dump_osu(osu) == text


@pytest.mark.parametrize("text", [V14_BEATMAP, MANIA_HOLDS, V3_BEATMAP])
def test_that_reading_what_was_written_gives_the_same_document(text: str) -> None:
    osu = load_osu(text, emit_warnings=False)
    assert load_osu(osu.to_string(), emit_warnings=False) == osu


def test_sample_beatmap_contents() -> None:
    osu = load_osu(V14_BEATMAP)
    assert osu.newline == "\r\n"
    assert osu.warnings == []
    assert osu.hit_objects is not None and len(osu.hit_objects) == 4
    assert osu.timing_points is not None
    assert osu.timing_points[1].sv_multiplier == 2
    assert osu.timing_points[0].time == Decimal(1000)


def test_byte_order_mark_and_odd_whitespace_are_kept() -> None:
    text = "\ufeffosu file format v14  \r\n\r\n[General]  \r\n  Mode:3\r\n"
    osu = load_osu(text)
    assert osu.version == 14
    assert osu.to_string() == text


@pytest.mark.parametrize(
    "text, span",
    [
        ("", (1, 0, 0)),
        ("osu file format\n", (1, 0, 15)),
        ("osu file format v2\n", (1, 17, 18)),
    ],
)
def test_invalid_version_header(text: str, span: tuple) -> None:
    error = load_error(text)
    assert error.kind is DiagnosticKind.VERSION_HEADER_INVALID
    assert (error.span.line, error.span.start, error.span.end) == span


@pytest.mark.parametrize(
    "lines, kind, span",
    [
        (["[Fruits]"], DiagnosticKind.UNKNOWN_SECTION, (3, 1, 7)),
        (["[Variables]"], DiagnosticKind.UNKNOWN_SECTION, (3, 1, 10)),
        (["[General]", "[General]"], DiagnosticKind.DUPLICATE_SECTION, (4, 1, 8)),
        (["[General"], DiagnosticKind.UNTERMINATED_BLOCK, (3, 0, 8)),
        (["Mode: 0", "[General]"], DiagnosticKind.CONTENT_OUTSIDE_SECTION, (3, 0, 7)),
    ],
)
def test_document_structure_errors(
    lines: list, kind: DiagnosticKind, span: tuple
) -> None:
    error = load_error("osu file format v14\n\n" + "\n".join(lines) + "\n")
    assert error.kind is kind
    assert (error.span.line, error.span.start, error.span.end) == span


def test_every_broken_section_is_reported() -> None:
    text = "\n".join(
        [
            "osu file format v14",
            "[General]",
            "Mode: 9",
            "Mystery: 1",
            "[HitObjects]",
            "1,1,1,1,0",
            "1,1,1,3,0",
            "",
        ]
    )
    error = load_error(text)
    assert [d.kind for d in error.diagnostics] == [
        DiagnosticKind.INVALID_ENUM_VARIANT,
        DiagnosticKind.AMBIGUOUS_HIT_OBJECT_TYPE,
    ]
    assert [d.span.line for d in error.diagnostics] == [3, 7]
    assert "line 7, column 7" in str(error)


def test_warnings_found_before_an_error_are_kept() -> None:
    text = "osu file format v14\n[General]\nMystery: 1\n[HitObjects]\n1,1,1,3,0\n"
    error = load_error(text)
    (warning,) = error.warnings
    assert warning.kind is DiagnosticKind.UNKNOWN_KEY


def test_warnings_can_be_silenced(recwarn: pytest.WarningsRecorder) -> None:
    osu = load_osu(
        "osu file format v14\n[General]\nMystery: 1\n", emit_warnings=False
    )
    assert len(recwarn) == 0
    assert len(osu.warnings) == 1
    with pytest.warns(UnknownKeyWarning):
        load_osu("osu file format v14\n[General]\nMystery: 1\n")


def test_strict_mode() -> None:
    with pytest.raises(OsuParseError):
        load_osu("osu file format v14\n[Editor]\nMystery: 1\n", strict=True)


def test_new_document() -> None:
    osu = OsuFile()
    assert osu.version == 14
    osu.add_section("HitObjects")
    general = cast(General, osu.add_section("General"))
    general["AudioFilename"] = "a.mp3"
    osu.add_section("Metadata")
    assert osu.section_names == ["General", "Metadata", "HitObjects"]
    assert osu.to_string() == "\r\n".join(
        [
            "osu file format v14",
            "",
            "[General]",
            "AudioFilename: a.mp3",
            "",
            "[Metadata]",
            "",
            "[HitObjects]",
            "",
            "",
        ]
    )
    with pytest.raises(ValueError):
        osu.add_section("General")
    with pytest.raises(ValueError):
        osu.add_section("Fruits")


def test_new_lines_use_the_document_line_endings() -> None:
    osu = load_osu(MANIA_HOLDS)
    assert osu.general is not None
    osu.general["AudioFilename"] = "mania.mp3"
    assert osu.to_string() == MANIA_HOLDS.replace(
        "Mode: 3\n", "Mode: 3\nAudioFilename: mania.mp3\n"
    )


def test_removing_a_section() -> None:
    osu = load_osu(V14_BEATMAP)
    osu.remove_section("Colours")
    assert osu.colours is None
    assert "[Colours]" not in osu.to_string()
    with pytest.raises(KeyError):
        osu.remove_section("Colours")


def test_version_is_read_only() -> None:
    osu = load_osu(V14_BEATMAP)
    with pytest.raises(AttributeError):
        osu.version = 3  # type: ignore[misc]


def test_equality() -> None:
    a = load_osu(V14_BEATMAP)
    b = load_osu(V14_BEATMAP)
    assert a == b
    assert a.general is not None
    a.general["AudioLeadIn"] = 100
    assert a != b


def test_writing_an_older_beatmap_as_the_latest_version() -> None:
    osu = load_osu(V3_BEATMAP)
    converted = osu.to_string(14)
    assert converted == "\r\n".join(
        [
            "osu file format v14",
            "",
            "[General]",
            "AudioFilename: old.mp3",
            "",
            "[Metadata]",
            "Title:Old Song",
            "",
            "[Difficulty]",
            "HPDrainRate:3",
            "CircleSize:4",
            "OverallDifficulty:3",
            "SliderMultiplier:1",
            "",
            "[Events]",
            "2,5000,9000",
            "",
            "[TimingPoints]",
            "500,400,4,1,1,100,1,0",
            "",
            "[HitObjects]",
            "64,64,500,1,0",
            "128,64,900,2,0,L|256:64,1,140",
            "",
        ]
    )
    assert load_osu(converted).version == 14
    # the document itself is left untouched
    assert osu.to_string() == V3_BEATMAP


def test_values_older_versions_cannot_hold() -> None:
    osu = load_osu(V14_BEATMAP)
    with pytest.raises(NotApplicableError):
        osu.to_string(5)
    with pytest.raises(ValueError):
        osu.to_string(2)
