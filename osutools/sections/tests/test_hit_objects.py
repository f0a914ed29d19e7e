from decimal import Decimal

import pytest
from hypothesis import given

from osutools import OsuParseError, load_osu
from osutools.common import HitSound, Position, SampleSet
from osutools.diagnostics import DiagnosticKind
from osutools.testutils import strategies as osst
from osutools.testutils.samples import MANIA_HOLDS

from ..hit_objects import (
    Circle,
    EdgeSet,
    HitObject,
    HitSample,
    Hold,
    Slider,
    Spinner,
    parse_hit_object,
)
from ..slider_path import CurveType, SliderPath


def hit_objects_file(*lines: str) -> str:
    return "osu file format v14\n\n[HitObjects]\n" + "\n".join(lines) + "\n"


def first_error(text: str) -> OsuParseError:
    with pytest.raises(OsuParseError) as excinfo:
        load_osu(text)
    return excinfo.value


def test_circle() -> None:
    expected = Circle(
        Position(256, 192),
        1000,
        hit_sound=HitSound.WHISTLE,
        new_combo=True,
        hit_sample=HitSample(),
    )
    assert parse_hit_object("256,192,1000,5,2,0:0:0:0:") == expected


def test_missing_hit_sample_falls_back_to_defaults() -> None:
    circle = parse_hit_object("300,100,2000,1,0")
    assert circle.hit_sample is None
    assert circle.sample == HitSample(SampleSet.DEFAULT, SampleSet.DEFAULT, 0, 0, "")


def test_combo_skip() -> None:
    circle = parse_hit_object("0,0,0,53,0")
    assert circle.new_combo
    assert circle.combo_skip == 3
    assert circle.type_bits == 53


def test_slider() -> None:
    slider = parse_hit_object(
        "100,100,1500,2,2,B|200:200|250:200|250:200|300:150,2,150,2|0|0,"
        "0:0|0:0|1:2,0:0:0:0:"
    )
    assert isinstance(slider, Slider)
    assert slider.path == SliderPath(
        CurveType.BEZIER,
        (
            Position(200, 200),
            Position(250, 200),
            Position(250, 200),
            Position(300, 150),
        ),
    )
    assert slider.slides == 2
    assert slider.length == Decimal(150)
    assert slider.edge_sounds == (HitSound.WHISTLE, HitSound.NONE, HitSound.NONE)
    assert slider.edge_sets == (
        EdgeSet(),
        EdgeSet(),
        EdgeSet(SampleSet.NORMAL, SampleSet.SOFT),
    )
    assert slider.hit_sample == HitSample()


def test_slider_without_extras() -> None:
    slider = parse_hit_object("128,64,900,2,0,L|256:64,1,140")
    assert isinstance(slider, Slider)
    assert slider.edge_sounds is None
    assert slider.edge_sets is None
    assert slider.hit_sample is None
    assert slider.dump() == "128,64,900,2,0,L|256:64,1,140"


def test_spinner() -> None:
    spinner = parse_hit_object("256,192,3000,12,0,5000,0:0:0:0:")
    assert spinner == Spinner(
        Position(256, 192), 3000, 5000, new_combo=True, hit_sample=HitSample()
    )


def test_hold_notes_put_the_hit_sample_after_the_end_time() -> None:
    osu = load_osu(MANIA_HOLDS)
    assert osu.hit_objects is not None
    first, second, third = osu.hit_objects
    assert first == Hold(Position(64, 192), 1000, 1500, hit_sample=HitSample())
    assert second == Hold(
        Position(192, 192),
        1200,
        1800,
        hit_sound=HitSound.WHISTLE,
        hit_sample=HitSample(SampleSet.NORMAL, SampleSet.SOFT, 0, 70, "hold.wav"),
    )
    assert third.hit_sample is None
    assert osu.to_string() == MANIA_HOLDS


def test_hit_sample_filename_keeps_its_colons() -> None:
    circle = parse_hit_object("0,0,0,1,0,1:2:3:40:a:b.wav")
    assert circle.hit_sample == HitSample(
        SampleSet.NORMAL, SampleSet.SOFT, 3, 40, "a:b.wav"
    )


@pytest.mark.parametrize("type_", ["3", "10", "131"])
def test_several_object_kinds_is_an_error_at_the_type_column(type_: str) -> None:
    line = f"256,192,1000,{type_},0"
    error = first_error(hit_objects_file(line))
    assert error.kind is DiagnosticKind.AMBIGUOUS_HIT_OBJECT_TYPE
    assert error.span.line == 4
    assert error.span.start == 13
    assert error.diagnostic.snippet[error.span.start : error.span.end] == type_


def test_no_object_kind_is_an_error() -> None:
    error = first_error(hit_objects_file("256,192,1000,4,0"))
    assert error.kind is DiagnosticKind.AMBIGUOUS_HIT_OBJECT_TYPE


def test_unknown_type_bits() -> None:
    error = first_error(hit_objects_file("256,192,1000,257,0"))
    assert error.kind is DiagnosticKind.INVALID_VALUE


def test_slider_path_errors_point_inside_the_line() -> None:
    error = first_error(hit_objects_file("100,100,1500,2,0,X|1:2,1,100"))
    assert error.kind is DiagnosticKind.MALFORMED_SLIDER_PATH
    assert (error.span.start, error.span.end) == (17, 18)


def test_truncated_slider_path() -> None:
    line = "100,100,1500,2,0,B|1:2|3,1,100"
    error = first_error(hit_objects_file(line))
    assert error.kind is DiagnosticKind.MALFORMED_SLIDER_PATH
    assert 17 <= error.span.start < line.index(",1,100")


def test_missing_fields() -> None:
    line = "100,100"
    error = first_error(hit_objects_file(line))
    assert error.kind is DiagnosticKind.MISSING_FIELD
    assert error.span.start == len(line)


def test_extra_fields() -> None:
    line = "1,1,1,1,0,0:0:0:0:,extra"
    error = first_error(hit_objects_file(line))
    assert error.kind is DiagnosticKind.UNEXPECTED_FIELD
    assert line[error.span.start : error.span.end] == "extra"


def test_invalid_number() -> None:
    error = first_error(hit_objects_file("1,abc,1,1,0"))
    assert error.kind is DiagnosticKind.INVALID_NUMBER
    assert (error.span.start, error.span.end) == (2, 5)


def test_slider_edge_fields_cannot_be_skipped() -> None:
    path = SliderPath(CurveType.LINEAR, (Position(1, 1),))
    with pytest.raises(ValueError):
        Slider(Position(0, 0), 0, path, edge_sets=(EdgeSet(),))


def test_replacing_an_object_only_rewrites_its_line() -> None:
    text = hit_objects_file("256,192,1000,1,0", "  300,100,2000,1,0  ", "1,1,1,1,0")
    osu = load_osu(text)
    assert osu.hit_objects is not None
    osu.hit_objects[0] = Circle(Position(0, 0), 500)
    assert osu.to_string() == hit_objects_file(
        "0,0,500,1,0", "  300,100,2000,1,0  ", "1,1,1,1,0"
    )


def test_appended_objects_go_before_the_trailing_blank_lines() -> None:
    osu = load_osu("osu file format v14\n\n[HitObjects]\n1,1,1,1,0\n\n")
    assert osu.hit_objects is not None
    osu.hit_objects.append(Spinner(Position(256, 192), 10, 20))
    assert osu.to_string() == (
        "osu file format v14\n\n[HitObjects]\n1,1,1,1,0\n256,192,10,8,0,20\n\n"
    )


def test_only_hit_objects_can_be_added() -> None:
    osu = load_osu(hit_objects_file("1,1,1,1,0"))
    assert osu.hit_objects is not None
    with pytest.raises(TypeError):
        osu.hit_objects.append("1,1,1,1,0")  # type: ignore[arg-type]


@given(osst.hit_object())
def test_that_canonical_text_reads_back_the_same(hit_object: HitObject) -> None:
    assert parse_hit_object(hit_object.dump()) == hit_object
