from decimal import Decimal

import pytest
from hypothesis import given
from hypothesis import strategies as st

from osutools import OsuParseError, load_osu
from osutools.common import SampleSet
from osutools.diagnostics import DiagnosticKind, FieldError
from osutools.testutils import strategies as osst

from ..timing_points import Effects, TimingPoint, parse_timing_point


def test_uninherited_point() -> None:
    point = parse_timing_point("1000,500,4,1,0,100,1,0")
    assert point.uninherited
    assert point.bpm == 120
    assert point.sv_multiplier is None
    assert point.sample_set is SampleSet.NORMAL
    assert point.sample_index == 0


def test_negative_beat_length_makes_an_inherited_point() -> None:
    point = parse_timing_point("2000,-50,4,2,1,60,0,1")
    assert point.inherited
    assert point.sv_multiplier == 2
    assert point.bpm is None
    assert point.kiai


def test_unknown_effect_bits_are_kept() -> None:
    point = parse_timing_point("0,500,4,1,0,100,1,9")
    assert point.kiai
    assert point.omit_first_barline
    assert point.dump(14) == "0,500,4,1,0,100,1,9"


def test_old_layouts_use_defaults() -> None:
    point = parse_timing_point("500,400", 3)
    assert point == TimingPoint(Decimal(500), Decimal(400))
    assert point.dump(14) == "500,400,4,1,1,100,1,0"


def test_flag_disagreeing_with_the_beat_length() -> None:
    text = "osu file format v14\n[TimingPoints]\n1000,-50,4,1,0,100,1,0\n"
    with pytest.raises(OsuParseError) as excinfo:
        load_osu(text)
    error = excinfo.value
    assert error.kind is DiagnosticKind.INHERITED_FLAG_MISMATCH
    assert error.span.line == 3
    assert (error.span.start, error.span.end) == (19, 20)


@pytest.mark.parametrize(
    "version, text",
    [
        (3, "0,500"),
        (4, "0,500,4,1,0"),
        (5, "0,500,4,1,0,100"),
        (6, "0,500,4,1,0,100,1,0"),
        (14, "0,500,4,1,0,100,1,0"),
    ],
)
def test_each_version_has_its_own_layout(version: int, text: str) -> None:
    point = parse_timing_point(text, version)
    assert point.dump(version) == text


def test_fields_from_newer_versions_are_rejected() -> None:
    text = "osu file format v4\n\n[TimingPoints]\n0,500,4,1,0,100,1,1\n"
    with pytest.raises(OsuParseError) as excinfo:
        load_osu(text)
    error = excinfo.value
    assert error.kind is DiagnosticKind.UNEXPECTED_FIELD
    assert error.span.line == 4
    assert (error.span.start, error.span.end) == (12, 19)


def test_short_lines_are_rejected_in_newer_versions() -> None:
    text = "osu file format v14\n\n[TimingPoints]\n0,500\n"
    with pytest.raises(OsuParseError) as excinfo:
        load_osu(text)
    error = excinfo.value
    assert error.kind is DiagnosticKind.MISSING_FIELD
    assert error.span.line == 4
    assert error.span.start == 5


@pytest.mark.parametrize(
    "text, kind",
    [
        ("1000", DiagnosticKind.MISSING_FIELD),
        ("1000,500,4,1,0,100,1,0,7", DiagnosticKind.UNEXPECTED_FIELD),
        ("1000,fast,4,1,0,100,1,0", DiagnosticKind.INVALID_NUMBER),
        ("1000,500,4,1,0,101,1,0", DiagnosticKind.INVALID_VALUE),
        ("1000,500,4,9,0,100,1,0", DiagnosticKind.INVALID_ENUM_VARIANT),
        ("1000,500,4,1,0,100,2,0", DiagnosticKind.INVALID_ENUM_VARIANT),
    ],
)
def test_invalid_points(text: str, kind: DiagnosticKind) -> None:
    with pytest.raises(FieldError) as excinfo:
        parse_timing_point(text)
    assert excinfo.value.kind is kind


def test_fields_missing_from_a_version_must_stay_default() -> None:
    kiai = TimingPoint(Decimal(0), Decimal(500), effects=Effects.KIAI)
    assert kiai.dump(5) is None
    assert kiai.dump(6) == "0,500,4,1,1,100,1,1"
    quiet = TimingPoint(Decimal(0), Decimal(500), volume=20)
    assert quiet.dump(4) is None
    assert quiet.dump(5) == "0,500,4,1,1,20"
    assert TimingPoint(Decimal(0), Decimal(500), meter=3).dump(3) is None


@given(st.data())
def test_that_points_read_back_the_same_in_every_version(data: st.DataObject) -> None:
    version = data.draw(st.integers(min_value=3, max_value=16))
    point = data.draw(osst.timing_point(version))
    text = point.dump(version)
    assert text is not None
    assert parse_timing_point(text, version) == point
