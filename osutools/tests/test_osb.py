from dataclasses import replace
from decimal import Decimal

import pytest

from osutools import Osb, OsuParseError, dump_osb, load_osb, load_osu
from osutools.diagnostics import DiagnosticKind
from osutools.sections.base import Provenance
from osutools.sections.events import (
    Animation,
    Break,
    Layer,
    LoopType,
    Origin,
    Sample,
    Sprite,
    UnresolvedEvent,
)
from osutools.sections.storyboard import Command, CommandType, UnresolvedCommand
from osutools.sections.variables import Variable
from osutools.testutils.samples import MANIA_HOLDS, STORYBOARD, V14_BEATMAP


def test_storyboard_round_trip() -> None:
    osb = load_osb(STORYBOARD)
    assert osb.to_string() == STORYBOARD
    assert dump_osb(osb) == STORYBOARD
    assert load_osb(osb.to_string()) == osb


def test_storyboard_contents() -> None:
    osb = load_osb(STORYBOARD)
    assert osb.variables is not None
    assert osb.variables.as_dict() == {"pos": "320,240", "fade": "F,0"}
    assert osb.events is not None
    background, dot, cat, drum = osb.events
    assert background == Sprite(
        Layer.BACKGROUND,
        Origin.TOP_LEFT,
        "sb/bg.png",
        Decimal(0),
        Decimal(0),
        (Command(CommandType.FADE, 0, 0, 1000, (Decimal(0), Decimal(1))),),
    )
    assert dot == UnresolvedEvent(
        'Sprite,Foreground,Centre,"sb/dot.png",$pos',
        (
            UnresolvedCommand("$fade,100,200,1,0"),
            Command(CommandType.MOVE, 0, 0, None, (Decimal(320), Decimal(240))),
        ),
    )
    assert dot.type_token == "Sprite"
    assert isinstance(cat, Animation)
    assert cat.loop_type is LoopType.LOOP_ONCE
    assert len(cat.commands) == 1
    assert drum == Sample(1000, Layer.BACKGROUND, "sb/drum.wav", 80)


def test_malformed_variable() -> None:
    with pytest.raises(OsuParseError) as excinfo:
        load_osb("[Variables]\n$pos=1\npos=2\n")
    error = excinfo.value
    assert error.kind is DiagnosticKind.MALFORMED_VARIABLE
    assert error.span.line == 3


def test_unknown_sections_are_kept_verbatim() -> None:
    text = "[Custom]\nanything goes\n\n[Events]\nBreak,0,10\n"
    osb = load_osb(text)
    assert osb.section_names == ["Custom", "Events"]
    assert osb.to_string() == text


def test_new_storyboard() -> None:
    osb = Osb()
    variables = osb.add_section("Variables")
    variables.append(Variable("x", "1"))  # type: ignore[attr-defined]
    osb.newline = "\n"
    assert osb.to_string() == "[Variables]\n$x=1\n\n"


def test_appended_storyboard_stays_separate() -> None:
    osu = load_osu(V14_BEATMAP)
    osu.append_osb(STORYBOARD)
    assert osu.has_osb
    assert osu.to_string() == V14_BEATMAP
    assert osu.osb_to_string() == STORYBOARD
    assert osu.events is not None
    assert len(osu.events) == 7
    assert [osu.events.provenance(i) for i in (2, 3)] == [
        Provenance.OSU,
        Provenance.OSB,
    ]
    assert osu.variables is not None
    assert osu.variables.as_dict()["pos"] == "320,240"


def test_changes_to_storyboard_events_go_to_the_storyboard() -> None:
    osu = load_osu(V14_BEATMAP)
    osu.append_osb(STORYBOARD)
    assert osu.events is not None
    background = osu.events[3]
    osu.events[3] = replace(background, x=Decimal(10))
    osu.events.append(Break(40000, 41000))
    assert osu.osb_to_string() == STORYBOARD.replace(
        '"sb/bg.png",0,0', '"sb/bg.png",10,0'
    )
    assert osu.to_string() == V14_BEATMAP.replace(
        " C,0,0,100,255,255,255,255,0,0\r\n",
        " C,0,0,100,255,255,255,255,0,0\r\n2,40000,41000\r\n",
    )


def test_beatmaps_without_events_can_take_a_storyboard() -> None:
    osu = load_osu(MANIA_HOLDS)
    osu.append_osb(STORYBOARD)
    assert osu.events is not None
    assert len(osu.events) == 4
    assert osu.to_string() == MANIA_HOLDS
    assert osu.osb_to_string() == STORYBOARD


def test_storyboard_comparison() -> None:
    a = load_osu(V14_BEATMAP)
    b = load_osu(V14_BEATMAP)
    a.append_osb(STORYBOARD)
    assert a != b
    b.append_osb(STORYBOARD)
    assert a == b


def test_only_one_storyboard() -> None:
    osu = load_osu(V14_BEATMAP)
    with pytest.raises(ValueError):
        osu.osb_to_string()
    osu.append_osb(STORYBOARD)
    with pytest.raises(ValueError):
        osu.append_osb(STORYBOARD)
