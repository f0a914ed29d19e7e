"""
Hypothesis strategies to generate beatmap entries
"""

from decimal import Decimal
from typing import Optional, Tuple

import hypothesis.strategies as st

from osutools.common import Colour, HitSound, Position, SampleSet
from osutools.sections.events import (
    Animation,
    Background,
    Break,
    Layer,
    LoopType,
    Origin,
    Sample,
    Sprite,
    Video,
)
from osutools.sections.hit_objects import (
    Circle,
    EdgeSet,
    HitObject,
    HitSample,
    Hold,
    Slider,
    Spinner,
)
from osutools.sections.slider_path import CurveType, SliderPath
from osutools.sections.storyboard import (
    MAX_EASING,
    VALUE_RULES,
    AnyCommand,
    Command,
    CommandType,
    Loop,
    Parameter,
    Trigger,
    TriggerAddition,
    TriggerCondition,
    TriggerKind,
    TriggerSampleSet,
)
from osutools.sections.timing_points import LAYOUTS, Effects, TimingPoint
from osutools.versioning import LATEST_VERSION

times = st.integers(min_value=-10_000, max_value=600_000)
coordinates = st.integers(min_value=-512, max_value=1024)
file_names = st.text(
    alphabet="abcdefghijklmnopqrstuvwxyz0123456789_-./ ", min_size=1, max_size=20
).filter(lambda s: s.strip() == s)


def decimals(
    min_value: int = -10_000, max_value: int = 10_000, places: int = 3
) -> st.SearchStrategy[Decimal]:
    return st.decimals(
        min_value=min_value,
        max_value=max_value,
        places=places,
        allow_nan=False,
        allow_infinity=False,
    )


@st.composite
def position(draw: st.DrawFn) -> Position:
    return Position(draw(coordinates), draw(coordinates))


@st.composite
def hit_sample(draw: st.DrawFn) -> HitSample:
    return HitSample(
        normal_set=draw(st.sampled_from(SampleSet)),
        addition_set=draw(st.sampled_from(SampleSet)),
        index=draw(st.integers(min_value=0, max_value=100)),
        volume=draw(st.integers(min_value=0, max_value=100)),
        filename=draw(st.just("") | file_names.filter(lambda s: " " not in s)),
    )


hit_sounds = st.integers(min_value=0, max_value=15).map(HitSound)


@st.composite
def circle(draw: st.DrawFn) -> Circle:
    return Circle(
        position=draw(position()),
        time=draw(times),
        hit_sound=draw(hit_sounds),
        new_combo=draw(st.booleans()),
        combo_skip=draw(st.integers(min_value=0, max_value=7)),
        hit_sample=draw(st.none() | hit_sample()),
    )


@st.composite
def slider_path(draw: st.DrawFn) -> SliderPath:
    return SliderPath(
        curve_type=draw(st.sampled_from(CurveType)),
        points=tuple(draw(st.lists(position(), min_size=1, max_size=6))),
    )


@st.composite
def slider(draw: st.DrawFn) -> Slider:
    slides = draw(st.integers(min_value=1, max_value=10))
    # edge sounds, edge sets and the hit sample can only be left out from
    # the end of the line
    extras = draw(st.integers(min_value=0, max_value=3))
    edge_sounds: Optional[Tuple[HitSound, ...]] = None
    edge_sets: Optional[Tuple[EdgeSet, ...]] = None
    sample = None
    if extras > 0:
        edge_sounds = tuple(
            draw(st.lists(hit_sounds, min_size=slides + 1, max_size=slides + 1))
        )
    if extras > 1:
        edge_set = st.builds(
            EdgeSet, st.sampled_from(SampleSet), st.sampled_from(SampleSet)
        )
        edge_sets = tuple(
            draw(st.lists(edge_set, min_size=slides + 1, max_size=slides + 1))
        )
    if extras > 2:
        sample = draw(hit_sample())

    return Slider(
        position=draw(position()),
        time=draw(times),
        path=draw(slider_path()),
        slides=slides,
        length=draw(decimals(0, 5000)),
        hit_sound=draw(hit_sounds),
        new_combo=draw(st.booleans()),
        combo_skip=draw(st.integers(min_value=0, max_value=7)),
        edge_sounds=edge_sounds,
        edge_sets=edge_sets,
        hit_sample=sample,
    )


@st.composite
def spinner(draw: st.DrawFn) -> Spinner:
    start = draw(times)
    return Spinner(
        position=Position(256, 192),
        time=start,
        end_time=start + draw(st.integers(min_value=0, max_value=10_000)),
        hit_sound=draw(hit_sounds),
        new_combo=draw(st.booleans()),
        hit_sample=draw(st.none() | hit_sample()),
    )


@st.composite
def hold(draw: st.DrawFn) -> Hold:
    start = draw(times)
    return Hold(
        position=Position(draw(st.sampled_from([64, 192, 320, 448])), 192),
        time=start,
        end_time=start + draw(st.integers(min_value=0, max_value=10_000)),
        hit_sound=draw(hit_sounds),
        hit_sample=draw(st.none() | hit_sample()),
    )


def hit_object() -> st.SearchStrategy[HitObject]:
    return st.one_of(circle(), slider(), spinner(), hold())


@st.composite
def timing_point(draw: st.DrawFn, version: int = LATEST_VERSION) -> TimingPoint:
    """Only fills the fields that exist in `version`"""
    layout = LAYOUTS[version]
    point = TimingPoint(
        time=draw(decimals(-10_000, 600_000, places=2)),
        beat_length=draw(decimals(-1000, 5000)),
    )
    values = {
        "meter": draw(st.integers(min_value=1, max_value=16)),
        "sample_set": draw(st.sampled_from(SampleSet)),
        "sample_index": draw(st.integers(min_value=0, max_value=100)),
        "volume": draw(st.integers(min_value=0, max_value=100)),
        "effects": draw(st.sampled_from(Effects)),
    }
    positions = {
        "meter": 2,
        "sample_set": 3,
        "sample_index": 4,
        "volume": 5,
        "effects": 7,
    }
    return TimingPoint(
        point.time,
        point.beat_length,
        **{k: v for k, v in values.items() if positions[k] < layout},
    )


@st.composite
def command(draw: st.DrawFn) -> Command:
    type_ = draw(st.sampled_from(list(VALUE_RULES)))
    arity, _ = VALUE_RULES[type_]
    sets = draw(st.integers(min_value=1, max_value=2))
    if type_ is CommandType.COLOUR:
        value = st.integers(min_value=0, max_value=255)
    elif type_ is CommandType.PARAMETER:
        value = st.sampled_from(Parameter)
    else:
        value = decimals(-1000, 1000)
    count = arity * sets
    start = draw(times)
    return Command(
        type=type_,
        easing=draw(st.integers(min_value=0, max_value=MAX_EASING)),
        start_time=start,
        end_time=draw(st.none() | st.integers(min_value=start, max_value=start + 5000)),
        values=tuple(draw(st.lists(value, min_size=count, max_size=count))),
    )


@st.composite
def trigger_condition(draw: st.DrawFn) -> TriggerCondition:
    kind = draw(st.sampled_from(TriggerKind))
    if kind is not TriggerKind.HIT_SOUND:
        return TriggerCondition(kind)

    sample_set = draw(st.none() | st.sampled_from(TriggerSampleSet))
    additions = None
    if sample_set is not None:
        additions = draw(st.none() | st.sampled_from(TriggerSampleSet))
    return TriggerCondition(
        kind,
        sample_set=sample_set,
        additions_sample_set=additions,
        addition=draw(st.none() | st.sampled_from(TriggerAddition)),
        custom_sample_set=draw(st.none() | st.integers(min_value=0, max_value=99)),
    )


@st.composite
def compound_command(draw: st.DrawFn) -> AnyCommand:
    kind = draw(st.sampled_from(["command", "loop", "trigger"]))
    if kind == "command":
        return draw(command())

    children = tuple(draw(st.lists(command(), min_size=1, max_size=3)))
    start = draw(times)
    if kind == "loop":
        return Loop(start, draw(st.integers(min_value=1, max_value=20)), children)
    return Trigger(
        condition=draw(trigger_condition()),
        start_time=start,
        end_time=draw(
            st.none() | st.integers(min_value=start, max_value=start + 10_000)
        ),
        group=draw(st.none() | st.integers(min_value=0, max_value=10)),
        commands=children,
    )


def commands() -> st.SearchStrategy[Tuple[AnyCommand, ...]]:
    return st.lists(compound_command(), max_size=4).map(tuple)


@st.composite
def sprite(draw: st.DrawFn) -> Sprite:
    return Sprite(
        layer=draw(st.sampled_from(Layer)),
        origin=draw(st.sampled_from(Origin)),
        filepath=draw(file_names),
        x=draw(decimals(-1000, 1000)),
        y=draw(decimals(-1000, 1000)),
        commands=draw(commands()),
    )


@st.composite
def animation(draw: st.DrawFn) -> Animation:
    return Animation(
        layer=draw(st.sampled_from(Layer)),
        origin=draw(st.sampled_from(Origin)),
        filepath=draw(file_names),
        x=draw(decimals(-1000, 1000)),
        y=draw(decimals(-1000, 1000)),
        frame_count=draw(st.integers(min_value=1, max_value=100)),
        frame_delay=draw(decimals(1, 1000)),
        loop_type=draw(st.sampled_from(LoopType)),
        commands=draw(commands()),
    )


@st.composite
def event(draw: st.DrawFn) -> object:
    start = draw(times)
    return draw(
        st.one_of(
            st.builds(
                Background,
                filename=file_names,
                start_time=st.just(0),
                offset=st.none() | position(),
            ),
            st.builds(
                Video, filename=file_names, start_time=times, offset=st.none()
            ),
            st.builds(
                Break,
                start_time=st.just(start),
                end_time=st.integers(min_value=start, max_value=start + 20_000),
            ),
            st.builds(
                Sample,
                time=times,
                layer=st.sampled_from(
                    [Layer.BACKGROUND, Layer.FAIL, Layer.PASS, Layer.FOREGROUND]
                ),
                filepath=file_names,
                volume=st.integers(min_value=0, max_value=100),
            ),
            sprite(),
            animation(),
        )
    )


@st.composite
def colour(draw: st.DrawFn) -> Colour:
    components = st.integers(min_value=0, max_value=255)
    return Colour(draw(components), draw(components), draw(components))
