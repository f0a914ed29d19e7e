"""[HitObjects] : one object per line

    x,y,time,type,hitSound,objectParams,hitSample

The low bits of `type` tell which kind of object the line describes, exactly
one of them must be set. What comes after `hitSound` depends on the kind :

    Circle  : [hitSample]
    Slider  : curveType|x:y|x:y...,slides,length[,edgeSounds[,edgeSets[,hitSample]]]
    Spinner : endTime[,hitSample]
    Hold    : endTime[:hitSample]
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import ClassVar, Optional, Tuple, Union

from osutools.codecs import (
    IntEnumCodec,
    format_decimal,
    parse_decimal,
    parse_int,
)
from osutools.common import HitSound, Position, SampleSet
from osutools.diagnostics import DiagnosticKind, FieldError
from osutools.lines import Token, check_field_count, split_tokens
from osutools.sections.base import EntrySection
from osutools.sections.slider_path import SliderPath, parse_slider_path

CIRCLE = 1 << 0
SLIDER = 1 << 1
NEW_COMBO = 1 << 2
SPINNER = 1 << 3
COMBO_SKIP_SHIFT = 4
COMBO_SKIP_MASK = 0b111 << COMBO_SKIP_SHIFT
HOLD = 1 << 7
PRIMARY_BITS = {
    CIRCLE: "circle",
    SLIDER: "slider",
    SPINNER: "spinner",
    HOLD: "hold",
}
KNOWN_BITS = CIRCLE | SLIDER | NEW_COMBO | SPINNER | COMBO_SKIP_MASK | HOLD

sample_set_codec = IntEnumCodec(SampleSet)


@dataclass(frozen=True)
class HitSample:
    normal_set: SampleSet = SampleSet.DEFAULT
    addition_set: SampleSet = SampleSet.DEFAULT
    index: int = 0
    volume: int = 0
    filename: str = ""

    def __post_init__(self) -> None:
        if self.index < 0:
            raise ValueError(f"Negative sample index : {self.index}")
        if not 0 <= self.volume <= 100:
            raise ValueError(f"volume out of [0, 100] range : {self.volume}")
        if any(c in self.filename for c in ",\r\n"):
            raise ValueError(
                f"Invalid character in sample filename {self.filename!r}"
            )

    def dump(self) -> str:
        return (
            f"{int(self.normal_set)}:{int(self.addition_set)}:{self.index}:"
            f"{self.volume}:{self.filename}"
        )


def parse_hit_sample(text: str) -> HitSample:
    """normalSet:additionSet[:index[:volume[:filename]]], the filename may
    itself contain colons"""
    tokens = split_tokens(text, ":")
    if len(tokens) < 2:
        raise FieldError(
            DiagnosticKind.MISSING_FIELD,
            f"A hit sample needs at least normalSet:additionSet, got {text!r}",
        )

    normal_set = tokens[0].parse(sample_set_codec.parse)
    addition_set = tokens[1].parse(sample_set_codec.parse)
    index = 0
    volume = 0
    filename = ""
    if len(tokens) > 2:
        index = tokens[2].parse(lambda s: parse_int(s, 0))
    if len(tokens) > 3:
        volume = tokens[3].parse(lambda s: parse_int(s, 0, 100))
    if len(tokens) > 4:
        filename = text[tokens[4].start :]
    return HitSample(normal_set, addition_set, index, volume, filename)


@dataclass(frozen=True)
class EdgeSet:
    normal_set: SampleSet = SampleSet.DEFAULT
    addition_set: SampleSet = SampleSet.DEFAULT

    def dump(self) -> str:
        return f"{int(self.normal_set)}:{int(self.addition_set)}"


class HitObjectBase:
    """Behaviour shared by every kind of hit object"""

    TYPE_BIT: ClassVar[int]

    position: Position
    time: int
    hit_sound: HitSound
    new_combo: bool
    combo_skip: int
    hit_sample: Optional[HitSample]

    def _check_common(self) -> None:
        if not 0 <= self.combo_skip <= 7:
            raise ValueError(f"combo_skip out of [0, 7] range : {self.combo_skip}")
        if not isinstance(self.position, Position):
            raise TypeError(f"Expected a Position, got {self.position!r}")

    @property
    def sample(self) -> HitSample:
        """The hit sample, with the defaults osu! uses when there's none"""
        return self.hit_sample if self.hit_sample is not None else HitSample()

    @property
    def type_bits(self) -> int:
        bits = self.TYPE_BIT | (self.combo_skip << COMBO_SKIP_SHIFT)
        if self.new_combo:
            bits |= NEW_COMBO
        return bits

    def _dump_prefix(self) -> str:
        return (
            f"{self.position.x},{self.position.y},{self.time},{self.type_bits},"
            f"{int(self.hit_sound)}"
        )


@dataclass(frozen=True)
class Circle(HitObjectBase):
    TYPE_BIT = CIRCLE

    position: Position
    time: int
    hit_sound: HitSound = HitSound.NONE
    new_combo: bool = False
    combo_skip: int = 0
    hit_sample: Optional[HitSample] = None

    def __post_init__(self) -> None:
        self._check_common()

    def dump(self) -> str:
        if self.hit_sample is None:
            return self._dump_prefix()
        return f"{self._dump_prefix()},{self.hit_sample.dump()}"


@dataclass(frozen=True)
class Slider(HitObjectBase):
    TYPE_BIT = SLIDER

    position: Position
    time: int
    path: SliderPath
    slides: int = 1
    length: Decimal = Decimal(0)
    hit_sound: HitSound = HitSound.NONE
    new_combo: bool = False
    combo_skip: int = 0
    edge_sounds: Optional[Tuple[HitSound, ...]] = None
    edge_sets: Optional[Tuple[EdgeSet, ...]] = None
    hit_sample: Optional[HitSample] = None

    def __post_init__(self) -> None:
        self._check_common()
        # positional fields, nothing can be skipped
        if self.edge_sets is not None and self.edge_sounds is None:
            raise ValueError("edge_sets needs edge_sounds to be set")
        if self.hit_sample is not None and self.edge_sets is None:
            raise ValueError("hit_sample needs edge_sounds and edge_sets to be set")
        if self.edge_sounds == ():
            raise ValueError("edge_sounds cannot be empty, use None instead")
        if self.edge_sets == ():
            raise ValueError("edge_sets cannot be empty, use None instead")

    def dump(self) -> str:
        parts = [
            self._dump_prefix(),
            self.path.dump(),
            str(self.slides),
            format_decimal(self.length),
        ]
        if self.edge_sounds is not None:
            parts.append("|".join(str(int(s)) for s in self.edge_sounds))
        if self.edge_sets is not None:
            parts.append("|".join(s.dump() for s in self.edge_sets))
        if self.hit_sample is not None:
            parts.append(self.hit_sample.dump())
        return ",".join(parts)


@dataclass(frozen=True)
class Spinner(HitObjectBase):
    TYPE_BIT = SPINNER

    position: Position
    time: int
    end_time: int
    hit_sound: HitSound = HitSound.NONE
    new_combo: bool = False
    combo_skip: int = 0
    hit_sample: Optional[HitSample] = None

    def __post_init__(self) -> None:
        self._check_common()

    def dump(self) -> str:
        parts = [self._dump_prefix(), str(self.end_time)]
        if self.hit_sample is not None:
            parts.append(self.hit_sample.dump())
        return ",".join(parts)


@dataclass(frozen=True)
class Hold(HitObjectBase):
    """osu!mania hold note, the end time and the hit sample share a field"""

    TYPE_BIT = HOLD

    position: Position
    time: int
    end_time: int
    hit_sound: HitSound = HitSound.NONE
    new_combo: bool = False
    combo_skip: int = 0
    hit_sample: Optional[HitSample] = None

    def __post_init__(self) -> None:
        self._check_common()

    def dump(self) -> str:
        end = str(self.end_time)
        if self.hit_sample is not None:
            end += f":{self.hit_sample.dump()}"
        return f"{self._dump_prefix()},{end}"


HitObject = Union[Circle, Slider, Spinner, Hold]


def parse_type(token: Token) -> Tuple[int, bool, int]:
    """Returns (primary bit, new combo, combo skip)"""
    bits = token.parse(parse_int)
    token = token.strip()
    primary = [bit for bit in PRIMARY_BITS if bits & bit]
    if len(primary) != 1:
        if primary:
            found = " and ".join(PRIMARY_BITS[b] for b in primary)
            message = f"Type {bits} describes several kinds of objects : {found}"
        else:
            message = f"Type {bits} does not describe any kind of object"
        raise FieldError(
            DiagnosticKind.AMBIGUOUS_HIT_OBJECT_TYPE, message, token.start, token.end
        )
    if bits & ~KNOWN_BITS:
        raise FieldError(
            DiagnosticKind.INVALID_VALUE,
            f"Type {bits} has unknown bits set",
            token.start,
            token.end,
        )
    combo_skip = (bits & COMBO_SKIP_MASK) >> COMBO_SKIP_SHIFT
    return primary[0], bool(bits & NEW_COMBO), combo_skip


def parse_hit_sound(text: str) -> HitSound:
    return HitSound(parse_int(text, 0, 15))


def parse_edge_set(text: str) -> EdgeSet:
    tokens = split_tokens(text, ":")
    if len(tokens) != 2:
        raise FieldError(
            DiagnosticKind.MISSING_FIELD
            if len(tokens) < 2
            else DiagnosticKind.UNEXPECTED_FIELD,
            f"Expected normalSet:additionSet, got {text!r}",
        )
    normal, addition = (t.parse(sample_set_codec.parse) for t in tokens)
    return EdgeSet(normal, addition)


def parse_hit_object(text: str) -> HitObject:
    tokens = split_tokens(text)
    check_field_count(text, tokens, 5, 11, "hit object")
    x_token, y_token, time_token, type_token, hit_sound_token, *rest = tokens
    position = Position(x_token.parse(parse_int), y_token.parse(parse_int))
    time = time_token.parse(parse_int)
    primary, new_combo, combo_skip = parse_type(type_token)
    hit_sound = hit_sound_token.parse(parse_hit_sound)

    if primary == CIRCLE:
        check_field_count(text, tokens, 5, 6, "circle")
        return Circle(
            position,
            time,
            hit_sound,
            new_combo,
            combo_skip,
            hit_sample=rest[0].parse(parse_hit_sample) if rest else None,
        )
    elif primary == SLIDER:
        check_field_count(text, tokens, 8, 11, "slider")
        path_token, slides_token, length_token, *extras = rest
        edge_sounds = None
        edge_sets = None
        hit_sample = None
        if len(extras) > 0:
            edge_sounds = tuple(
                t.parse(parse_hit_sound) for t in extras[0].split("|")
            )
        if len(extras) > 1:
            edge_sets = tuple(t.parse(parse_edge_set) for t in extras[1].split("|"))
        if len(extras) > 2:
            hit_sample = extras[2].parse(parse_hit_sample)
        return Slider(
            position,
            time,
            path=path_token.parse(parse_slider_path),
            slides=slides_token.parse(parse_int),
            length=length_token.parse(parse_decimal),
            hit_sound=hit_sound,
            new_combo=new_combo,
            combo_skip=combo_skip,
            edge_sounds=edge_sounds,
            edge_sets=edge_sets,
            hit_sample=hit_sample,
        )
    elif primary == SPINNER:
        check_field_count(text, tokens, 6, 7, "spinner")
        return Spinner(
            position,
            time,
            end_time=rest[0].parse(parse_int),
            hit_sound=hit_sound,
            new_combo=new_combo,
            combo_skip=combo_skip,
            hit_sample=rest[1].parse(parse_hit_sample) if len(rest) > 1 else None,
        )
    else:
        check_field_count(text, tokens, 6, 6, "hold note")
        end_token, *sample_token = rest[0].split(":")
        hit_sample = None
        if sample_token:
            sample_text = rest[0].text[sample_token[0].start - rest[0].start :]
            sample_start = sample_token[0].start
            hit_sample = Token(
                sample_text, sample_start, sample_start + len(sample_text)
            ).parse(parse_hit_sample)
        return Hold(
            position,
            time,
            end_time=end_token.parse(parse_int),
            hit_sound=hit_sound,
            new_combo=new_combo,
            combo_skip=combo_skip,
            hit_sample=hit_sample,
        )


class HitObjects(EntrySection[HitObject]):
    NAME = "HitObjects"

    def parse_entry(self, text: str) -> HitObject:
        return parse_hit_object(text)

    def format_entry(self, entry: HitObject, version: int) -> Optional[str]:
        if not isinstance(entry, (Circle, Slider, Spinner, Hold)):
            raise TypeError(f"Expected a hit object, got {entry!r}")
        return entry.dump()
