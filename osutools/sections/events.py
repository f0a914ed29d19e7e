"""[Events] : backgrounds, videos, breaks and the storyboard

Each event is one unindented line, the first field tells its type either by
name or by its legacy number :

    0,0,"bg.jpg",0,0
    Video,-200,"video.avi"
    2,12000,18000
    Sprite,Foreground,Centre,"sb/star.png",320,240
    Animation,Fail,TopLeft,"sb/cat.png",0,0,8,50,LoopOnce
    Sample,3000,0,"sb/hit.wav",70

Backgrounds, videos, sprites and animations can be followed by indented
command lines (see storyboard.py), the event and its commands form a single
entry of the section. Blank lines and comments found in between commands
stay part of that entry."""

from __future__ import annotations

from dataclasses import dataclass, replace
from decimal import Decimal
from enum import Enum
from typing import Any, Callable, Dict, Iterator, List, Optional, Tuple, Union

from more_itertools import split_before

from osutools.codecs import TokenCodec, format_decimal, parse_decimal, parse_int
from osutools.common import Colour, Position
from osutools.diagnostics import Diagnostic, DiagnosticKind, FieldError, OsuParseError
from osutools.lines import (
    SourceLine,
    Token,
    check_field_count,
    depth_of,
    split_lines,
    split_tokens,
)
from osutools.sections.base import EntrySection, Provenance, Row, parse_line
from osutools.sections.storyboard import (
    VARIABLE_REFERENCE,
    AnyCommand,
    dump_commands,
    parse_command_tree,
)


class Layer(str, Enum):
    BACKGROUND = "Background"
    FAIL = "Fail"
    PASS = "Pass"
    FOREGROUND = "Foreground"
    OVERLAY = "Overlay"


class Origin(str, Enum):
    TOP_LEFT = "TopLeft"
    CENTRE = "Centre"
    CENTRE_LEFT = "CentreLeft"
    TOP_RIGHT = "TopRight"
    BOTTOM_CENTRE = "BottomCentre"
    TOP_CENTRE = "TopCentre"
    CUSTOM = "Custom"
    CENTRE_RIGHT = "CentreRight"
    BOTTOM_LEFT = "BottomLeft"
    BOTTOM_RIGHT = "BottomRight"


class LoopType(str, Enum):
    LOOP_FOREVER = "LoopForever"
    LOOP_ONCE = "LoopOnce"


# Legacy numbers are read but always written back as names
layer_codec = TokenCodec(
    Layer,
    {layer.value: layer for layer in Layer},
    {str(i): layer for i, layer in enumerate(Layer)},
)
origin_codec = TokenCodec(
    Origin,
    {origin.value: origin for origin in Origin},
    {str(i): origin for i, origin in enumerate(Origin)},
)
loop_type_codec = TokenCodec.by_value(LoopType)


def parse_path(text: str) -> str:
    if len(text) >= 2 and text.startswith('"') and text.endswith('"'):
        return text[1:-1]
    return text


def dump_path(path: str) -> str:
    return f'"{path}"'


def check_path(path: str) -> None:
    if not isinstance(path, str):
        raise TypeError(f"Expected a file path as a str, got {path!r}")
    if any(c in path for c in '"\r\n'):
        raise ValueError(f"File paths cannot contain quotes or newlines : {path!r}")


@dataclass(frozen=True)
class Background:
    filename: str
    start_time: int = 0
    offset: Optional[Position] = None
    commands: Tuple[AnyCommand, ...] = ()

    def __post_init__(self) -> None:
        check_path(self.filename)

    def dump(self) -> str:
        return f"0,{self.start_time},{dump_path(self.filename)}" + dump_offset(
            self.offset
        )


@dataclass(frozen=True)
class Video:
    filename: str
    start_time: int = 0
    offset: Optional[Position] = None
    commands: Tuple[AnyCommand, ...] = ()

    def __post_init__(self) -> None:
        check_path(self.filename)

    def dump(self) -> str:
        return f"Video,{self.start_time},{dump_path(self.filename)}" + dump_offset(
            self.offset
        )


def dump_offset(offset: Optional[Position]) -> str:
    if offset is None:
        return ""
    return f",{offset.x},{offset.y}"


@dataclass(frozen=True)
class Break:
    start_time: int
    end_time: int

    def __post_init__(self) -> None:
        if self.end_time < self.start_time:
            raise ValueError(
                f"A break can't end ({self.end_time}) before it starts "
                f"({self.start_time})"
            )

    def dump(self) -> str:
        return f"2,{self.start_time},{self.end_time}"


@dataclass(frozen=True)
class BackgroundColour:
    """Legacy background colour change"""

    time: int
    colour: Colour

    def __post_init__(self) -> None:
        if self.colour.alpha is not None:
            raise ValueError("Background colours have no alpha component")

    def dump(self) -> str:
        return f"3,{self.time},{self.colour}"


@dataclass(frozen=True)
class Sprite:
    layer: Layer
    origin: Origin
    filepath: str
    x: Decimal
    y: Decimal
    commands: Tuple[AnyCommand, ...] = ()

    def __post_init__(self) -> None:
        check_path(self.filepath)

    def dump(self) -> str:
        return ",".join(
            [
                "Sprite",
                self.layer.value,
                self.origin.value,
                dump_path(self.filepath),
                format_decimal(self.x),
                format_decimal(self.y),
            ]
        )


@dataclass(frozen=True)
class Animation:
    layer: Layer
    origin: Origin
    filepath: str
    x: Decimal
    y: Decimal
    frame_count: int
    frame_delay: Decimal
    loop_type: LoopType = LoopType.LOOP_FOREVER
    commands: Tuple[AnyCommand, ...] = ()

    def __post_init__(self) -> None:
        check_path(self.filepath)
        if self.frame_count < 0:
            raise ValueError(f"Negative frame count : {self.frame_count}")

    def dump(self) -> str:
        return ",".join(
            [
                "Animation",
                self.layer.value,
                self.origin.value,
                dump_path(self.filepath),
                format_decimal(self.x),
                format_decimal(self.y),
                str(self.frame_count),
                format_decimal(self.frame_delay),
                self.loop_type.value,
            ]
        )


@dataclass(frozen=True)
class Sample:
    time: int
    layer: Layer
    filepath: str
    volume: int = 100

    def __post_init__(self) -> None:
        check_path(self.filepath)
        if not 0 <= self.volume <= 100:
            raise ValueError(f"volume out of [0, 100] range : {self.volume}")

    def dump(self) -> str:
        return (
            f"Sample,{self.time},{list(Layer).index(self.layer)},"
            f"{dump_path(self.filepath)},{self.volume}"
        )


@dataclass(frozen=True)
class UnresolvedEvent:
    """.osb event line that refers to variables, kept verbatim"""

    text: str
    commands: Tuple[AnyCommand, ...] = ()

    @property
    def type_token(self) -> str:
        return self.text.split(",", 1)[0].strip()

    def dump(self) -> str:
        return self.text


Event = Union[
    Background,
    Video,
    Break,
    BackgroundColour,
    Sprite,
    Animation,
    Sample,
    UnresolvedEvent,
]
EVENT_TYPES = (
    Background,
    Video,
    Break,
    BackgroundColour,
    Sprite,
    Animation,
    Sample,
    UnresolvedEvent,
)
WITH_COMMANDS = (Background, Video, Sprite, Animation, UnresolvedEvent)


def parse_offset(text: str, tokens: List[Token]) -> Optional[Position]:
    if len(tokens) == 3:
        return None
    elif len(tokens) == 4:
        raise FieldError(
            DiagnosticKind.MISSING_FIELD,
            "An offset needs both x and y",
            len(text),
            len(text) + 1,
        )
    return Position(tokens[3].parse(parse_int), tokens[4].parse(parse_int))


def parse_background(text: str, tokens: List[Token]) -> Background:
    check_field_count(text, tokens, 3, 5, "background")
    return Background(
        start_time=tokens[1].parse(parse_int),
        filename=tokens[2].parse(parse_path),
        offset=parse_offset(text, tokens),
    )


def parse_video(text: str, tokens: List[Token]) -> Video:
    check_field_count(text, tokens, 3, 5, "video")
    return Video(
        start_time=tokens[1].parse(parse_int),
        filename=tokens[2].parse(parse_path),
        offset=parse_offset(text, tokens),
    )


def parse_break(text: str, tokens: List[Token]) -> Break:
    check_field_count(text, tokens, 3, 3, "break")
    start_time = tokens[1].parse(parse_int)
    end_time = tokens[2].parse(parse_int)
    if end_time < start_time:
        stripped = tokens[2].strip()
        raise FieldError(
            DiagnosticKind.INVALID_VALUE,
            f"The break ends ({end_time}) before it starts ({start_time})",
            stripped.start,
            stripped.end,
        )
    return Break(start_time, end_time)


def parse_background_colour(text: str, tokens: List[Token]) -> BackgroundColour:
    check_field_count(text, tokens, 5, 5, "background colour")
    red, green, blue = (t.parse(lambda s: parse_int(s, 0, 255)) for t in tokens[2:])
    return BackgroundColour(tokens[1].parse(parse_int), Colour(red, green, blue))


def parse_sprite(text: str, tokens: List[Token]) -> Sprite:
    check_field_count(text, tokens, 6, 6, "sprite")
    return Sprite(
        layer=tokens[1].parse(layer_codec.parse),
        origin=tokens[2].parse(origin_codec.parse),
        filepath=tokens[3].parse(parse_path),
        x=tokens[4].parse(parse_decimal),
        y=tokens[5].parse(parse_decimal),
    )


def parse_animation(text: str, tokens: List[Token]) -> Animation:
    check_field_count(text, tokens, 8, 9, "animation")
    return Animation(
        layer=tokens[1].parse(layer_codec.parse),
        origin=tokens[2].parse(origin_codec.parse),
        filepath=tokens[3].parse(parse_path),
        x=tokens[4].parse(parse_decimal),
        y=tokens[5].parse(parse_decimal),
        frame_count=tokens[6].parse(lambda s: parse_int(s, 0)),
        frame_delay=tokens[7].parse(parse_decimal),
        loop_type=(
            tokens[8].parse(loop_type_codec.parse)
            if len(tokens) > 8
            else LoopType.LOOP_FOREVER
        ),
    )


def parse_sample(text: str, tokens: List[Token]) -> Sample:
    check_field_count(text, tokens, 4, 5, "sample")
    return Sample(
        time=tokens[1].parse(parse_int),
        layer=tokens[2].parse(layer_codec.parse),
        filepath=tokens[3].parse(parse_path),
        volume=tokens[4].parse(lambda s: parse_int(s, 0, 100))
        if len(tokens) > 4
        else 100,
    )


EVENT_PARSERS: Dict[str, Callable[[str, List[Token]], Event]] = {
    "0": parse_background,
    "Background": parse_background,
    "1": parse_video,
    "Video": parse_video,
    "2": parse_break,
    "Break": parse_break,
    "3": parse_background_colour,
    "Colour": parse_background_colour,
    "4": parse_sprite,
    "Sprite": parse_sprite,
    "5": parse_sample,
    "Sample": parse_sample,
    "6": parse_animation,
    "Animation": parse_animation,
}


def parse_event(text: str, allow_variables: bool = False) -> Event:
    if allow_variables and VARIABLE_REFERENCE.search(text):
        return UnresolvedEvent(text)

    tokens = split_tokens(text, quoted=True)
    type_token = tokens[0].strip()
    try:
        parser = EVENT_PARSERS[type_token.text]
    except KeyError:
        raise FieldError(
            DiagnosticKind.INVALID_ENUM_VARIANT,
            f"Unknown event type {type_token.text!r}",
            type_token.start,
            max(type_token.end, type_token.start + 1),
        ) from None

    return parser(text, tokens)


def parse_block(lines: List[SourceLine], allow_variables: bool = False) -> Event:
    """An event line followed by its commands"""
    event_line, *command_lines = lines
    event = parse_line(event_line, lambda text: parse_event(text, allow_variables))
    first_command = next((line for line in command_lines if not line.is_trivia), None)
    if first_command is None:
        return event

    if not isinstance(event, WITH_COMMANDS):
        depth = depth_of(first_command.text)
        error = FieldError(
            DiagnosticKind.MALFORMED_STORYBOARD_COMMAND,
            f"{type(event).__name__} events can't have commands",
            0,
            depth,
        )
        raise OsuParseError([first_command.diagnostic(error)])

    commands = parse_command_tree(command_lines, allow_variables)
    return replace(event, commands=commands)


def is_event_line(line: SourceLine) -> bool:
    return not line.is_trivia and depth_of(line.text) == 0


def group_blocks(
    lines: List[SourceLine],
) -> Iterator[Union[SourceLine, List[SourceLine]]]:
    """Yields trivia lines one by one and every event line along with its
    commands in a list"""
    for group in split_before(lines, is_event_line):
        if not is_event_line(group[0]):
            for line in group:
                if not line.is_trivia:
                    error = FieldError(
                        DiagnosticKind.MALFORMED_STORYBOARD_COMMAND,
                        "Command found before any storyboard object",
                        0,
                        depth_of(line.text),
                    )
                    raise OsuParseError([line.diagnostic(error)])
                yield line
            continue

        # trivia after the last command is not part of the block
        last = max(i for i, line in enumerate(group) if not line.is_trivia)
        yield group[: last + 1]
        yield from group[last + 1 :]


def block_text(lines: List[SourceLine]) -> str:
    *first_lines, last_line = lines
    return "".join(line.text + line.ending for line in first_lines) + last_line.text


class Events(EntrySection[Event]):
    NAME = "Events"

    def __init__(self, version: int, header: Optional[Row] = None) -> None:
        super().__init__(version, header)
        # $variables are only a thing in .osb files
        self.allow_variables = False

    def read(
        self,
        lines: List[SourceLine],
        warnings: List[Diagnostic],
        *,
        strict: bool = False,
        provenance: Provenance = Provenance.OSU,
    ) -> None:
        if provenance is Provenance.OSB:
            self.allow_variables = True
        for block in group_blocks(lines):
            if isinstance(block, SourceLine):
                self._rows.append(Row.trivia(block, provenance))
            else:
                event = parse_block(block, self.allow_variables)
                self._rows.append(
                    Row(event, block_text(block), block[-1].ending, provenance)
                )

    def format_value(self, value: Any, version: int) -> Optional[List[str]]:
        if not isinstance(value, EVENT_TYPES):
            raise TypeError(f"Expected an event, got {value!r}")
        lines = [value.dump()]
        if isinstance(value, WITH_COMMANDS):
            lines.extend(dump_commands(value.commands))
        return lines

    def reparse(self, lines: List[str]) -> Any:
        block = split_lines("\n".join(lines))
        return parse_block(block, self.allow_variables)

    def sprites(self) -> List[Union[Sprite, Animation]]:
        return [e for e in self if isinstance(e, (Sprite, Animation))]

    def breaks(self) -> List[Break]:
        return [e for e in self if isinstance(e, Break)]

    @property
    def background(self) -> Optional[Background]:
        return next((e for e in self if isinstance(e, Background)), None)
