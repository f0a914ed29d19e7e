"""Storyboard commands, the indented lines under a Sprite or Animation

    Sprite,Foreground,Centre,"sb/star.png",320,240
     F,0,1000,2000,0,1
     L,1000,4
      S,0,0,500,1,1.2
      S,0,500,1000,1.2,1

The number of leading spaces (or underscores) is the depth of the line.
Depth 1 lines are commands applied to the object, loops (L) and triggers (T)
are commands themselves and hold the depth 2 lines that follow them.

Command lines :

    F/S/R/MX/MY,easing,start,end,value[,value...]
    M/V,easing,start,end,x,y[,x,y...]
    C,easing,start,end,r,g,b[,r,g,b...]
    P,easing,start,end,H|V|A
    L,start,loopCount
    T,triggerType,start[,end[,groupNumber]]

`end` may be left empty, in which case it's the same as `start`. A trigger
without an end lasts as long as the object."""

from __future__ import annotations

import re
from dataclasses import dataclass, replace
from decimal import Decimal
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Tuple, Union

from parsimonious import Grammar, NodeVisitor, ParseError
from parsimonious.nodes import Node

from osutools.codecs import TokenCodec, format_decimal, parse_decimal, parse_int
from osutools.diagnostics import DiagnosticKind, FieldError, OsuParseError
from osutools.lines import SourceLine, Token, depth_of, split_tokens
from osutools.sections.base import parse_line

# .osb variables, $name
VARIABLE_REFERENCE = re.compile(r"\$\w+")

MAX_EASING = 34


class CommandType(str, Enum):
    FADE = "F"
    MOVE = "M"
    MOVE_X = "MX"
    MOVE_Y = "MY"
    SCALE = "S"
    VECTOR_SCALE = "V"
    ROTATE = "R"
    COLOUR = "C"
    PARAMETER = "P"
    LOOP = "L"
    TRIGGER = "T"


class Parameter(str, Enum):
    HORIZONTAL_FLIP = "H"
    VERTICAL_FLIP = "V"
    ADDITIVE_BLENDING = "A"


CommandValue = Union[Decimal, int, Parameter]

parameter_codec = TokenCodec.by_value(Parameter)


def parse_colour_component(text: str) -> int:
    return parse_int(text, 0, 255)


# How many values make up one set, and how to read them
VALUE_RULES: Dict[CommandType, Tuple[int, Callable[[str], CommandValue]]] = {
    CommandType.FADE: (1, parse_decimal),
    CommandType.MOVE: (2, parse_decimal),
    CommandType.MOVE_X: (1, parse_decimal),
    CommandType.MOVE_Y: (1, parse_decimal),
    CommandType.SCALE: (1, parse_decimal),
    CommandType.VECTOR_SCALE: (2, parse_decimal),
    CommandType.ROTATE: (1, parse_decimal),
    CommandType.COLOUR: (3, parse_colour_component),
    CommandType.PARAMETER: (1, parameter_codec.parse),
}


def dump_command_value(value: CommandValue) -> str:
    if isinstance(value, Parameter):
        return value.value
    elif isinstance(value, int):
        return str(value)
    else:
        return format_decimal(value)


@dataclass(frozen=True)
class Command:
    """Any command that changes a property of the object over time"""

    type: CommandType
    easing: int
    start_time: int
    end_time: Optional[int]
    values: Tuple[CommandValue, ...]

    def __post_init__(self) -> None:
        if self.type not in VALUE_RULES:
            raise ValueError(
                f"{self.type!r} is not a simple command, use Loop or Trigger"
            )
        if not 0 <= self.easing <= MAX_EASING:
            raise ValueError(f"easing out of [0, {MAX_EASING}] range : {self.easing}")
        arity, _ = VALUE_RULES[self.type]
        if len(self.values) < arity:
            raise ValueError(
                f"{self.type.value} commands need at least {arity} values, got "
                f"{len(self.values)}"
            )

    @property
    def effective_end_time(self) -> int:
        return self.start_time if self.end_time is None else self.end_time

    def dump(self) -> str:
        end = "" if self.end_time is None else str(self.end_time)
        values = ",".join(dump_command_value(v) for v in self.values)
        return f"{self.type.value},{self.easing},{self.start_time},{end},{values}"


@dataclass(frozen=True)
class Loop:
    start_time: int
    loop_count: int
    commands: Tuple[AnyCommand, ...] = ()

    def dump(self) -> str:
        return f"L,{self.start_time},{self.loop_count}"


class TriggerKind(str, Enum):
    HIT_SOUND = "HitSound"
    PASSING = "Passing"
    FAILING = "Failing"


class TriggerSampleSet(str, Enum):
    ALL = "All"
    NORMAL = "Normal"
    SOFT = "Soft"
    DRUM = "Drum"


class TriggerAddition(str, Enum):
    WHISTLE = "Whistle"
    FINISH = "Finish"
    CLAP = "Clap"


@dataclass(frozen=True)
class TriggerCondition:
    """HitSound[SampleSet][AdditionsSampleSet][Addition][CustomSampleSet],
    Passing or Failing"""

    kind: TriggerKind = TriggerKind.HIT_SOUND
    sample_set: Optional[TriggerSampleSet] = None
    additions_sample_set: Optional[TriggerSampleSet] = None
    addition: Optional[TriggerAddition] = None
    custom_sample_set: Optional[int] = None

    def __post_init__(self) -> None:
        if self.kind is not TriggerKind.HIT_SOUND and any(
            v is not None
            for v in (
                self.sample_set,
                self.additions_sample_set,
                self.addition,
                self.custom_sample_set,
            )
        ):
            raise ValueError(f"{self.kind.value} triggers have no hit sound filter")
        if self.additions_sample_set is not None and self.sample_set is None:
            raise ValueError("additions_sample_set needs sample_set to be set")

    def dump(self) -> str:
        if self.kind is not TriggerKind.HIT_SOUND:
            return self.kind.value

        parts = [self.kind.value]
        for part in (self.sample_set, self.additions_sample_set, self.addition):
            if part is not None:
                parts.append(part.value)
        if self.custom_sample_set is not None:
            parts.append(str(self.custom_sample_set))
        return "".join(parts)


trigger_grammar = Grammar(
    r"""
    trigger       = passing / failing / hit_sound
    passing       = "Passing"
    failing       = "Failing"
    hit_sound     = "HitSound" sample_set? additions_set? addition? custom
    sample_set    = ~"All|Normal|Soft|Drum"
    additions_set = ~"All|Normal|Soft|Drum"
    addition      = ~"Whistle|Finish|Clap"
    custom        = ~r"\d*"
    """
)


class TriggerConditionVisitor(NodeVisitor):
    def __init__(self) -> None:
        super().__init__()
        self.values: Dict[str, Any] = {}

    def visit_trigger(
        self, node: Node, visited_children: List[Node]
    ) -> TriggerCondition:
        return TriggerCondition(**self.values)

    def visit_passing(self, node: Node, visited_children: List[Node]) -> None:
        self.values["kind"] = TriggerKind.PASSING

    def visit_failing(self, node: Node, visited_children: List[Node]) -> None:
        self.values["kind"] = TriggerKind.FAILING

    def visit_sample_set(self, node: Node, visited_children: List[Node]) -> None:
        self.values["sample_set"] = TriggerSampleSet(node.text)

    def visit_additions_set(self, node: Node, visited_children: List[Node]) -> None:
        self.values["additions_sample_set"] = TriggerSampleSet(node.text)

    def visit_addition(self, node: Node, visited_children: List[Node]) -> None:
        self.values["addition"] = TriggerAddition(node.text)

    def visit_custom(self, node: Node, visited_children: List[Node]) -> None:
        if node.text:
            self.values["custom_sample_set"] = int(node.text)

    def generic_visit(self, node: Node, visited_children: List[Node]) -> None:
        ...


def parse_trigger_condition(text: str) -> TriggerCondition:
    try:
        tree = trigger_grammar.parse(text)
    except ParseError as e:
        raise FieldError(
            DiagnosticKind.INVALID_ENUM_VARIANT,
            f"{text!r} is not a valid trigger, expected Passing, Failing or "
            "HitSound[SampleSet][AdditionsSampleSet][Addition][CustomSampleSet]",
            e.pos,
            max(len(text), e.pos + 1),
        ) from None

    return TriggerConditionVisitor().visit(tree)  # type: ignore[no-any-return]


@dataclass(frozen=True)
class Trigger:
    condition: TriggerCondition
    start_time: int
    end_time: Optional[int] = None
    group: Optional[int] = None
    commands: Tuple[AnyCommand, ...] = ()

    def dump(self) -> str:
        parts = ["T", self.condition.dump(), str(self.start_time)]
        end = "" if self.end_time is None else str(self.end_time)
        if self.group is not None:
            parts += [end, str(self.group)]
        elif self.end_time is not None:
            parts.append(end)
        return ",".join(parts)


@dataclass(frozen=True)
class UnresolvedCommand:
    """.osb command line that refers to variables, kept verbatim since a
    variable can stand for any number of fields"""

    text: str
    commands: Tuple[AnyCommand, ...] = ()

    @property
    def is_container(self) -> bool:
        return self.text.split(",", 1)[0].strip() in ("L", "T")

    def dump(self) -> str:
        return self.text


AnyCommand = Union[Command, Loop, Trigger, UnresolvedCommand]
Container = Union[Loop, Trigger, UnresolvedCommand]


def is_container(command: AnyCommand) -> bool:
    if isinstance(command, UnresolvedCommand):
        return command.is_container
    return isinstance(command, (Loop, Trigger))


def malformed(message: str, token: Optional[Token] = None) -> FieldError:
    if token is None:
        return FieldError(DiagnosticKind.MALFORMED_STORYBOARD_COMMAND, message)
    return FieldError(
        DiagnosticKind.MALFORMED_STORYBOARD_COMMAND,
        message,
        token.start,
        max(token.end, token.start + 1),
    )


def parse_end_time(token: Token) -> Optional[int]:
    if not token.text.strip():
        return None
    return token.parse(parse_int)


def parse_command(text: str, allow_variables: bool = False) -> AnyCommand:
    """Parse an indented command line, loops and triggers come out without
    their children"""
    depth = depth_of(text)
    body = text[depth:]
    if allow_variables and VARIABLE_REFERENCE.search(body):
        return UnresolvedCommand(body)

    tokens = split_tokens(body, offset=depth)
    type_token = tokens[0].strip()
    try:
        command_type = CommandType(type_token.text)
    except ValueError:
        message = f"Unknown command type {type_token.text!r}"
        raise malformed(message, type_token) from None

    if command_type is CommandType.LOOP:
        if len(tokens) != 3:
            raise malformed(
                f"A loop is written L,startTime,loopCount, found {len(tokens)} fields",
                Token(body, depth, depth + len(body)),
            )
        return Loop(tokens[1].parse(parse_int), tokens[2].parse(parse_int))

    if command_type is CommandType.TRIGGER:
        if not 3 <= len(tokens) <= 5:
            raise malformed(
                "A trigger is written T,triggerType,startTime[,endTime[,groupNumber]]"
                f", found {len(tokens)} fields",
                Token(body, depth, depth + len(body)),
            )
        return Trigger(
            condition=tokens[1].parse(parse_trigger_condition),
            start_time=tokens[2].parse(parse_int),
            end_time=parse_end_time(tokens[3]) if len(tokens) > 3 else None,
            group=tokens[4].parse(parse_int) if len(tokens) > 4 else None,
        )

    arity, value_parser = VALUE_RULES[command_type]
    if len(tokens) < 4 + arity:
        raise FieldError(
            DiagnosticKind.MISSING_FIELD,
            f"{command_type.value} commands need type,easing,startTime,endTime "
            f"and at least {arity} value(s), found {len(tokens)} fields",
            len(text),
            len(text) + 1,
        )
    easing = tokens[1].parse(lambda s: parse_int(s, 0, MAX_EASING))
    return Command(
        type=command_type,
        easing=easing,
        start_time=tokens[2].parse(parse_int),
        end_time=parse_end_time(tokens[3]),
        values=tuple(t.parse(value_parser) for t in tokens[4:]),
    )


@dataclass
class OpenContainer:
    depth: int
    command: Container
    children: List[AnyCommand]


def close(stack: List[OpenContainer], top_level: List[AnyCommand]) -> None:
    """Pop the innermost container and hand it over to the one around it"""
    container = stack.pop()
    command = replace(container.command, commands=tuple(container.children))
    (stack[-1].children if stack else top_level).append(command)


def parse_command_tree(
    lines: List[SourceLine], allow_variables: bool = False
) -> Tuple[AnyCommand, ...]:
    """Builds the command tree of an object from the lines that follow its
    declaration. Containers are kept on an explicit stack and get closed
    when a line comes back to their depth or less"""
    top_level: List[AnyCommand] = []
    stack: List[OpenContainer] = []
    for line in lines:
        if line.is_trivia:
            continue

        depth = depth_of(line.text)
        while stack and stack[-1].depth >= depth:
            close(stack, top_level)

        current = stack[-1].depth if stack else 0
        if depth > current + 1:
            if stack:
                where = f"inside a depth {current} loop or trigger"
            else:
                where = "directly under the object"
            error = malformed(
                f"Depth {depth} command found {where}, at most depth "
                f"{current + 1} was expected",
                Token(line.text[:depth], 0, depth),
            )
            raise OsuParseError([line.diagnostic(error)])

        command = parse_line(line, lambda text: parse_command(text, allow_variables))
        if is_container(command):
            stack.append(OpenContainer(depth, command, []))  # type: ignore[arg-type]
        else:
            (stack[-1].children if stack else top_level).append(command)

    while stack:
        close(stack, top_level)

    return tuple(top_level)


def dump_commands(commands: Tuple[AnyCommand, ...], depth: int = 1) -> List[str]:
    lines = []
    for command in commands:
        lines.append(" " * depth + command.dump())
        if is_container(command):
            children = command.commands  # type: ignore[union-attr]
            lines.extend(dump_commands(children, depth + 1))
    return lines
