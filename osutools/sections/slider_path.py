"""Slider paths : a curve type letter followed by |-separated control points

    B|200:200|250:200|250:200|300:150

The control points are kept exactly as written, the curve itself is never
computed"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, List, Optional, Tuple

from parsimonious import Grammar, NodeVisitor, ParseError
from parsimonious.nodes import Node

from osutools.common import Position
from osutools.diagnostics import DiagnosticKind, FieldError


class CurveType(str, Enum):
    BEZIER = "B"
    CATMULL = "C"
    LINEAR = "L"
    PERFECT_CIRCLE = "P"


@dataclass(frozen=True)
class SliderPath:
    curve_type: CurveType
    points: Tuple[Position, ...]

    def __post_init__(self) -> None:
        if not isinstance(self.curve_type, CurveType):
            raise TypeError(f"Expected a CurveType, got {self.curve_type!r}")
        if not self.points:
            raise ValueError("A slider path needs at least one control point")

    def dump(self) -> str:
        points = "|".join(f"{p.x}:{p.y}" for p in self.points)
        return f"{self.curve_type.value}|{points}"


slider_path_grammar = Grammar(
    r"""
    path       = curve_type point+
    curve_type = ~r"[A-Za-z]"
    point      = "|" coordinate ":" coordinate
    coordinate = ~r"[+-]?\d+"
    """
)


class SliderPathVisitor(NodeVisitor):

    unwrapped_exceptions = (FieldError,)

    def __init__(self, *args: Any, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self.curve_type: Optional[CurveType] = None
        self.points: List[Position] = []

    def visit_path(self, node: Node, visited_children: List[Node]) -> SliderPath:
        if self.curve_type is None:
            raise ValueError("No curve type found after parsing slider path")
        return SliderPath(self.curve_type, tuple(self.points))

    def visit_curve_type(self, node: Node, visited_children: List[Node]) -> None:
        try:
            self.curve_type = CurveType(node.text)
        except ValueError:
            raise FieldError(
                DiagnosticKind.MALFORMED_SLIDER_PATH,
                f"Unknown curve type {node.text!r}, expected one of "
                f"{[c.value for c in CurveType]}",
                node.start,
                node.end,
            ) from None

    def visit_point(self, node: Node, visited_children: List[Node]) -> None:
        _, x, _, y = node.children
        self.points.append(Position(int(x.text), int(y.text)))

    def generic_visit(self, node: Node, visited_children: List[Node]) -> None:
        ...


def parse_slider_path(text: str) -> SliderPath:
    try:
        tree = slider_path_grammar.parse(text)
    except ParseError as e:
        if not text:
            message = "Empty slider path"
        else:
            message = f"Malformed slider path {text!r}"
        raise FieldError(
            DiagnosticKind.MALFORMED_SLIDER_PATH, message, e.pos, e.pos + 1
        ) from None

    return SliderPathVisitor().visit(tree)  # type: ignore[no-any-return]
