"""[Variables] : .osb only, one `$name=value` per line

Variables are never substituted, event lines that use them are kept as they
are written (see UnresolvedEvent)"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Optional

from parsimonious import Grammar, NodeVisitor, ParseError
from parsimonious.nodes import Node

from osutools.diagnostics import DiagnosticKind, FieldError
from osutools.sections.base import EntrySection


@dataclass(frozen=True)
class Variable:
    name: str
    value: str

    def __post_init__(self) -> None:
        if not self.name or any(c in self.name for c in "=$ \t\r\n"):
            raise ValueError(f"Invalid variable name : {self.name!r}")
        if any(c in self.value for c in "\r\n"):
            raise ValueError("Variable values cannot span several lines")

    def dump(self) -> str:
        return f"${self.name}={self.value}"


variable_grammar = Grammar(
    r"""
    variable = ws "$" name ws "=" value
    name     = ~r"[^=$\s]+"
    value    = ~r".*"
    ws       = ~r"[ \t]*"
    """
)


class VariableVisitor(NodeVisitor):
    def visit_variable(self, node: Node, visited_children: List[Node]) -> Variable:
        _, _, name, _, _, value = node.children
        return Variable(name.text, value.text.strip())

    def generic_visit(self, node: Node, visited_children: List[Node]) -> None:
        ...


def parse_variable(text: str) -> Variable:
    try:
        tree = variable_grammar.parse(text)
    except ParseError as e:
        raise FieldError(
            DiagnosticKind.MALFORMED_VARIABLE,
            f"Expected a variable declaration like $name=value, got {text!r}",
            e.pos,
            max(len(text), e.pos + 1),
        ) from None

    return VariableVisitor().visit(tree)  # type: ignore[no-any-return]


class Variables(EntrySection[Variable]):
    NAME = "Variables"

    def parse_entry(self, text: str) -> Variable:
        return parse_variable(text)

    def format_entry(self, entry: Variable, version: int) -> Optional[str]:
        if not isinstance(entry, Variable):
            raise TypeError(f"Expected a Variable, got {entry!r}")
        return entry.dump()

    def as_dict(self) -> Dict[str, str]:
        return {v.name: v.value for v in self}
