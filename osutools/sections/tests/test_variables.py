import pytest

from osutools.diagnostics import DiagnosticKind, FieldError
from osutools.versioning import LATEST_VERSION

from ..variables import Variable, Variables, parse_variable


@pytest.mark.parametrize(
    "text, variable",
    [
        ("$pos=320,240", Variable("pos", "320,240")),
        ("  $fade = F,0 ", Variable("fade", "F,0")),
        ("$empty=", Variable("empty", "")),
        ("$a=b=c", Variable("a", "b=c")),
    ],
)
def test_variables(text: str, variable: Variable) -> None:
    assert parse_variable(text) == variable


@pytest.mark.parametrize("text", ["pos=1", "$=1", "$pos", "$two words=1"])
def test_malformed_variables(text: str) -> None:
    with pytest.raises(FieldError) as excinfo:
        parse_variable(text)
    assert excinfo.value.kind is DiagnosticKind.MALFORMED_VARIABLE


def test_variable_names_are_checked() -> None:
    with pytest.raises(ValueError):
        Variable("two words", "1")
    with pytest.raises(ValueError, match="cannot span several lines"):
        Variable("x", "1\n2")


def test_section_as_dict() -> None:
    variables = Variables(LATEST_VERSION)
    variables.append(Variable("pos", "320,240"))
    variables.append(Variable("fade", "F,0"))
    assert variables.as_dict() == {"pos": "320,240", "fade": "F,0"}
    assert variables[1].dump() == "$fade=F,0"
