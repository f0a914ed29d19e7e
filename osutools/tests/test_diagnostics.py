import pytest

from ..diagnostics import (
    Diagnostic,
    DiagnosticKind,
    FieldError,
    OsuParseError,
    Severity,
    Span,
    unknown_key,
)


def test_pretty_underlines_the_span() -> None:
    diagnostic = Diagnostic(
        DiagnosticKind.INVALID_NUMBER, "not a number", Span(3, 4, 7), "abc,def,ghi"
    )
    assert diagnostic.pretty() == (
        "line 3, column 5 : InvalidNumber : not a number\n"
        "    abc,def,ghi\n"
        "        ^^^"
    )


def test_empty_spans_still_get_a_caret() -> None:
    diagnostic = Diagnostic(DiagnosticKind.MISSING_FIELD, "", Span(1, 3, 3), "1,2")
    assert diagnostic.pretty().endswith("\n       ^")


def test_shifting_errors_into_a_token() -> None:
    placed = FieldError(DiagnosticKind.INVALID_VALUE, "", 1, 2).shifted(10, 20)
    assert (placed.start, placed.end) == (11, 12)
    unplaced = FieldError(DiagnosticKind.INVALID_VALUE, "").shifted(10, 20)
    assert (unplaced.start, unplaced.end) == (10, 20)


def test_unplaced_errors_blame_the_whole_line() -> None:
    diagnostic = FieldError(DiagnosticKind.MISSING_KEY, "oops").to_diagnostic(
        2, "hello"
    )
    assert diagnostic.span == Span(2, 0, 5)
    assert diagnostic.is_fatal


def test_parse_errors_need_diagnostics() -> None:
    with pytest.raises(ValueError):
        OsuParseError([])


def test_parse_error_shortcuts() -> None:
    first = Diagnostic(DiagnosticKind.UNKNOWN_SECTION, "a", Span(1, 0, 1), "[")
    second = Diagnostic(DiagnosticKind.DUPLICATE_KEY, "b", Span(5, 0, 1), "x")
    error = OsuParseError([first, second])
    assert error.diagnostic is first
    assert error.kind is DiagnosticKind.UNKNOWN_SECTION
    assert error.span == Span(1, 0, 1)
    assert str(error) == f"{first.pretty()}\n{second.pretty()}"


def test_unknown_key_warnings() -> None:
    warning = unknown_key("Foo", "is not a known key", 4, "  Foo: 1", 2)
    assert warning.severity is Severity.WARNING
    assert not warning.is_fatal
    assert warning.span == Span(4, 2, 5)
