import pytest

from osutools.formats import DUMPERS, LOADERS, Format, guess_format
from osutools.testutils.samples import MANIA_HOLDS, STORYBOARD, V14_BEATMAP


@pytest.mark.parametrize(
    "text, format_",
    [
        (V14_BEATMAP, Format.OSU),
        (MANIA_HOLDS, Format.OSU),
        (STORYBOARD, Format.OSB),
        ("// comment\n[Events]\n", Format.OSB),
    ],
)
def test_guess_format(text: str, format_: Format) -> None:
    assert guess_format(text) is format_


@pytest.mark.parametrize("text", ["", "hello\nworld", "[Fruits]\n"])
def test_unrecognized_formats(text: str) -> None:
    with pytest.raises(ValueError):
        guess_format(text)


@pytest.mark.parametrize("text", [V14_BEATMAP, STORYBOARD])
def test_loaders_and_dumpers(text: str) -> None:
    format_ = guess_format(text)
    document = LOADERS[format_](text)
    assert DUMPERS[format_](document) == text
