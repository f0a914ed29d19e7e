from typing import Any, Protocol

from osutools.document import Document


class Loader(Protocol):
    """A Loader parses the whole text of a file into a document, options are
    passed as keyword arguments"""

    def __call__(self, text: str) -> Document:
        ...


class Dumper(Protocol):
    """A Dumper gives back the text of a document"""

    def __call__(self, document: Any) -> str:
        ...
