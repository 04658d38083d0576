"""Order the pages of a comic book archive by filename."""

from pathlib import Path
from typing import TypeVar

P = TypeVar("P", str, Path)


def order_pages(pages: list[P], case_sensitive: bool = False) -> list[P]:
    """Sort page files lexicographically by their path string.

    Case-sensitive mode compares code points (uppercase before lowercase);
    the default lowercases both sides first.

    Numbers are not compared numerically: ``page10.jpg`` sorts before
    ``page9.jpg``. Readers of the comic book format expect plain
    lexicographic order, so this is kept as is.
    """
    if case_sensitive:
        return sorted(pages, key=str)
    return sorted(pages, key=lambda page: str(page).lower())
