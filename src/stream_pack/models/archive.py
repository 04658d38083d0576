"""Data models for extracted archives."""

from enum import Enum
from pathlib import Path

from pydantic import BaseModel, Field


class ArchiveType(str, Enum):
    """Kind of book detected inside an archive."""

    UNKNOWN = "unknown"
    COMIC_BOOK = "comic_book"
    EPUB = "epub"


class Archive(BaseModel):
    """An extracted archive on disk.

    ``files`` holds absolute paths of every regular file below ``work_dir``
    in sorted path order and is not changed after extraction.
    """

    source: Path
    archive_type: ArchiveType = ArchiveType.UNKNOWN
    work_dir: Path
    files: list[Path] = Field(default_factory=list)

    @property
    def name(self) -> str:
        return self.source.name

    def relative(self, path: Path) -> str:
        """Archive-relative POSIX path of a file below the work directory."""
        return path.relative_to(self.work_dir).as_posix()
