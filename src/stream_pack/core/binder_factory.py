"""Factory for creating book binders based on archive type."""

from abc import ABC, abstractmethod
from pathlib import Path

from stream_pack.core.errors import UnsupportedArchiveError
from stream_pack.models.archive import Archive, ArchiveType
from stream_pack.models.options import OptimizeOptions


class BookBinder(ABC):
    """Abstract base class for book binders."""

    archive: Archive

    @abstractmethod
    def order(self) -> list[Path]:
        """Compute the streaming order of the book's content files."""
        pass

    @abstractmethod
    def write(self, destination: Path) -> Path:
        """Mark the book optimized for streaming and write it out.

        Returns the path actually written.
        """
        pass

    def output_path(self, destination: Path) -> Path:
        """Final output path for a requested destination."""
        return destination

    def fixed_files(self) -> list[Path]:
        """Files the format writes ahead of the ordered content."""
        return []


class BinderFactory:
    """Factory for creating appropriate binder based on archive type."""

    SUPPORTED_EXTENSIONS = (".cbr", ".cbz", ".epub")

    @classmethod
    def create(cls, archive: Archive, options: OptimizeOptions) -> BookBinder:
        """Create appropriate binder for an extracted archive.

        Args:
            archive: Extracted archive with its detected type
            options: Run configuration

        Returns:
            BookBinder instance for the archive type

        Raises:
            UnsupportedArchiveError: If the archive is neither EPUB nor comic
        """
        if archive.archive_type == ArchiveType.EPUB:
            from stream_pack.core.epub_binder import EpubBinder

            return EpubBinder(archive, options)
        elif archive.archive_type == ArchiveType.COMIC_BOOK:
            from stream_pack.core.comic_binder import ComicBinder

            return ComicBinder(archive, options)

        raise UnsupportedArchiveError(
            archive.name, "archive is neither an EPUB nor a comic book"
        )

    @classmethod
    def is_supported(cls, path: Path) -> bool:
        """Check if the file extension is one we repackage.

        Args:
            path: Path to the archive file

        Returns:
            True if extension is supported
        """
        return path.suffix.lower() in cls.SUPPORTED_EXTENSIONS
