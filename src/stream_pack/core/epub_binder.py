"""Bind an extracted EPUB: descriptors, reading order, repackaging."""

import logging
import posixpath
from pathlib import Path

from stream_pack.core.archive_extractor import has_file, read_archive_file
from stream_pack.core.archive_writer import ArchiveWriter
from stream_pack.core.binder_factory import BookBinder
from stream_pack.core.errors import StructuralError
from stream_pack.core.metadata import serialize, set_streaming_flag
from stream_pack.core.package_parser import (
    CONTAINER_PATH,
    parse_container,
    parse_package,
)
from stream_pack.core.reading_order import ReadingOrderResolver
from stream_pack.models.archive import Archive
from stream_pack.models.book import EpubBook
from stream_pack.models.options import OptimizeOptions

log = logging.getLogger(__name__)

MIMETYPE_PATH = "mimetype"
EPUB_MIMETYPE = "application/epub+zip"


def load_epub(archive: Archive) -> EpubBook:
    """Read the structural files of an extracted EPUB.

    Raises:
        StructuralError: If the mimetype, container or package descriptor
            is missing or invalid
    """
    if not has_file(archive, MIMETYPE_PATH):
        raise StructuralError(archive.name, f"no {MIMETYPE_PATH} file")
    mimetype = read_archive_file(archive, MIMETYPE_PATH).strip()
    if mimetype != EPUB_MIMETYPE.encode("ascii"):
        raise StructuralError(
            archive.name, f"{MIMETYPE_PATH} is {mimetype[:40]!r}, not {EPUB_MIMETYPE}"
        )

    if not has_file(archive, CONTAINER_PATH):
        raise StructuralError(archive.name, f"no {CONTAINER_PATH}")
    container = parse_container(
        read_archive_file(archive, CONTAINER_PATH), archive=archive.name
    )

    package_path = posixpath.normpath(container.full_path.lstrip("/"))
    if not has_file(archive, package_path):
        raise StructuralError(
            archive.name, f"package descriptor {package_path} is not in the archive"
        )
    package = parse_package(
        read_archive_file(archive, package_path), package_path, archive=archive.name
    )

    return EpubBook(
        archive=archive,
        container=container,
        package=package,
        mimetype_file=archive.work_dir / MIMETYPE_PATH,
        container_file=archive.work_dir / CONTAINER_PATH,
        package_file=archive.work_dir / package_path,
    )


class EpubBinder(BookBinder):
    """Reorders an EPUB so it can be read front to back."""

    def __init__(self, archive: Archive, options: OptimizeOptions):
        self.options = options
        self.archive = archive
        self.book = load_epub(archive)
        self.resolver = ReadingOrderResolver()

    def order(self) -> list[Path]:
        return self.resolver.resolve(self.book)

    def fixed_files(self) -> list[Path]:
        return self.book.structural_files

    def write(self, destination: Path) -> Path:
        """Write mimetype (stored), descriptors, then content in order."""
        book = self.book
        if len(book.ordered_files) + len(book.structural_files) != len(
            book.archive.files
        ):
            self.order()

        set_streaming_flag(book.package.tree)
        book.package_file.write_bytes(serialize(book.package.tree))
        log.debug("Rewrote %s", book.package.path)

        writer = ArchiveWriter(destination, book.archive.work_dir, book.archive.name)
        writer.prepare()
        # The OCF format requires an uncompressed mimetype as first entry.
        writer.add([book.mimetype_file], ArchiveWriter.STORED)
        writer.add(
            [book.container_file, book.package_file, *book.ordered_files],
            ArchiveWriter.COMPRESSED,
        )
        return writer.destination
