"""Bind an extracted comic book archive: pages, metadata, repackaging."""

import logging
import re
from pathlib import Path

from stream_pack.core.archive_extractor import read_archive_file
from stream_pack.core.archive_writer import ArchiveWriter
from stream_pack.core.binder_factory import BookBinder
from stream_pack.core.errors import ConversionError
from stream_pack.core.image_converter import convert_to_webp
from stream_pack.core.metadata import new_record, parse_xml, serialize, set_streaming_flag
from stream_pack.core.page_sequencer import order_pages
from stream_pack.models.archive import Archive
from stream_pack.models.book import ComicBook
from stream_pack.models.options import OptimizeOptions

log = logging.getLogger(__name__)

METADATA_FILENAME = "ComicInfo.xml"
IGNORED_FILENAMES = {"thumbs.db"}


def load_comic(archive: Archive) -> ComicBook:
    """Split an extracted comic archive into metadata and pages.

    ComicInfo.xml at the archive root (any capitalization) is the metadata
    record; ignored files are dropped; every other file is a page.

    Raises:
        DescriptorParseError: If ComicInfo.xml is not well-formed
    """
    book = ComicBook(archive=archive)

    for path in archive.files:
        relative = archive.relative(path)
        if relative.lower() == METADATA_FILENAME.lower():
            # Keeps the original capitalization of the filename.
            book.metadata_file = path
            continue
        if path.name.lower() in IGNORED_FILENAMES:
            log.debug("Ignoring %s", relative)
            continue
        book.pages.append(path)

    if book.metadata_file is not None:
        relative = archive.relative(book.metadata_file)
        book.metadata = parse_xml(
            read_archive_file(archive, relative), archive.name, relative
        )

    log.debug(
        "%s: %d pages, metadata %s",
        archive.name,
        len(book.pages),
        "found" if book.metadata is not None else "absent",
    )
    return book


def comic_output_path(destination: Path) -> Path:
    """Rewrite a comic output filename to a tidy ``.cbz`` name."""
    name = destination.with_suffix(".cbz").name.replace(" ", "_")
    name = re.sub(r"[()#]", "", name)
    return destination.with_name(name)


class ComicBinder(BookBinder):
    """Sorts comic pages by filename and repackages them as CBZ."""

    def __init__(self, archive: Archive, options: OptimizeOptions):
        self.options = options
        self.archive = archive
        self.book = load_comic(archive)

    def order(self) -> list[Path]:
        pages = order_pages(self.book.pages, self.options.case_sensitive_sort)
        if self.options.convert_images:
            pages = [self._convert(page) for page in pages]
        self.book.pages = pages
        return pages

    def _convert(self, page: Path) -> Path:
        try:
            return convert_to_webp(page, archive=self.book.archive.name)
        except ConversionError as e:
            log.warning("WebP conversion failed, keeping original page: %s", e)
            return page

    def output_path(self, destination: Path) -> Path:
        return comic_output_path(destination)

    def write(self, destination: Path) -> Path:
        """Write ComicInfo.xml (stored), then the pages in order."""
        book = self.book
        if book.metadata is None:
            book.metadata = new_record("ComicInfo")
        set_streaming_flag(book.metadata)

        metadata_file = book.metadata_file or book.archive.work_dir / METADATA_FILENAME
        metadata_file.write_bytes(serialize(book.metadata))
        log.debug("Created metadata file %s", metadata_file)

        writer = ArchiveWriter(
            self.output_path(destination), book.archive.work_dir, book.archive.name
        )
        writer.prepare()
        writer.add([metadata_file], ArchiveWriter.STORED, junk_paths=True)
        writer.add(book.pages, ArchiveWriter.COMPRESSED, junk_paths=True)
        return writer.destination
