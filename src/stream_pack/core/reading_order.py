"""Resolve the reading order of every file in an EPUB archive.

The spine gives the declared order of content documents, but real books
rarely list the images and stylesheets those documents embed. The resolver
walks the spine, places each item, places the resources each markup item
pulls in right behind it, and finally appends whatever was never reached.
Every content file ends up in the order exactly once, or resolution fails.
"""

import logging
import posixpath
from pathlib import Path
from typing import Callable
from urllib.parse import unquote, urlsplit

from stream_pack.core import resource_scanner
from stream_pack.core.archive_extractor import read_archive_file
from stream_pack.core.errors import ReferentialIntegrityError
from stream_pack.models.book import EpubBook
from stream_pack.models.epub import ManifestItem

log = logging.getLogger(__name__)

Scanner = Callable[..., list[str]]


def resolve_href(item: ManifestItem, base_dir: str) -> str:
    """Archive-relative path of a manifest item."""
    href = unquote(urlsplit(item.href).path)
    if href.startswith("/"):
        return posixpath.normpath(href.lstrip("/"))
    return posixpath.normpath(posixpath.join(base_dir, href))


class ReadingOrderResolver:
    """Computes the total, deterministic file order of an EPUB book."""

    def __init__(self, scanner: Scanner = resource_scanner.scan):
        self.scanner = scanner

    def resolve(self, book: EpubBook) -> list[Path]:
        """Order every content file of ``book``.

        The result is stored on ``book.ordered_files`` and returned. On
        failure nothing is stored.

        Raises:
            ReferentialIntegrityError: If the spine names an id the manifest
                does not have, a spine item is missing from the archive or
                placed twice, or the final order does not account for every
                file
            MarkupParseError: If a spine document cannot be scanned
        """
        archive = book.archive
        package = book.package
        structural = set(book.structural_files)

        by_relative = {
            archive.relative(path): path
            for path in archive.files
            if path not in structural
        }
        unassigned: set[str] = set(by_relative)
        ordered: list[Path] = []

        def place(relative: str) -> None:
            unassigned.remove(relative)
            ordered.append(by_relative[relative])

        log.debug("Package base directory is '%s'", package.base_dir)
        for itemref in package.spine:
            item = package.manifest.get(itemref.idref)
            if item is None:
                raise ReferentialIntegrityError(
                    archive.name,
                    f"spine references id '{itemref.idref}' missing from the manifest",
                )
            if not itemref.linear:
                # Non-linear items keep their spine position.
                log.debug("Spine item %s is non-linear", itemref.idref)

            relative = resolve_href(item, package.base_dir)
            if relative not in unassigned:
                state = "placed twice" if relative in by_relative else "missing"
                raise ReferentialIntegrityError(
                    archive.name,
                    f"spine item '{itemref.idref}' ({relative}) is {state}",
                )
            place(relative)
            log.debug("Placed spine item %s -> %s", itemref.idref, relative)

            if item.is_markup:
                document = read_archive_file(archive, relative)
                for candidate in self.scanner(
                    document,
                    posixpath.dirname(relative),
                    archive=archive.name,
                    name=relative,
                ):
                    if candidate in unassigned:
                        place(candidate)
                        log.debug("Placed %s after %s", candidate, relative)

        # Whatever the spine and its documents never reached, in archive order.
        for relative, path in by_relative.items():
            if relative in unassigned:
                ordered.append(path)
                log.debug("Appended unreferenced file %s", relative)
        unassigned.clear()

        if len(ordered) + len(structural) != len(archive.files):
            raise ReferentialIntegrityError(
                archive.name,
                f"ordered {len(ordered)} files plus {len(structural)} structural "
                f"files, but the archive has {len(archive.files)}",
            )

        log.debug(
            "%s: %d files total, %d ordered", archive.name, len(archive.files), len(ordered)
        )
        book.ordered_files = ordered
        return ordered


def resolve_reading_order(book: EpubBook) -> list[Path]:
    """Resolve ``book`` with the default markup scanner."""
    return ReadingOrderResolver().resolve(book)
