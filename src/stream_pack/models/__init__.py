"""Data models."""

from stream_pack.models.archive import Archive, ArchiveType
from stream_pack.models.book import ComicBook, EpubBook
from stream_pack.models.epub import (
    ContainerPointer,
    ManifestItem,
    PackageDescriptor,
    SpineItemRef,
)
from stream_pack.models.options import OptimizeOptions

__all__ = [
    # Archive models
    "Archive",
    "ArchiveType",
    # Package descriptor models
    "ContainerPointer",
    "ManifestItem",
    "SpineItemRef",
    "PackageDescriptor",
    # Book models
    "EpubBook",
    "ComicBook",
    # Configuration
    "OptimizeOptions",
]
