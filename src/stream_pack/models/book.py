"""Data models for books bound from an extracted archive (EPUB and comic)."""

from pathlib import Path

from lxml import etree
from pydantic import BaseModel, Field

from stream_pack.models.archive import Archive
from stream_pack.models.epub import ContainerPointer, PackageDescriptor


class EpubBook(BaseModel):
    """EPUB archive plus its parsed descriptors."""

    archive: Archive
    container: ContainerPointer
    package: PackageDescriptor
    mimetype_file: Path
    container_file: Path
    package_file: Path
    # Filled in by the reading order resolver.
    ordered_files: list[Path] = Field(default_factory=list)

    class Config:
        arbitrary_types_allowed = True

    @property
    def structural_files(self) -> list[Path]:
        """Files the format requires ahead of content, in write order."""
        return [self.mimetype_file, self.container_file, self.package_file]


class ComicBook(BaseModel):
    """Comic book archive: optional ComicInfo metadata plus page files."""

    archive: Archive
    metadata_file: Path | None = None
    metadata: etree._ElementTree | None = None
    pages: list[Path] = Field(default_factory=list)

    class Config:
        arbitrary_types_allowed = True
