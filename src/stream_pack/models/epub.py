"""Data models for EPUB package descriptors."""

import posixpath

from lxml import etree
from pydantic import BaseModel, Field


class ContainerPointer(BaseModel):
    """The single ``<rootfile>`` declared by META-INF/container.xml."""

    full_path: str
    media_type: str = "application/oebps-package+xml"


class ManifestItem(BaseModel):
    """Single ``<item>`` of the package manifest."""

    id: str
    href: str
    media_type: str = ""

    @property
    def is_markup(self) -> bool:
        return self.media_type in ("application/xhtml+xml", "text/html")


class SpineItemRef(BaseModel):
    """Single ``<itemref>`` of the package spine."""

    idref: str
    linear: bool = True


class PackageDescriptor(BaseModel):
    """Parsed OPF package descriptor.

    ``tree`` keeps the whole parsed document so that everything not modeled
    here is written back unchanged.
    """

    path: str
    manifest: dict[str, ManifestItem] = Field(default_factory=dict)
    spine: list[SpineItemRef] = Field(default_factory=list)
    tree: etree._ElementTree

    class Config:
        arbitrary_types_allowed = True

    @property
    def base_dir(self) -> str:
        """Directory of the descriptor, against which manifest hrefs resolve."""
        return posixpath.dirname(self.path)
