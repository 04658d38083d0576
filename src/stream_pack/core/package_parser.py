"""Parse EPUB container and package descriptors with lxml."""

import logging

from stream_pack.core.errors import DescriptorParseError, StructuralError
from stream_pack.core.metadata import parse_xml
from stream_pack.models.epub import (
    ContainerPointer,
    ManifestItem,
    PackageDescriptor,
    SpineItemRef,
)

log = logging.getLogger(__name__)

CONTAINER_NS = "urn:oasis:names:tc:opendocument:xmlns:container"
OPF_NS = "http://www.idpf.org/2007/opf"
DC_NS = "http://purl.org/dc/elements/1.1/"

CONTAINER_PATH = "META-INF/container.xml"


def _q(namespace: str, tag: str) -> str:
    return f"{{{namespace}}}{tag}"


def parse_container(data: bytes, archive: str = "") -> ContainerPointer:
    """Parse META-INF/container.xml.

    Args:
        data: Raw bytes of the container file
        archive: Archive filename, used in error messages

    Returns:
        Pointer to the one package descriptor the container declares

    Raises:
        DescriptorParseError: If the container is not well-formed
        StructuralError: If it declares zero or several root files
    """
    root = parse_xml(data, archive, CONTAINER_PATH).getroot()
    if root.tag != _q(CONTAINER_NS, "container"):
        raise DescriptorParseError(
            archive, f"{CONTAINER_PATH} root element is {root.tag}, not container"
        )

    rootfiles = root.findall(
        f"{_q(CONTAINER_NS, 'rootfiles')}/{_q(CONTAINER_NS, 'rootfile')}"
    )
    if len(rootfiles) != 1:
        raise StructuralError(
            archive,
            f"{CONTAINER_PATH} declares {len(rootfiles)} <rootfile> elements, expected 1",
        )

    rootfile = rootfiles[0]
    full_path = rootfile.get("full-path")
    if not full_path:
        raise StructuralError(archive, f"{CONTAINER_PATH} <rootfile> has no full-path")

    pointer = ContainerPointer(full_path=full_path)
    if rootfile.get("media-type"):
        pointer.media_type = rootfile.get("media-type")
    log.debug("%s: package descriptor is %s", archive, full_path)
    return pointer


def parse_package(data: bytes, path: str, archive: str = "") -> PackageDescriptor:
    """Parse an OPF package descriptor.

    Only the manifest items and spine itemrefs are modeled; the parsed tree
    is kept on the descriptor so everything else survives a rewrite.

    Args:
        data: Raw bytes of the descriptor
        path: Archive-relative path of the descriptor
        archive: Archive filename, used in error messages

    Raises:
        DescriptorParseError: If the descriptor is not well-formed
        StructuralError: If the manifest or spine is missing, or an item is
            incomplete or declared twice
    """
    tree = parse_xml(data, archive, path)
    root = tree.getroot()
    if root.tag != _q(OPF_NS, "package"):
        raise DescriptorParseError(
            archive, f"{path} root element is {root.tag}, not package"
        )

    manifest_el = root.find(_q(OPF_NS, "manifest"))
    if manifest_el is None:
        raise StructuralError(archive, f"{path} has no <manifest>")
    spine_el = root.find(_q(OPF_NS, "spine"))
    if spine_el is None:
        raise StructuralError(archive, f"{path} has no <spine>")

    manifest: dict[str, ManifestItem] = {}
    for item_el in manifest_el.iterfind(_q(OPF_NS, "item")):
        item_id = item_el.get("id")
        href = item_el.get("href")
        if not item_id or not href:
            raise StructuralError(
                archive, f"{path} has a manifest <item> without id or href"
            )
        if item_id in manifest:
            raise StructuralError(
                archive, f"{path} declares manifest id {item_id} more than once"
            )
        manifest[item_id] = ManifestItem(
            id=item_id, href=href, media_type=item_el.get("media-type", "")
        )

    spine = []
    for ref_el in spine_el.iterfind(_q(OPF_NS, "itemref")):
        idref = ref_el.get("idref")
        if not idref:
            raise StructuralError(archive, f"{path} has a spine <itemref> without idref")
        spine.append(SpineItemRef(idref=idref, linear=ref_el.get("linear") != "no"))

    log.debug(
        "%s: %d manifest items, %d spine items", archive, len(manifest), len(spine)
    )
    return PackageDescriptor(path=path, manifest=manifest, spine=spine, tree=tree)


def package_title(package: PackageDescriptor) -> str | None:
    """The first dc:title of the package metadata, if any."""
    title = package.tree.getroot().find(f".//{_q(DC_NS, 'title')}")
    if title is None or not (title.text or "").strip():
        return None
    return title.text.strip()
