"""XML metadata records: lossless parse, streaming flag, serialization."""

from lxml import etree

from stream_pack.core.errors import DescriptorParseError

SOP_NAMESPACE = "http://www.codedread.com/sop"
ARCHIVE_FILE_INFO = f"{{{SOP_NAMESPACE}}}ArchiveFileInfo"
OPTIMIZED_FOR_STREAMING = "optimizedForStreaming"


def _parser() -> etree.XMLParser:
    # Whitespace and comments are kept so that a rewrite only adds the flag.
    return etree.XMLParser(
        remove_blank_text=False,
        remove_comments=False,
        resolve_entities=False,
        no_network=True,
    )


def parse_xml(data: bytes, archive: str, name: str) -> etree._ElementTree:
    """Parse an XML record, keeping every node it contains.

    Raises:
        DescriptorParseError: If the document is not well-formed
    """
    try:
        root = etree.fromstring(data, parser=_parser())
    except etree.XMLSyntaxError as e:
        raise DescriptorParseError(archive, f"{name} is not well-formed XML: {e}")
    return root.getroottree()


def new_record(tag: str) -> etree._ElementTree:
    """Create an empty metadata record with the given root tag."""
    return etree.ElementTree(etree.Element(tag))


def set_streaming_flag(tree: etree._ElementTree) -> etree._Element:
    """Mark a metadata record as optimized for streaming.

    Reuses an existing ArchiveFileInfo element, otherwise appends one as the
    last child of the root.
    """
    root = tree.getroot()
    info = root.find(ARCHIVE_FILE_INFO)
    if info is None:
        info = etree.SubElement(
            root, ARCHIVE_FILE_INFO, nsmap={"sop": SOP_NAMESPACE}
        )
        _place_after_siblings(root, info)
    info.set(OPTIMIZED_FOR_STREAMING, "true")
    return info


def is_streaming_optimized(tree: etree._ElementTree) -> bool:
    info = tree.getroot().find(ARCHIVE_FILE_INFO)
    return info is not None and info.get(OPTIMIZED_FOR_STREAMING) == "true"


def _place_after_siblings(root: etree._Element, added: etree._Element) -> None:
    """Put an appended child on its own line before the closing tag.

    Existing children keep their tails byte for byte, so the new element
    starts at the beginning of the line.
    """
    siblings = [child for child in root if child is not added]
    if not siblings:
        return
    added.tail = siblings[-1].tail


def serialize(tree: etree._ElementTree) -> bytes:
    """Serialize a record as UTF-8 with an XML declaration."""
    return etree.tostring(tree, xml_declaration=True, encoding="utf-8")
