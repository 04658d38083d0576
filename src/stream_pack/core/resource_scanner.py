"""Find the resources a markup document pulls in.

The document is streamed through lxml's pull parser as a sequence of start
tags; no tree is kept or queried. Only three references are recognized:

- ``<picture srcset>``
- ``<img src>``
- ``<link rel="stylesheet" href>``

Everything else is ignored. This is a discovery sweep, not a validator.
"""

import posixpath
from urllib.parse import unquote, urlsplit

from lxml import etree

from stream_pack.core.errors import MarkupParseError

CHUNK_SIZE = 64 * 1024


def _picture(attrs) -> list[str]:
    srcset = attrs.get("srcset", "")
    # "a.jpg 1x, b.jpg 2x" -> ["a.jpg", "b.jpg"]
    return [c.split()[0] for c in srcset.split(",") if c.strip()]


def _img(attrs) -> list[str]:
    src = attrs.get("src", "")
    return [src] if src else []


def _link(attrs) -> list[str]:
    rel = attrs.get("rel", "").strip().lower()
    href = attrs.get("href", "")
    return [href] if rel == "stylesheet" and href else []


RULES = {
    "picture": _picture,
    "img": _img,
    "link": _link,
}


def resolve_reference(url: str, base_dir: str) -> str | None:
    """Turn a reference found in markup into an archive-relative path.

    Returns None for references that cannot name a file in the archive:
    external URLs, ``data:`` URIs, bare fragments, and paths that climb
    above the archive root.
    """
    parts = urlsplit(url.strip())
    if parts.scheme or parts.netloc:
        return None
    path = unquote(parts.path)
    if not path:
        return None

    if path.startswith("/"):
        resolved = posixpath.normpath(path.lstrip("/"))
    else:
        resolved = posixpath.normpath(posixpath.join(base_dir, path))

    if resolved == ".." or resolved.startswith("../"):
        return None
    return resolved


def _encoding_for(document: bytes) -> str | None:
    # libxml2 does not honor the XML declaration of XHTML served to the
    # HTML parser, so UTF-8 is forced whenever it decodes cleanly.
    try:
        document.decode("utf-8")
    except UnicodeDecodeError:
        return None
    return "utf-8"


def scan(
    document: bytes,
    base_dir: str,
    archive: str = "",
    name: str = "",
) -> list[str]:
    """Scan a markup document for embedded resources.

    Args:
        document: Raw bytes of the (X)HTML document
        base_dir: Archive-relative directory of the document
        archive: Archive filename, used in error messages
        name: Archive-relative path of the document, used in error messages

    Returns:
        Archive-relative resource paths in document order. The same input
        always produces the same list.

    Raises:
        MarkupParseError: If the document cannot be tokenized at all
    """
    if not document.strip():
        return []

    candidates: list[str] = []

    def collect(events) -> None:
        for _, element in events:
            if not isinstance(element.tag, str):
                continue
            rule = RULES.get(element.tag.lower())
            if rule is None:
                continue
            for url in rule(element.attrib):
                resolved = resolve_reference(url, base_dir)
                if resolved is not None:
                    candidates.append(resolved)

    parser = etree.HTMLPullParser(events=("start",), encoding=_encoding_for(document))
    # The HTML parser recovers from broken markup, so only failures inside
    # libxml2 itself reach the except clause.
    try:
        for offset in range(0, len(document), CHUNK_SIZE):
            parser.feed(document[offset : offset + CHUNK_SIZE])
            collect(parser.read_events())
        parser.close()
    except (etree.ParserError, etree.XMLSyntaxError) as e:
        raise MarkupParseError(archive, name, str(e)) from e
    collect(parser.read_events())

    return candidates
