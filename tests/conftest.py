"""Shared fixtures: extracted archives built directly on disk."""

import shutil
from pathlib import Path

import pytest

from stream_pack.core.archive_extractor import ArchiveExtractor, list_files
from stream_pack.models.archive import Archive

CONTAINER_XML = b"""<?xml version="1.0" encoding="UTF-8"?>
<container xmlns="urn:oasis:names:tc:opendocument:xmlns:container" version="1.0">
  <rootfiles>
    <rootfile full-path="OEBPS/content.opf" media-type="application/oebps-package+xml"/>
  </rootfiles>
</container>"""

XHTML = "application/xhtml+xml"

requires_zip = pytest.mark.skipif(
    shutil.which("zip") is None, reason="zip program not installed"
)
requires_unzip = pytest.mark.skipif(
    shutil.which("unzip") is None, reason="unzip program not installed"
)


def make_opf(items, spine, extra: str = "") -> bytes:
    """Build a package descriptor.

    ``items`` are (id, href, media-type) tuples; ``spine`` entries are ids
    or (id, linear) tuples.
    """
    manifest = "\n".join(
        f'    <item id="{i}" href="{h}" media-type="{m}"/>' for i, h, m in items
    )
    refs = []
    for entry in spine:
        idref, linear = entry if isinstance(entry, tuple) else (entry, True)
        linear_attr = "" if linear else ' linear="no"'
        refs.append(f'    <itemref idref="{idref}"{linear_attr}/>')
    return (
        "<?xml version='1.0' encoding='utf-8'?>\n"
        '<package xmlns="http://www.idpf.org/2007/opf" version="3.0" '
        'unique-identifier="uid">\n'
        '  <metadata xmlns:dc="http://purl.org/dc/elements/1.1/">\n'
        "    <dc:title>Test Book</dc:title>\n"
        "  </metadata>\n"
        f"  <manifest>\n{manifest}\n  </manifest>\n"
        "  <spine>\n" + "\n".join(refs) + "\n  </spine>\n"
        f"{extra}"
        "</package>"
    ).encode("utf-8")


def xhtml(body: str) -> bytes:
    return (
        '<?xml version="1.0" encoding="utf-8"?>\n'
        '<html xmlns="http://www.w3.org/1999/xhtml"><head><title>t</title></head>'
        f"<body>{body}</body></html>"
    ).encode("utf-8")


def write_tree(root: Path, files: dict[str, bytes]) -> None:
    for relative, data in files.items():
        path = root / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(data)


@pytest.fixture
def make_archive(tmp_path):
    """Factory for an already-extracted archive."""

    def _make(files: dict[str, bytes], source_name: str = "book.epub") -> Archive:
        work_dir = tmp_path / "work"
        write_tree(work_dir, files)
        archive = Archive(source=tmp_path / source_name, work_dir=work_dir)
        archive.files = list_files(work_dir)
        archive.archive_type = ArchiveExtractor().detect_type(archive)
        return archive

    return _make


@pytest.fixture
def sample_epub_files() -> dict[str, bytes]:
    """A small book whose first chapter embeds a stylesheet and two images."""
    items = [
        ("ch1", "text/ch1.xhtml", XHTML),
        ("ch2", "text/ch2.xhtml", XHTML),
        ("css", "style.css", "text/css"),
        ("a", "images/a.jpg", "image/jpeg"),
        ("b", "images/b.jpg", "image/jpeg"),
        ("unused", "images/unused.png", "image/png"),
        ("ncx", "toc.ncx", "application/x-dtbncx+xml"),
    ]
    return {
        "mimetype": b"application/epub+zip",
        "META-INF/container.xml": CONTAINER_XML,
        "OEBPS/content.opf": make_opf(items, ["ch1", "ch2"]),
        "OEBPS/text/ch1.xhtml": xhtml(
            '<link rel="stylesheet" href="../style.css"/>'
            '<p><img src="../images/b.jpg"/></p><img src="../images/a.jpg"/>'
        ),
        "OEBPS/text/ch2.xhtml": xhtml('<img src="../images/a.jpg"/>'),
        "OEBPS/style.css": b"body { margin: 0 }",
        "OEBPS/images/a.jpg": b"\xff\xd8a",
        "OEBPS/images/b.jpg": b"\xff\xd8b",
        "OEBPS/images/unused.png": b"\x89PNG",
        "OEBPS/toc.ncx": b"<ncx/>",
    }
