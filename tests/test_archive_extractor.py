"""Tests for archive extraction and type detection."""

import shutil
import zipfile

import pytest
from conftest import CONTAINER_XML, requires_unzip

from stream_pack.core.archive_extractor import (
    ArchiveExtractor,
    has_file,
    open_archive,
    read_archive_file,
)
from stream_pack.core.errors import ExtractionError, StructuralError
from stream_pack.models.archive import ArchiveType
from stream_pack.models.options import OptimizeOptions


def make_zip(path, files: dict[str, bytes]):
    with zipfile.ZipFile(path, "w") as zf:
        for name, data in files.items():
            zf.writestr(name, data)
    return path


class TestDetectType:
    """Tests for ArchiveExtractor.detect_type."""

    def test_container_means_epub(self, make_archive):
        """META-INF/container.xml wins over the extension."""
        archive = make_archive(
            {"META-INF/container.xml": CONTAINER_XML}, source_name="misnamed.cbz"
        )
        assert archive.archive_type == ArchiveType.EPUB

    @pytest.mark.parametrize("name", ["book.cbz", "book.cbr", "BOOK.CBZ", "book.cb7"])
    def test_cb_extension_means_comic(self, make_archive, name):
        """Any .cb? extension is a comic book."""
        archive = make_archive({"01.jpg": b"x"}, source_name=name)
        assert archive.archive_type == ArchiveType.COMIC_BOOK

    def test_anything_else_is_unknown(self, make_archive):
        """A zip that is neither stays unknown."""
        archive = make_archive({"readme.txt": b"x"}, source_name="stuff.zip")
        assert archive.archive_type == ArchiveType.UNKNOWN


class TestArchiveFiles:
    """Tests for reading files from an extracted archive."""

    def test_has_and_read_file(self, make_archive):
        """Files are found and read by archive-relative path."""
        archive = make_archive({"a/b.txt": b"hello"})
        assert has_file(archive, "a/b.txt")
        assert not has_file(archive, "a/c.txt")
        assert read_archive_file(archive, "a/b.txt") == b"hello"

    def test_read_missing_file(self, make_archive):
        """Reading a missing file is a structural error naming it."""
        archive = make_archive({"a.txt": b"x"})
        with pytest.raises(StructuralError, match="missing.txt"):
            read_archive_file(archive, "missing.txt")

    def test_files_listed_in_sorted_path_order(self, make_archive):
        """Directories are skipped and files come back sorted by path."""
        archive = make_archive({"b.txt": b"", "a/z.txt": b"", "a.txt": b""})
        assert [archive.relative(p) for p in archive.files] == ["a/z.txt", "a.txt", "b.txt"]


class TestExtract:
    """Tests for ArchiveExtractor.extract."""

    def test_unrecognized_signature(self, tmp_path):
        """Files that are neither zip nor rar are rejected."""
        source = tmp_path / "book.cbz"
        source.write_bytes(b"GIF89a not an archive")
        with pytest.raises(ExtractionError, match="signature"):
            ArchiveExtractor().extract(source)

    @requires_unzip
    def test_extract_zip(self, tmp_path):
        """A zip is unpacked and every file listed."""
        source = make_zip(tmp_path / "comic.cbz", {"01.jpg": b"1", "sub/02.jpg": b"2"})

        archive = ArchiveExtractor().extract(source)
        try:
            assert archive.archive_type == ArchiveType.COMIC_BOOK
            assert [archive.relative(p) for p in archive.files] == ["01.jpg", "sub/02.jpg"]
        finally:
            shutil.rmtree(archive.work_dir)

    @requires_unzip
    def test_open_archive_cleans_up(self, tmp_path):
        """The working directory is removed when the block exits."""
        source = make_zip(tmp_path / "comic.cbz", {"01.jpg": b"1"})

        with open_archive(source, OptimizeOptions()) as archive:
            work_dir = archive.work_dir
            assert work_dir.exists()

        assert not work_dir.exists()

    @requires_unzip
    def test_open_archive_cleans_up_on_error(self, tmp_path):
        """Cleanup also happens when the block raises."""
        source = make_zip(tmp_path / "comic.cbz", {"01.jpg": b"1"})

        with pytest.raises(RuntimeError):
            with open_archive(source, OptimizeOptions()) as archive:
                work_dir = archive.work_dir
                raise RuntimeError("stop")

        assert not work_dir.exists()

    @requires_unzip
    def test_keep_temp(self, tmp_path):
        """keep_temp leaves the working directory behind."""
        source = make_zip(tmp_path / "comic.cbz", {"01.jpg": b"1"})

        with open_archive(source, OptimizeOptions(keep_temp=True)) as archive:
            work_dir = archive.work_dir

        assert work_dir.exists()
        shutil.rmtree(work_dir)
