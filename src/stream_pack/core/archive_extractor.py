"""Extract an archive into a private working directory."""

import logging
import shutil
import tempfile
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator

from stream_pack.core.errors import ExtractionError, StructuralError
from stream_pack.core.tools import run_tool
from stream_pack.models.archive import Archive, ArchiveType
from stream_pack.models.options import OptimizeOptions

log = logging.getLogger(__name__)


class ArchiveExtractor:
    """Sniffs an archive's format and unpacks it with the matching tool.

    File extensions are not trusted for choosing the tool: some archives
    are misnamed, so the leading magic bytes decide.
    """

    TEMP_PREFIX = "stream-pack-"
    RAR_MAGIC = b"Rar!"
    ZIP_MAGIC = b"PK"
    # unrar reports recoverable CRC mismatches with exit code 3.
    UNRAR_BENIGN_EXIT_CODES = frozenset({3})
    EPUB_CONTAINER = "META-INF/container.xml"

    def __init__(self, options: OptimizeOptions | None = None):
        self.options = options or OptimizeOptions()

    def extract(self, path: Path) -> Archive:
        """Extract ``path`` and list every regular file it contained.

        The working directory is removed again if extraction fails.
        """
        path = path.resolve()
        command = self._extract_command(path)

        work_dir = Path(tempfile.mkdtemp(prefix=self.TEMP_PREFIX))
        archive = Archive(source=path, work_dir=work_dir)
        try:
            run_tool(
                command,
                archive=path.name,
                cwd=work_dir,
                benign_exit_codes=(
                    self.UNRAR_BENIGN_EXIT_CODES
                    if command[0] == "unrar"
                    else frozenset()
                ),
                error_class=ExtractionError,
            )
        except ExtractionError:
            if not self.options.keep_temp:
                cleanup_archive(archive)
            raise

        archive.files = list_files(work_dir)
        archive.archive_type = self.detect_type(archive)
        log.debug(
            "%s: %d files, type %s, extracted to %s",
            archive.name,
            len(archive.files),
            archive.archive_type.value,
            work_dir,
        )
        return archive

    def _extract_command(self, path: Path) -> list[str]:
        """Pick the extraction command from the archive's magic bytes."""
        try:
            with open(path, "rb") as f:
                header = f.read(4)
        except OSError as e:
            raise ExtractionError(path.name, "extract", f"cannot read archive: {e}")

        if header.startswith(self.RAR_MAGIC):
            # -p- never asks for a password
            return ["unrar", "x", "-p-", "-idq", str(path)]
        if header.startswith(self.ZIP_MAGIC):
            return ["unzip", "-qq", str(path)]
        raise ExtractionError(
            path.name, "extract", f"unrecognized archive signature {header!r}"
        )

    def detect_type(self, archive: Archive) -> ArchiveType:
        """Classify an extracted archive.

        A META-INF/container.xml means EPUB; otherwise a ``.cb?`` extension
        means comic book.
        """
        if has_file(archive, self.EPUB_CONTAINER):
            return ArchiveType.EPUB

        suffix = archive.source.suffix.lower()
        if len(suffix) == 4 and suffix.startswith(".cb"):
            return ArchiveType.COMIC_BOOK

        return ArchiveType.UNKNOWN


def list_files(work_dir: Path) -> list[Path]:
    """Every regular file below ``work_dir`` in sorted path order."""
    return sorted(p for p in work_dir.rglob("*") if p.is_file())


def has_file(archive: Archive, relative_path: str) -> bool:
    """Check whether the archive contains ``relative_path``."""
    return archive.work_dir / relative_path in archive.files


def read_archive_file(archive: Archive, relative_path: str) -> bytes:
    """Read a file from the extracted archive.

    Raises:
        StructuralError: If the file cannot be read
    """
    try:
        return (archive.work_dir / relative_path).read_bytes()
    except OSError as e:
        raise StructuralError(archive.name, f"could not read {relative_path}: {e}")


def cleanup_archive(archive: Archive) -> None:
    """Remove the archive's working directory."""
    if archive.work_dir.exists():
        shutil.rmtree(archive.work_dir)
        log.debug("Removed %s", archive.work_dir)


@contextmanager
def open_archive(path: Path, options: OptimizeOptions) -> Iterator[Archive]:
    """Extract ``path`` for the duration of the block.

    The working directory belongs to this run only and is removed on exit,
    whether the block succeeded or not, unless ``keep_temp`` is set.
    """
    archive = ArchiveExtractor(options).extract(path)
    try:
        yield archive
    finally:
        if options.keep_temp:
            log.info("Keeping temporary directory %s", archive.work_dir)
        else:
            cleanup_archive(archive)
