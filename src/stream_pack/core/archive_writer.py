"""Write a book back into a zip archive in resolved order."""

import logging
from pathlib import Path

from stream_pack.core.errors import PackError
from stream_pack.core.tools import run_tool

log = logging.getLogger(__name__)


class ArchiveWriter:
    """Appends files to a zip archive through the ``zip`` program.

    zip appends entries in the order it reads their names, so calling
    ``add`` repeatedly builds the archive front to back. Names are fed on
    standard input to stay clear of command-line length limits.
    """

    STORED = "-0"
    COMPRESSED = "-9"

    def __init__(self, destination: Path, work_dir: Path, archive: str = ""):
        """Initialize archive writer.

        Args:
            destination: Path of the zip file to create
            work_dir: Directory entry names are relative to
            archive: Source archive filename, used in error messages
        """
        self.destination = destination.resolve()
        self.work_dir = work_dir
        self.archive = archive

    def prepare(self) -> None:
        """Remove a previous output and create the parent directories.

        Raises:
            PackError: If an existing destination cannot be removed
        """
        if self.destination.exists():
            try:
                self.destination.unlink()
            except OSError as e:
                raise PackError(
                    self.archive, "zip", f"could not remove {self.destination}: {e}"
                )
            log.debug("Removed existing %s", self.destination)
        self.destination.parent.mkdir(parents=True, exist_ok=True)

    def add(
        self,
        files: list[Path],
        compression: str = COMPRESSED,
        junk_paths: bool = False,
    ) -> None:
        """Append ``files`` to the archive in list order.

        Args:
            files: Absolute paths below the work directory
            compression: ``STORED`` or ``COMPRESSED``
            junk_paths: Store bare filenames instead of relative paths

        Raises:
            PackError: If zip exits with a non-zero status
        """
        if not files:
            return
        names = [path.relative_to(self.work_dir).as_posix() for path in files]
        args = ["zip", "-q", "-X", "-D", compression]
        if junk_paths:
            args.append("-j")
        args += [str(self.destination), "-@"]

        run_tool(
            args,
            archive=self.archive,
            cwd=self.work_dir,
            stdin="\n".join(names) + "\n",
            error_class=PackError,
        )
        log.debug("Added %d file(s) to %s", len(files), self.destination.name)
