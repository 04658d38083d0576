"""Blocking invocation of the external archive and image tools."""

import logging
import shutil
import subprocess
from pathlib import Path

from stream_pack.core.errors import ExternalToolError

log = logging.getLogger(__name__)


def run_tool(
    args: list[str],
    archive: str,
    cwd: Path | None = None,
    stdin: str | None = None,
    benign_exit_codes: frozenset[int] = frozenset(),
    error_class: type[ExternalToolError] = ExternalToolError,
    timeout: float | None = None,
) -> subprocess.CompletedProcess:
    """Run an external program to completion.

    Args:
        args: Program name followed by its arguments
        archive: Archive filename, used in error messages
        cwd: Working directory for the program
        stdin: Text fed to the program's standard input
        benign_exit_codes: Non-zero exit codes that still count as success
        error_class: ExternalToolError subclass raised on failure
        timeout: Seconds before the program is killed

    Returns:
        The completed process with captured output

    Raises:
        ExternalToolError: If the program is missing, times out, or exits
            with a status that is neither zero nor benign
    """
    tool = args[0]
    if shutil.which(tool) is None:
        raise error_class(archive, tool, "program not found on PATH")

    log.debug("Running %s (cwd=%s)", " ".join(args), cwd)
    # Tools must never wait on a prompt (passwords, overwrite questions).
    feed = {"input": stdin} if stdin is not None else {"stdin": subprocess.DEVNULL}
    try:
        result = subprocess.run(
            args,
            cwd=cwd,
            capture_output=True,
            text=True,
            timeout=timeout,
            **feed,
        )
    except subprocess.TimeoutExpired:
        raise error_class(archive, tool, f"timed out after {timeout}s")

    output = (result.stdout or "") + (result.stderr or "")
    if output.strip():
        log.debug("%s output:\n%s", tool, output.rstrip())

    if result.returncode != 0:
        if result.returncode in benign_exit_codes:
            log.warning(
                "%s: %s exited with code %d, continuing with the files produced",
                archive,
                tool,
                result.returncode,
            )
        else:
            raise error_class(
                archive,
                tool,
                f"exited with code {result.returncode}",
                returncode=result.returncode,
                output=output,
            )

    return result
