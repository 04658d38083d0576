"""Errors raised while repackaging an archive.

Every error carries the archive filename so that a failed run always names
the book it was working on.
"""


class StreamPackError(Exception):
    """Base error for a single archive run."""

    def __init__(self, archive: str, message: str):
        self.archive = archive
        self.message = message
        super().__init__(f"{archive}: {message}")


class StructuralError(StreamPackError):
    """A file the format requires is missing, duplicated or unusable."""


class DescriptorParseError(StructuralError):
    """Container or package descriptor is not well-formed."""


class UnsupportedArchiveError(StructuralError):
    """Archive is neither an EPUB nor a comic book."""


class ReferentialIntegrityError(StreamPackError):
    """Spine and manifest disagree, or the resolved order lost a file."""


class MarkupParseError(StreamPackError):
    """A markup document could not be tokenized."""

    def __init__(self, archive: str, document: str, reason: str):
        self.document = document
        super().__init__(archive, f"could not scan {document}: {reason}")


class ExternalToolError(StreamPackError):
    """External program is missing or exited with a non-benign status."""

    def __init__(
        self,
        archive: str,
        tool: str,
        message: str,
        returncode: int | None = None,
        output: str = "",
    ):
        self.tool = tool
        self.returncode = returncode
        self.output = output
        super().__init__(archive, f"{tool}: {message}")


class ExtractionError(ExternalToolError):
    """Archive could not be extracted."""


class PackError(ExternalToolError):
    """Output archive could not be written."""


class ConversionError(ExternalToolError):
    """A single image could not be converted. Callers keep the original."""
