"""Convert page images to WebP with cwebp."""

import logging
from pathlib import Path

from stream_pack.core.errors import ConversionError
from stream_pack.core.tools import run_tool

log = logging.getLogger(__name__)

CONVERTIBLE_SUFFIXES = (".png", ".jpg", ".jpeg")


def convert_to_webp(image: Path, archive: str = "") -> Path:
    """Write a WebP copy next to ``image`` and return its path.

    Raises:
        ConversionError: If the image is not PNG/JPEG or cwebp fails
    """
    if image.suffix.lower() not in CONVERTIBLE_SUFFIXES:
        raise ConversionError(archive, "cwebp", f"{image.name} cannot be converted to WebP")

    webp = image.with_suffix(".webp")
    run_tool(
        ["cwebp", "-quiet", str(image), "-o", str(webp)],
        archive=archive,
        error_class=ConversionError,
    )
    log.debug("Converted %s -> %s", image.name, webp.name)
    return webp
