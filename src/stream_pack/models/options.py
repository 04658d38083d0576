"""Run configuration passed explicitly into each component."""

from pydantic import BaseModel


class OptimizeOptions(BaseModel):
    """Options recognized by the optimize pipeline."""

    verbose: bool = False
    case_sensitive_sort: bool = False
    keep_temp: bool = False
    convert_images: bool = False
