"""Helpers for reading, identifying, and buffering disk image data."""

from importlib import metadata as _metadata

from imgstream.errors import ImageStreamError, TruncatedInputError, UserError, create_user_error
from imgstream.image import ArchiveTypeDetector, extract_stream, get_archive_mime_type, read_buffer

__all__ = [
    "__version__",
    "ArchiveTypeDetector",
    "ImageStreamError",
    "TruncatedInputError",
    "UserError",
    "create_user_error",
    "extract_stream",
    "get_archive_mime_type",
    "read_buffer",
]


def __getattr__(name: str):
    if name == "__version__":
        return _metadata.version("imgstream")
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


def __dir__():
    return sorted(list(globals().keys()) + ["__version__"])
