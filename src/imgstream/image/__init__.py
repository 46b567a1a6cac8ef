"""Image file helpers: exact range reads, archive type detection, stream buffering."""

from .collector import extract_stream
from .detectors import ArchiveTypeDetector, get_archive_mime_type
from .reader import read_buffer

__all__ = [
    "ArchiveTypeDetector",
    "extract_stream",
    "get_archive_mime_type",
    "read_buffer",
]
