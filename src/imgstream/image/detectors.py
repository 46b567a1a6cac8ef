"""Archive and raw image MIME type detection."""

from __future__ import annotations

import asyncio
import logging
import mimetypes
from pathlib import Path
from typing import Optional

import filetype

from .reader import read_buffer

LOGGER = logging.getLogger(__name__)

MIME_TYPE_RAW_IMAGE = "application/octet-stream"
FILE_TYPE_ID_START = 0
FILE_TYPE_ID_BYTES = 262

# Compression suffixes that mimetypes treats as encodings rather than types.
_COMPRESSION_TYPES = {
    ".gz": "application/gzip",
    ".bz2": "application/x-bzip2",
    ".xz": "application/x-xz",
    ".zst": "application/zstd",
    ".lz4": "application/x-lz4",
}


def _build_extension_table() -> mimetypes.MimeTypes:
    # A fresh MimeTypes only carries the built-in defaults, not /etc/mime.types.
    table = mimetypes.MimeTypes()
    for extension, mime_type in _COMPRESSION_TYPES.items():
        table.add_type(mime_type, extension, strict=True)
    return table


_EXTENSION_TABLE = _build_extension_table()


def lookup_extension(path: Path | str) -> Optional[str]:
    """Return the MIME type mapped to the last suffix of `path`, if any."""
    suffix = Path(path).suffix.lower()
    if not suffix:
        return None
    strict_map, common_map = _EXTENSION_TABLE.types_map[True], _EXTENSION_TABLE.types_map[False]
    return strict_map.get(suffix) or common_map.get(suffix)


def sniff_mime_type(header: bytes) -> Optional[str]:
    """Return the MIME type matching the magic bytes in `header`, if any."""
    kind = filetype.guess(header)
    if kind is None:
        return None
    return kind.mime


class ArchiveTypeDetector:
    """Resolve MIME types for archives and raw disk images.

    Extension lookup runs first and never touches the file. Only when the
    extension is unknown is the file opened and its header sniffed.
    """

    def __init__(
        self,
        *,
        sniff_bytes: int = FILE_TYPE_ID_BYTES,
        fallback_mime_type: str = MIME_TYPE_RAW_IMAGE,
    ) -> None:
        if sniff_bytes <= 0:
            raise ValueError(f"sniff_bytes must be positive, got {sniff_bytes}")
        self.sniff_bytes = sniff_bytes
        self.fallback_mime_type = fallback_mime_type

    async def detect(self, path: Path | str) -> str:
        """Return the MIME type for the file at `path`.

        Args:
            path: Location of the archive or image file.

        Returns:
            str: Extension-derived MIME type, sniffed MIME type, or the
            configured fallback when neither resolves.

        Raises:
            OSError: If the file has to be opened and cannot be.
            TruncatedInputError: If the file is shorter than the sniff size.
        """
        mime_type = lookup_extension(path)
        if mime_type:
            LOGGER.info("Resolved %s to %s by extension", path, mime_type)
            return mime_type

        handle = await asyncio.to_thread(open, Path(path), "rb")
        try:
            header = await read_buffer(handle, self.sniff_bytes, FILE_TYPE_ID_START)
        finally:
            await asyncio.to_thread(handle.close)

        sniffed = sniff_mime_type(header)
        if sniffed:
            LOGGER.info("Resolved %s to %s by magic bytes", path, sniffed)
            return sniffed

        LOGGER.info("No signature matched %s; using %s", path, self.fallback_mime_type)
        return self.fallback_mime_type


async def get_archive_mime_type(path: Path | str) -> str:
    """Return the MIME type for `path` using the default detector settings."""
    return await ArchiveTypeDetector().detect(path)


__all__ = [
    "ArchiveTypeDetector",
    "FILE_TYPE_ID_BYTES",
    "MIME_TYPE_RAW_IMAGE",
    "get_archive_mime_type",
    "lookup_extension",
    "sniff_mime_type",
]
