"""Exact byte-range reads from open image files."""

from __future__ import annotations

import asyncio
import logging
import os
from typing import BinaryIO, Union

from imgstream.errors import TruncatedInputError, create_user_error

LOGGER = logging.getLogger(__name__)

FileHandle = Union[int, BinaryIO]


def _read_into(handle: FileHandle, buffer: bytearray, offset: int) -> int:
    """Fill buffer from handle starting at offset with a single read call."""
    if isinstance(handle, int):
        data = os.pread(handle, len(buffer), offset)
        buffer[: len(data)] = data
        return len(data)

    handle.seek(offset)
    bytes_read = handle.readinto(memoryview(buffer))  # type: ignore[attr-defined]
    return bytes_read or 0


async def read_buffer(handle: FileHandle, count: int, offset: int) -> bytes:
    """Read exactly `count` bytes from `handle` starting at `offset`.

    The handle is owned by the caller and is never closed here. Integer file
    descriptors are read with ``os.pread`` and keep their cursor; file objects
    are seeked to `offset` and advance by the number of bytes read.

    Args:
        handle: Open binary file object or raw file descriptor.
        count: Number of bytes to read.
        offset: Byte offset to start reading from.

    Returns:
        bytes: Buffer of exactly `count` bytes.

    Raises:
        ValueError: If `count` or `offset` is negative.
        TruncatedInputError: If fewer than `count` bytes were available.
    """
    if count < 0:
        raise ValueError(f"count must be non-negative, got {count}")
    if offset < 0:
        raise ValueError(f"offset must be non-negative, got {offset}")

    buffer = bytearray(count)
    if count == 0:
        return bytes(buffer)

    bytes_read = await asyncio.to_thread(_read_into, handle, buffer, offset)
    LOGGER.debug("Read %d of %d bytes at offset %d", bytes_read, count, offset)
    if bytes_read != count:
        raise create_user_error(
            "Looks like the image is truncated",
            f"We tried to read {count} bytes at {offset}, but got {bytes_read} bytes instead",
            error_class=TruncatedInputError,
            count=count,
            offset=offset,
            bytes_read=bytes_read,
        )

    return bytes(buffer)


__all__ = ["FileHandle", "read_buffer"]
