"""Buffer readable byte streams into memory."""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import AsyncIterable, AsyncIterator, List, Union

ByteChunk = Union[bytes, bytearray, memoryview]

DEFAULT_CHUNK_SIZE = 64 * 1024


async def extract_stream(stream: AsyncIterable[ByteChunk]) -> bytes:
    """Consume `stream` to completion and return its concatenated data.

    Only use this on streams known to fit in memory; there is no size cap.
    Any exception raised by the stream propagates and the chunks gathered so
    far are dropped.

    Args:
        stream: Async iterable yielding bytes-like chunks, such as an async
            generator or an ``asyncio.StreamReader``.

    Returns:
        bytes: All chunks joined in arrival order.
    """
    chunks: List[ByteChunk] = []
    async for chunk in stream:
        chunks.append(chunk)
    return b"".join(chunks)


async def iter_file_chunks(
    path: Path | str, chunk_size: int = DEFAULT_CHUNK_SIZE
) -> AsyncIterator[bytes]:
    """Yield the contents of the file at `path` in chunks of `chunk_size` bytes.

    The file stays open until the generator is exhausted or closed; wrap
    early-exiting consumers in ``contextlib.aclosing``.
    """
    if chunk_size <= 0:
        raise ValueError(f"chunk_size must be positive, got {chunk_size}")
    handle = await asyncio.to_thread(open, Path(path), "rb")
    try:
        while True:
            chunk = await asyncio.to_thread(handle.read, chunk_size)
            if not chunk:
                return
            yield chunk
    finally:
        await asyncio.to_thread(handle.close)


__all__ = ["ByteChunk", "DEFAULT_CHUNK_SIZE", "extract_stream", "iter_file_chunks"]
