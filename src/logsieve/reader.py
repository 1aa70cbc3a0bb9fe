"""Byte sources feeding an engine: files, binary streams and pipes (sync and async with tailing)."""

from __future__ import annotations

import asyncio
import logging
import sys
from typing import IO, TYPE_CHECKING

import aiofiles

if TYPE_CHECKING:
    from pathlib import Path

    from logsieve.engine import LogEngine

logger = logging.getLogger(__name__)

DEFAULT_CHUNK_SIZE = 4096


def is_pipe() -> bool:
    """Check if stdin is a pipe (not a terminal)."""
    return not sys.stdin.isatty()


def feed_stream(stream: IO[bytes], engine: LogEngine, chunk_size: int = DEFAULT_CHUNK_SIZE) -> int:
    """Feed a binary stream to the engine until EOF, then end the stream.

    Returns the number of bytes read.
    """
    total = 0
    while chunk := stream.read(chunk_size):
        total += len(chunk)
        engine.feed(chunk)
    engine.end_of_stream()
    return total


def feed_file(path: Path, engine: LogEngine, chunk_size: int = DEFAULT_CHUNK_SIZE) -> int:
    """Feed a whole file to the engine (synchronous)."""
    with path.open("rb") as f:
        return feed_stream(f, engine, chunk_size)


async def feed_file_async(
    path: Path,
    engine: LogEngine,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
    tail: bool = False,
    poll_interval: float = 0.1,
) -> int:
    """Feed a file asynchronously, optionally following it for new content."""
    total = 0
    async with aiofiles.open(path, "rb") as f:
        while chunk := await f.read(chunk_size):
            total += len(chunk)
            engine.feed(chunk)

        if not tail:
            engine.end_of_stream()
            return total

        # Tail mode: poll for new content
        last_size = path.stat().st_size
        while True:
            chunk = await f.read(chunk_size)
            if chunk:
                total += len(chunk)
                engine.feed(chunk)
                continue
            # Check for file truncation (log rotation)
            try:
                current_size = path.stat().st_size
            except OSError:
                await asyncio.sleep(poll_interval * 2)
                continue
            if current_size < last_size:
                logger.info("%s was truncated, reading from the start", path)
                await f.seek(0)
            last_size = current_size
            await asyncio.sleep(poll_interval)


async def feed_pipe_async(pipe_fd: int, engine: LogEngine, chunk_size: int = DEFAULT_CHUNK_SIZE) -> int:
    """Feed a pipe file descriptor asynchronously until it closes."""
    total = 0
    async with aiofiles.open(pipe_fd, "rb", closefd=True) as f:
        while chunk := await f.read(chunk_size):
            total += len(chunk)
            engine.feed(chunk)
    engine.end_of_stream()
    return total
