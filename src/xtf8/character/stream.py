"""Byte stream reading and writing for the transcoding layer.

Reads an entire input stream into one contiguous buffer and writes an output
buffer back out in blocks, turning partial writes and I/O failures into
stream errors.
"""

import sys
from contextlib import contextmanager
from pathlib import Path
from typing import BinaryIO, Iterator, Optional, Union

from ..shared.config import DEFAULT_BLOCK_SIZE, StreamConfig
from ..shared.errors import InputTooLargeError, StreamReadError, StreamWriteError
from ..shared.logging import get_logger

PathLike = Union[str, Path]

# Marker meaning "use the process's standard stream"
STANDARD_STREAM = "-"

_logger = get_logger(__name__, component="stream")


def read_stream(
    stream: BinaryIO,
    block_size: int = DEFAULT_BLOCK_SIZE,
    max_size: Optional[int] = None,
) -> bytes:
    """Read a binary stream until EOF.

    Args:
        stream: Binary stream to read from
        block_size: Number of bytes requested per read
        max_size: Optional upper bound on the total input size

    Returns:
        The complete stream contents

    Raises:
        StreamReadError: reading failed
        InputTooLargeError: the input exceeded ``max_size``
    """
    if block_size <= 0:
        raise ValueError("block_size must be > 0")

    buffer = bytearray()
    while True:
        try:
            block = stream.read(block_size)
        except OSError as e:
            raise StreamReadError(f"read failed after {len(buffer)} bytes: {e}") from e
        if not block:
            break
        if not isinstance(block, (bytes, bytearray)):
            raise StreamReadError(
                f"stream returned {type(block).__name__}, expected bytes"
            )
        buffer += block
        if max_size is not None and len(buffer) > max_size:
            raise InputTooLargeError(max_size)

    _logger.debug(f"Read {len(buffer)} bytes", extra={"bytes": len(buffer)})
    return bytes(buffer)


def write_stream(
    stream: BinaryIO,
    data: Union[bytes, bytearray, memoryview],
    block_size: int = DEFAULT_BLOCK_SIZE,
) -> int:
    """Write a buffer to a binary stream in blocks and flush it.

    Returns:
        Number of bytes written

    Raises:
        StreamWriteError: a write failed or stored fewer bytes than given
    """
    if block_size <= 0:
        raise ValueError("block_size must be > 0")

    view = memoryview(data)
    written = 0
    try:
        while written < len(view):
            block = view[written:written + block_size]
            count = stream.write(block)
            if count is not None and count != len(block):
                raise StreamWriteError(
                    f"partial write: {count} of {len(block)} bytes at offset {written}"
                )
            written += len(block)
        stream.flush()
    except OSError as e:
        raise StreamWriteError(f"write failed after {written} bytes: {e}") from e

    _logger.debug(f"Wrote {written} bytes", extra={"bytes": written})
    return written


def _is_standard(path: Optional[PathLike]) -> bool:
    return path is None or str(path) == STANDARD_STREAM


@contextmanager
def open_input(path: Optional[PathLike] = None) -> Iterator[BinaryIO]:
    """Open a file for binary reading, or yield stdin for ``None``/``"-"``.

    Standard streams are never closed.
    """
    if _is_standard(path):
        yield sys.stdin.buffer
        return
    try:
        handle = open(path, "rb")  # type: ignore[arg-type]
    except OSError as e:
        raise StreamReadError(f"cannot open {path}: {e}") from e
    with handle:
        yield handle


@contextmanager
def open_output(path: Optional[PathLike] = None) -> Iterator[BinaryIO]:
    """Open a file for binary writing, or yield stdout for ``None``/``"-"``."""
    if _is_standard(path):
        yield sys.stdout.buffer
        return
    try:
        handle = open(path, "wb")  # type: ignore[arg-type]
    except OSError as e:
        raise StreamWriteError(f"cannot open {path}: {e}") from e
    with handle:
        yield handle


def read_input(path: Optional[PathLike], config: Optional[StreamConfig] = None) -> bytes:
    """Read a whole file (or stdin) using the stream settings."""
    config = config or StreamConfig()
    with open_input(path) as stream:
        return read_stream(stream, config.block_size, config.max_input_size_bytes)


def write_output(
    path: Optional[PathLike],
    data: Union[bytes, bytearray, memoryview],
    config: Optional[StreamConfig] = None,
) -> int:
    """Write a whole buffer to a file (or stdout) using the stream settings."""
    config = config or StreamConfig()
    with open_output(path) as stream:
        return write_stream(stream, data, config.block_size)
