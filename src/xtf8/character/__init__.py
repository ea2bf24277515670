"""Character processing layer for XTF8.

This module provides the UTF-8 structural scanner, the two-pass XTF8
transcoder built on it, and the byte stream reader and writer.
"""

from .scanner import (
    UTF8_ACCEPT,
    UTF8_REJECT,
    UTF8Scanner,
    byte_class,
    decode_step,
    is_utf8,
)
from .transcoder import (
    ABORTED,
    PUA_END,
    PUA_START,
    REPLACEMENT_CHARACTER,
    ScanCursor,
    TranscodeEvent,
    is_reserved,
    measure,
    pua_byte,
    pua_codepoint,
    transcode_into,
    transcode_size,
    transform,
)
from .stream import (
    open_input,
    open_output,
    read_input,
    read_stream,
    write_output,
    write_stream,
)

__all__ = [
    # Modules
    "scanner",
    "transcoder",
    "stream",
    # Scanner
    "UTF8_ACCEPT",
    "UTF8_REJECT",
    "UTF8Scanner",
    "byte_class",
    "decode_step",
    "is_utf8",
    # Transcoder
    "ABORTED",
    "PUA_END",
    "PUA_START",
    "REPLACEMENT_CHARACTER",
    "ScanCursor",
    "TranscodeEvent",
    "is_reserved",
    "measure",
    "pua_byte",
    "pua_codepoint",
    "transcode_into",
    "transcode_size",
    "transform",
    # Streams
    "open_input",
    "open_output",
    "read_input",
    "read_stream",
    "write_output",
    "write_stream",
]
