"""Debugging aids for XTF8: byte dumps and scanner tracing.

The hexdump output matches ``hexdump -C``; it is used by the command-line
driver for ``--hexdump`` output and for the per-stage dumps printed in
verbose mode.
"""

from dataclasses import dataclass
from typing import Any, Dict, Iterator, Optional, TextIO, Union

from ..character.scanner import UTF8_ACCEPT, UTF8_REJECT, byte_class, decode_step
from ..character.transcoder import is_reserved

BytesLike = Union[bytes, bytearray, memoryview]

BYTES_PER_LINE = 16
HEX_COLUMN_WIDTH = 16 * 3 + 1
PRINTABLE_MIN = 0x20
PRINTABLE_MAX = 0x7E


def _format_line(offset: int, chunk: bytes) -> str:
    hex_part = ""
    for position, byte in enumerate(chunk):
        hex_part += f"{byte:02x} "
        if position == 7:
            hex_part += " "
    text = "".join(
        chr(byte) if PRINTABLE_MIN <= byte <= PRINTABLE_MAX else "." for byte in chunk
    )
    return f"{offset:08x}  {hex_part:<{HEX_COLUMN_WIDTH}.{HEX_COLUMN_WIDTH}} |{text}|"


def hexdump(data: BytesLike) -> str:
    """Render bytes in ``hexdump -C`` layout.

    Sixteen bytes per line: offset, hex octets with an extra gap after the
    eighth, then the printable ASCII rendering. A final line holds the
    total length.

    Examples:
        >>> print(hexdump(b"hello"))
        00000000  68 65 6c 6c 6f                                    |hello|
        00000005
    """
    raw = bytes(data)
    lines = [
        _format_line(offset, raw[offset:offset + BYTES_PER_LINE])
        for offset in range(0, len(raw), BYTES_PER_LINE)
    ]
    lines.append(f"{len(raw):08x}")
    return "\n".join(lines) + "\n"


def write_hexdump(
    stream: TextIO, data: BytesLike, title: Optional[str] = None
) -> None:
    """Write a hexdump to a text stream, optionally preceded by a title line."""
    if title:
        stream.write(f"{title} (len={len(data)})\n")
    stream.write(hexdump(data))
    stream.flush()


@dataclass
class ScanTraceEntry:
    """Scanner state after consuming one byte."""

    offset: int
    byte: int
    state: int
    codepoint: int
    byte_class: int

    @property
    def status(self) -> str:
        if self.state == UTF8_ACCEPT:
            return "reserved" if is_reserved(self.codepoint) else "accept"
        if self.state == UTF8_REJECT:
            return "reject"
        return "pending"

    def to_dict(self) -> Dict[str, Any]:
        """Convert trace entry to dictionary."""
        return {
            "offset": self.offset,
            "byte": f"0x{self.byte:02x}",
            "class": self.byte_class,
            "state": self.state,
            "status": self.status,
            "codepoint": (
                f"U+{self.codepoint:04X}" if self.state == UTF8_ACCEPT else None
            ),
        }


def trace_scan(data: BytesLike) -> Iterator[ScanTraceEntry]:
    """Yield the scanner state after each input byte.

    Follows the transcoder's path: after a REJECT the scanner resets, and a
    byte that broke a started sequence is scanned again, so it appears twice
    in the trace (first as ``reject``, then with its fresh state).
    """
    state = UTF8_ACCEPT
    codepoint = 0
    for offset, byte in enumerate(bytes(data)):
        previous = state
        state, codepoint = decode_step(state, codepoint, byte)
        yield ScanTraceEntry(offset, byte, state, codepoint, byte_class(byte))
        if state != UTF8_REJECT:
            continue
        state, codepoint = UTF8_ACCEPT, 0
        if previous != UTF8_ACCEPT:
            state, codepoint = decode_step(state, codepoint, byte)
            yield ScanTraceEntry(offset, byte, state, codepoint, byte_class(byte))
            if state == UTF8_REJECT:
                state, codepoint = UTF8_ACCEPT, 0
