"""JSON string escaping for XTF8 output (RFC 8259, section 7).

XTF8 output is valid UTF-8 but may still hold control bytes, quotes and
backslashes. Escaping them makes the output embeddable as the body of a
JSON string; unescaping reverses exactly the forms the escaper produces.
Bytes at or above 0x20 other than ``\\`` and ``"`` pass through untouched,
so the transform is independent of UTF-8 structure.
"""

from typing import Dict, Union

from ..shared.errors import JSONUnescapeError

BytesLike = Union[bytes, bytearray, memoryview]

CONTROL_MAX = 0x1F
BACKSLASH = 0x5C
QUOTE = 0x22

_NAMED_ESCAPES: Dict[int, int] = {
    0x0A: ord("n"),
    0x0D: ord("r"),
    0x09: ord("t"),
    0x08: ord("b"),
    0x0C: ord("f"),
}
_NAMED_UNESCAPES: Dict[int, int] = {
    escape: byte for byte, escape in _NAMED_ESCAPES.items()
}
_NAMED_UNESCAPES[BACKSLASH] = BACKSLASH
_NAMED_UNESCAPES[QUOTE] = QUOTE

_HEX_DIGITS = b"0123456789ABCDEF"
_HEX_VALUES: Dict[int, int] = {digit: value for value, digit in enumerate(_HEX_DIGITS)}
_HEX_VALUES.update(
    {digit: value + 10 for value, digit in enumerate(b"abcdef")}
)

# Length of the generic "\u00XX" form
_GENERIC_ESCAPE_LENGTH = 6


def _escape_byte(byte: int) -> bytes:
    if byte <= CONTROL_MAX:
        if byte in _NAMED_ESCAPES:
            return bytes((BACKSLASH, _NAMED_ESCAPES[byte]))
        return b"\\u00" + bytes((_HEX_DIGITS[byte >> 4], _HEX_DIGITS[byte & 0xF]))
    if byte in (BACKSLASH, QUOTE):
        return bytes((BACKSLASH, byte))
    return bytes((byte,))


# Precomputed escape for every byte value
_ESCAPES = tuple(_escape_byte(byte) for byte in range(256))


def json_escaped_size(data: BytesLike) -> int:
    """Exact length of ``json_escape(data)``."""
    return sum(len(_ESCAPES[byte]) for byte in memoryview(data).cast("B"))


def json_escape(data: BytesLike) -> bytes:
    """Escape control bytes, backslashes and quotes.

    Examples:
        >>> json_escape(b'\\\\"')
        b'\\\\\\\\\\\\"'
        >>> json_escape(b"\\x01\\n")
        b'\\\\u0001\\\\n'
    """
    return b"".join(_ESCAPES[byte] for byte in memoryview(data).cast("B"))


def json_unescape(data: BytesLike) -> bytes:
    """Reverse :func:`json_escape`.

    Raises:
        JSONUnescapeError: unknown escape, truncated or non-hex ``\\u00XX``,
            a value above 0x1F, or a trailing lone backslash
    """
    source = bytes(data)
    output = bytearray()
    index = 0
    length = len(source)

    while index < length:
        byte = source[index]
        if byte != BACKSLASH:
            output.append(byte)
            index += 1
            continue

        if index + 1 >= length:
            raise JSONUnescapeError("incomplete escape sequence", index)
        escape = source[index + 1]

        if escape in _NAMED_UNESCAPES:
            output.append(_NAMED_UNESCAPES[escape])
            index += 2
        elif escape == ord("u"):
            output.append(_parse_unicode_escape(source, index))
            index += _GENERIC_ESCAPE_LENGTH
        else:
            raise JSONUnescapeError(
                f"invalid escape sequence \\{chr(escape)}", index
            )

    return bytes(output)


def _parse_unicode_escape(source: bytes, index: int) -> int:
    """Parse ``\\u00XX`` starting at the backslash at ``index``."""
    digits = source[index + 2:index + _GENERIC_ESCAPE_LENGTH]
    if len(digits) < 4:
        raise JSONUnescapeError("truncated \\u00XX sequence", index)

    value = 0
    for digit in digits:
        if digit not in _HEX_VALUES:
            raise JSONUnescapeError(
                f"invalid hex digit in \\u{digits.decode('latin-1')}", index
            )
        value = (value << 4) | _HEX_VALUES[digit]

    if value > CONTROL_MAX:
        raise JSONUnescapeError(
            f"out-of-range \\u{digits.decode('latin-1')} sequence", index
        )
    return value
