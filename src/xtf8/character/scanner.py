"""Table-driven UTF-8 structural scanner.

The scanner is a deterministic finite automaton that consumes one byte at a
time. Each byte is first collapsed into a small byte class, then the pair
(state, class) indexes the transition table. The automaton reports ACCEPT
when a codepoint has just been completed, REJECT when the byte cannot occur
at its position, and any other state while continuation bytes are pending.

Overlong forms, UTF-16 surrogate halves, values above U+10FFFF and stray
continuation bytes all reach REJECT within a fixed number of lookups.

Based on the DFA decoder by Bjoern Hoehrmann:
http://bjoern.hoehrmann.de/utf-8/decoder/dfa/
"""

from typing import Iterable, Tuple, Union

BytesLike = Union[bytes, bytearray, memoryview]

# Distinguished automaton states
UTF8_ACCEPT = 0
UTF8_REJECT = 12

# Byte classes
CLASS_ASCII = 0
CLASS_CONT_LOW = 1        # 80..8F
CLASS_LEAD_2 = 2          # C2..DF
CLASS_LEAD_3 = 3          # E1..EC, EE..EF
CLASS_LEAD_3_ED = 4       # ED, excludes surrogates
CLASS_LEAD_4_F4 = 5       # F4, excludes > U+10FFFF
CLASS_LEAD_4 = 6          # F1..F3
CLASS_CONT_HIGH = 7       # A0..BF
CLASS_INVALID = 8         # C0, C1, F5..FF
CLASS_CONT_MID = 9        # 90..9F
CLASS_LEAD_3_E0 = 10      # E0, excludes overlongs
CLASS_LEAD_4_F0 = 11      # F0, excludes overlongs

_CLASS_RANGES = (
    (0x00, 0x7F, CLASS_ASCII),
    (0x80, 0x8F, CLASS_CONT_LOW),
    (0x90, 0x9F, CLASS_CONT_MID),
    (0xA0, 0xBF, CLASS_CONT_HIGH),
    (0xC0, 0xC1, CLASS_INVALID),
    (0xC2, 0xDF, CLASS_LEAD_2),
    (0xE0, 0xE0, CLASS_LEAD_3_E0),
    (0xE1, 0xEC, CLASS_LEAD_3),
    (0xED, 0xED, CLASS_LEAD_3_ED),
    (0xEE, 0xEF, CLASS_LEAD_3),
    (0xF0, 0xF0, CLASS_LEAD_4_F0),
    (0xF1, 0xF3, CLASS_LEAD_4),
    (0xF4, 0xF4, CLASS_LEAD_4_F4),
    (0xF5, 0xFF, CLASS_INVALID),
)


def _build_byte_classes() -> Tuple[int, ...]:
    classes = [CLASS_INVALID] * 256
    for low, high, byte_type in _CLASS_RANGES:
        for byte in range(low, high + 1):
            classes[byte] = byte_type
    return tuple(classes)


BYTE_CLASSES: Tuple[int, ...] = _build_byte_classes()

# One row of twelve entries per state, indexed by state + byte class.
TRANSITIONS: Tuple[int, ...] = (
    # 0: accept
    0, 12, 24, 36, 60, 96, 84, 12, 12, 12, 48, 72,
    # 12: reject
    12, 12, 12, 12, 12, 12, 12, 12, 12, 12, 12, 12,
    # 24: one continuation byte left
    12, 0, 12, 12, 12, 12, 12, 0, 12, 0, 12, 12,
    # 36: two continuation bytes left
    12, 24, 12, 12, 12, 12, 12, 24, 12, 24, 12, 12,
    # 48: after E0, needs A0..BF
    12, 12, 12, 12, 12, 12, 12, 24, 12, 12, 12, 12,
    # 60: after ED, needs 80..9F
    12, 24, 12, 12, 12, 12, 12, 12, 12, 24, 12, 12,
    # 72: after F0, needs 90..BF
    12, 12, 12, 12, 12, 12, 12, 36, 12, 36, 12, 12,
    # 84: after F1..F3, three continuation bytes left
    12, 36, 12, 12, 12, 12, 12, 36, 12, 36, 12, 12,
    # 96: after F4, needs 80..8F
    12, 36, 12, 12, 12, 12, 12, 12, 12, 12, 12, 12,
)


def byte_class(byte: int) -> int:
    """Return the structural class of a byte value."""
    return BYTE_CLASSES[byte]


def decode_step(state: int, codepoint: int, byte: int) -> Tuple[int, int]:
    """Advance the automaton by one byte.

    Args:
        state: Current automaton state (UTF8_ACCEPT at a sequence boundary)
        codepoint: Codepoint accumulated so far in the current sequence
        byte: Next input byte (0..255)

    Returns:
        Tuple of (new state, new accumulated codepoint). The codepoint is
        complete only when the new state is UTF8_ACCEPT.
    """
    byte_type = BYTE_CLASSES[byte]
    if state != UTF8_ACCEPT:
        codepoint = (byte & 0x3F) | (codepoint << 6)
    else:
        codepoint = (0xFF >> byte_type) & byte
    return TRANSITIONS[state + byte_type], codepoint


class UTF8Scanner:
    """Stateful wrapper around :func:`decode_step`.

    REJECT is sticky: once entered, further bytes leave the scanner in
    REJECT until :meth:`reset` is called.
    """

    __slots__ = ("state", "codepoint")

    def __init__(self) -> None:
        self.state = UTF8_ACCEPT
        self.codepoint = 0

    def reset(self) -> None:
        self.state = UTF8_ACCEPT
        self.codepoint = 0

    def feed(self, byte: int) -> int:
        """Consume one byte and return the new state."""
        self.state, self.codepoint = decode_step(self.state, self.codepoint, byte)
        return self.state

    @property
    def accepting(self) -> bool:
        return self.state == UTF8_ACCEPT

    @property
    def rejected(self) -> bool:
        return self.state == UTF8_REJECT

    @property
    def pending(self) -> bool:
        """Whether a multi-byte sequence has been started but not finished."""
        return self.state not in (UTF8_ACCEPT, UTF8_REJECT)


def is_utf8(data: Union[BytesLike, Iterable[int]]) -> bool:
    """Check whether a buffer is structurally valid UTF-8.

    The buffer is valid only if REJECT is never reached and the scan ends on
    a sequence boundary.
    """
    state = UTF8_ACCEPT
    codepoint = 0
    for byte in data:
        state, codepoint = decode_step(state, codepoint, byte)
        if state == UTF8_REJECT:
            return False
    return state == UTF8_ACCEPT
