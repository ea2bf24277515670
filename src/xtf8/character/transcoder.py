"""XTF8 transcoder: binary-safe mapping between arbitrary bytes and UTF-8.

Encoding copies every well-formed UTF-8 sequence of the input verbatim and
maps every byte that is not part of one to a codepoint in the private-use
range U+EF80..U+EFFF, so the output is always valid UTF-8. Decoding reverses
the mapping. A genuine input codepoint inside that range (a collision) is
either replaced with U+FFFD or aborts the call, depending on the policy.

Every call runs in two passes over one shared generator core: a sizing pass
that only measures, and a writing pass that fills a caller-supplied buffer
of exactly the measured length.

The mapping never produces or consumes an ASCII byte. A decoded
private-use codepoint always yields a byte in 0x80..0xFF, so binary data
can never come back out as plain ASCII control data.
"""

from typing import Callable, Iterator, NamedTuple, Optional, Tuple, Union

from ..shared.config import ErrorPolicy, TranscodeMode, TranscodeState
from ..shared.errors import InvariantViolationError, TranscodeAbortedError
from ..shared.logging import CorrelationLogger, get_logger
from ..shared.result import DiagnosticKind
from .scanner import UTF8_ACCEPT, UTF8_REJECT, BytesLike, UTF8Scanner

# CSUR private-use block registered for encoding hacks (MirBSD OPTU).
PUA_START = 0xEF80
PUA_END = 0xEFFF

REPLACEMENT_CODEPOINT = 0xFFFD
REPLACEMENT_CHARACTER = b"\xef\xbf\xbd"

# Returned by the sizing pass when the ABORT policy hit a conflict.
ABORTED = -1

Destination = Union[bytearray, memoryview]

_logger = get_logger(__name__, component="transcoder")


class TranscodeEvent(NamedTuple):
    """A collision or malformed run met while transcoding."""

    kind: DiagnosticKind
    offset: int
    length: int
    codepoint: Optional[int] = None


EventObserver = Callable[[TranscodeEvent], None]


def is_reserved(codepoint: int) -> bool:
    """Whether a codepoint lies in the range used to carry raw bytes."""
    return PUA_START <= codepoint <= PUA_END


def pua_codepoint(byte: int) -> int:
    """Map a non-ASCII byte to its private-use codepoint."""
    if byte < 0x80:
        raise InvariantViolationError(f"ASCII byte 0x{byte:02x} cannot be mapped")
    return PUA_START | (byte & 0x7F)


def pua_byte(codepoint: int) -> int:
    """Recover the raw byte carried by a private-use codepoint."""
    if not is_reserved(codepoint):
        raise InvariantViolationError(f"U+{codepoint:04X} is not a reserved codepoint")
    value = (codepoint & 0x7F) | 0x80
    if value < 0x80:
        raise InvariantViolationError(f"U+{codepoint:04X} decoded to ASCII")
    return value


def encode_bmp(codepoint: int) -> bytes:
    """UTF-8 encode a codepoint in U+0800..U+FFFF (always three bytes)."""
    return bytes((
        (codepoint >> 12 & 0x0F) | 0xE0,
        (codepoint >> 6 & 0x3F) | 0x80,
        (codepoint & 0x3F) | 0x80,
    ))


# Indexed by byte & 0x7F
_PUA_SEQUENCES: Tuple[bytes, ...] = tuple(
    encode_bmp(pua_codepoint(0x80 | low)) for low in range(0x80)
)
_RAW_BYTES: Tuple[bytes, ...] = tuple(
    bytes((pua_byte(PUA_START | low),)) for low in range(0x80)
)


class ScanCursor:
    """Read position over a source buffer plus the start of the pending region.

    The pending region holds the bytes consumed since the last resolved
    boundary. Resolving hands the region out and moves the boundary; the
    automaton can ask for the current byte to be reconsidered, in which case
    the region stops before it and the byte is scanned again as the start of
    a new sequence.
    """

    __slots__ = ("data", "index", "pending")

    def __init__(self, data: memoryview) -> None:
        self.data = data
        self.index = 0
        self.pending = 0

    @property
    def exhausted(self) -> bool:
        return self.index >= len(self.data)

    @property
    def byte(self) -> int:
        return self.data[self.index]

    def step(self) -> None:
        self.index += 1

    def resolve(self) -> memoryview:
        """Take the pending region through the current byte and move past it."""
        region = self.data[self.pending:self.index + 1]
        self.index += 1
        self.pending = self.index
        return region

    def resolve_and_reconsider(self) -> memoryview:
        """Take the pending region up to, not including, the current byte.

        The current byte stays under the cursor and is scanned again.
        """
        region = self.data[self.pending:self.index]
        self.pending = self.index
        return region

    def remainder(self) -> memoryview:
        """Take whatever is left pending at the end of input."""
        region = self.data[self.pending:]
        self.pending = self.index = len(self.data)
        return region


def as_byte_view(source: BytesLike) -> memoryview:
    """Return a flat unsigned-byte view over a bytes-like object."""
    view = memoryview(source)
    if view.format != "B" or view.ndim != 1:
        view = view.cast("B")
    return view


def _transcode(
    data: memoryview,
    mode: TranscodeMode,
    policy: ErrorPolicy,
    observer: Optional[EventObserver] = None,
    logger: Optional[CorrelationLogger] = None,
) -> Iterator[Union[bytes, memoryview]]:
    """Yield the output of one transcoding run chunk by chunk.

    Both the sizing pass and the writing pass consume this generator, so
    they traverse identical control flow.

    Raises:
        TranscodeAbortedError: ABORT policy and a collision (encode) or
            malformed input (decode) was found
    """
    log = logger or _logger
    trace = log.debug_enabled
    encoding = mode is TranscodeMode.ENCODE
    abort = policy is ErrorPolicy.ABORT
    scanner = UTF8Scanner()
    cursor = ScanCursor(data)

    while not cursor.exhausted:
        previous = scanner.state
        state = scanner.feed(cursor.byte)

        if state == UTF8_ACCEPT:
            codepoint = scanner.codepoint
            if not is_reserved(codepoint):
                yield cursor.resolve()
            elif encoding:
                offset = cursor.pending
                if abort:
                    raise TranscodeAbortedError(
                        mode.value, offset,
                        f"U+{codepoint:04X} collides with the reserved range"
                    )
                length = len(cursor.resolve())
                if trace:
                    log.debug(f"Replaced U+{codepoint:04X} at {offset} -> U+FFFD")
                if observer:
                    observer(TranscodeEvent(
                        DiagnosticKind.COLLISION, offset, length, codepoint
                    ))
                yield REPLACEMENT_CHARACTER
            else:
                if trace:
                    log.debug(
                        f"Decoded U+{codepoint:04X} -> "
                        f"0x{(codepoint & 0x7F) | 0x80:02x}"
                    )
                cursor.resolve()
                yield _RAW_BYTES[codepoint & 0x7F]

        elif state == UTF8_REJECT:
            scanner.reset()
            offset = cursor.pending
            if abort and not encoding:
                raise TranscodeAbortedError(
                    mode.value, offset, "invalid UTF-8 sequence"
                )
            # A byte that broke a started sequence may begin a new one.
            if previous != UTF8_ACCEPT:
                region = cursor.resolve_and_reconsider()
            else:
                region = cursor.resolve()
            yield from _resolve_invalid(
                region, offset, encoding, DiagnosticKind.INVALID_SEQUENCE,
                observer, log if trace else None
            )

        else:
            cursor.step()

    if scanner.pending:
        offset = cursor.pending
        if abort and not encoding:
            raise TranscodeAbortedError(
                mode.value, offset, "truncated UTF-8 sequence at end of input"
            )
        yield from _resolve_invalid(
            cursor.remainder(), offset, encoding,
            DiagnosticKind.TRUNCATED_SEQUENCE, observer, log if trace else None
        )


def _resolve_invalid(
    region: memoryview,
    offset: int,
    encoding: bool,
    kind: DiagnosticKind,
    observer: Optional[EventObserver],
    log: Optional[CorrelationLogger],
) -> Iterator[bytes]:
    """Emit the output for a run of bytes that is not valid UTF-8."""
    if log:
        log.debug(
            f"{TranscodeState.RESOLVING_INVALID.value}: {len(region)} byte(s) "
            f"at {offset}: {bytes(region).hex(' ')}"
        )
    if observer:
        observer(TranscodeEvent(kind, offset, len(region)))

    if not encoding:
        yield REPLACEMENT_CHARACTER
        return

    for byte in region:
        if byte < 0x80:
            raise InvariantViolationError(
                f"ASCII byte 0x{byte:02x} at {offset} inside an invalid run"
            )
        yield _PUA_SEQUENCES[byte & 0x7F]


def measure(
    source: BytesLike,
    mode: TranscodeMode,
    policy: ErrorPolicy = ErrorPolicy.REPLACE,
    observer: Optional[EventObserver] = None,
    logger: Optional[CorrelationLogger] = None,
) -> int:
    """Sizing pass that raises instead of returning the ABORTED sentinel.

    Raises:
        TranscodeAbortedError: ABORT policy and a conflict was found
    """
    data = as_byte_view(source)
    return sum(len(chunk) for chunk in _transcode(data, mode, policy, observer, logger))


def transcode_size(
    source: BytesLike,
    mode: TranscodeMode,
    policy: ErrorPolicy = ErrorPolicy.REPLACE,
) -> int:
    """Sizing pass: return the exact output length, or ABORTED.

    Args:
        source: Input bytes
        mode: ENCODE or DECODE
        policy: REPLACE (default) or ABORT

    Returns:
        Required destination length, or ``ABORTED`` if the ABORT policy
        found a conflict
    """
    try:
        return measure(source, mode, policy)
    except TranscodeAbortedError:
        return ABORTED


def transcode_into(
    destination: Destination,
    source: BytesLike,
    mode: TranscodeMode,
    policy: ErrorPolicy = ErrorPolicy.REPLACE,
    observer: Optional[EventObserver] = None,
    logger: Optional[CorrelationLogger] = None,
) -> int:
    """Writing pass: fill ``destination`` and return the end offset.

    ``destination`` must be a writable buffer of the length reported by
    the sizing pass. It is written through a fixed-size view and is never
    grown.

    Raises:
        TranscodeAbortedError: ABORT policy and a conflict was found; the
            caller should have checked the sizing pass first
        ValueError: destination is shorter than the output
    """
    data = as_byte_view(source)
    position = 0
    with memoryview(destination) as view:
        if view.readonly:
            raise TypeError("destination buffer is read-only")
        with view.cast("B") as target:
            limit = len(target)
            for chunk in _transcode(data, mode, policy, observer, logger):
                end = position + len(chunk)
                if end > limit:
                    raise ValueError(
                        f"destination buffer too small: {limit} bytes, "
                        f"need more than {position}"
                    )
                target[position:end] = chunk
                position = end
    return position


def transform(
    destination: Optional[Destination],
    source: BytesLike,
    mode: TranscodeMode,
    policy: ErrorPolicy = ErrorPolicy.REPLACE,
) -> int:
    """Run the sizing pass (``destination is None``) or the writing pass."""
    if destination is None:
        return transcode_size(source, mode, policy)
    return transcode_into(destination, source, mode, policy)
