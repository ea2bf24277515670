"""Codec API with progressive disclosure for XTF8 transcoding.

Level 1 is a pair of module-level functions that return bytes and raise on
abort. Level 2 is :class:`XTF8Codec`, a configured, reusable codec that
returns a :class:`~xtf8.shared.result.TranscodeResult` carrying
diagnostics and timing instead of raising.

Both levels run the same protocol: a sizing pass, a single allocation of
exactly the measured size, then the writing pass into that buffer.
"""

import time
from typing import Any, BinaryIO, Dict, List, Optional, Union

from ..character.scanner import BytesLike, is_utf8
from ..character.stream import read_stream
from ..character.transcoder import (
    TranscodeEvent,
    as_byte_view,
    measure,
    transcode_into,
)
from ..shared.config import CodecConfig, ErrorPolicy, TranscodeMode, TranscodeState
from ..shared.errors import (
    InputTooLargeError,
    InvariantViolationError,
    TranscodeAbortedError,
)
from ..shared.logging import CorrelationLogger, get_logger
from ..shared.result import (
    DiagnosticEntry,
    DiagnosticKind,
    DiagnosticSeverity,
    PerformanceMetrics,
    TranscodeResult,
)

InputType = Union[bytes, bytearray, memoryview, BinaryIO]

MS_PER_SECOND = 1000

_DIAGNOSTIC_MESSAGES = {
    DiagnosticKind.COLLISION: "Reserved codepoint replaced with U+FFFD",
    DiagnosticKind.INVALID_SEQUENCE: "Invalid UTF-8 sequence",
    DiagnosticKind.TRUNCATED_SEQUENCE: "Truncated UTF-8 sequence at end of input",
}


def _run_two_pass(
    data: BytesLike,
    mode: TranscodeMode,
    policy: ErrorPolicy,
    verify: bool,
    observer: Any = None,
    logger: Optional[CorrelationLogger] = None,
    metrics: Optional[PerformanceMetrics] = None,
) -> bytes:
    """Measure, allocate once, write, and check the pass invariants."""
    started = time.perf_counter()
    size = measure(data, mode, policy, logger=logger)
    sized = time.perf_counter()

    buffer = bytearray(size)
    end = transcode_into(buffer, data, mode, policy, observer=observer, logger=logger)
    written = time.perf_counter()

    if end != size:
        raise InvariantViolationError(
            f"{mode.value} sizing pass measured {size} bytes but wrote {end}"
        )
    if verify and mode is TranscodeMode.ENCODE and not is_utf8(buffer):
        raise InvariantViolationError("encoded output is not valid UTF-8")

    if metrics is not None:
        metrics.sizing_time_ms = (sized - started) * MS_PER_SECOND
        metrics.writing_time_ms = (written - sized) * MS_PER_SECOND
        metrics.output_bytes = size
    return bytes(buffer)


def encode(data: BytesLike, policy: ErrorPolicy = ErrorPolicy.REPLACE) -> bytes:
    """Encode arbitrary bytes into valid UTF-8.

    Args:
        data: Input bytes
        policy: REPLACE substitutes U+FFFD for reserved codepoints in the
            input; ABORT raises instead

    Returns:
        Valid UTF-8 bytes

    Raises:
        TranscodeAbortedError: ABORT policy and the input contains a
            codepoint in U+EF80..U+EFFF

    Examples:
        >>> encode(b"hello")
        b'hello'
        >>> encode(b"\\xff")
        b'\\xee\\xbf\\xbf'
    """
    return _run_two_pass(data, TranscodeMode.ENCODE, policy, verify=True)


def decode(data: BytesLike, policy: ErrorPolicy = ErrorPolicy.REPLACE) -> bytes:
    """Decode XTF8 UTF-8 back into the original bytes.

    Raises:
        TranscodeAbortedError: ABORT policy and the input is not valid UTF-8

    Examples:
        >>> decode(encode(b"\\x00\\xff binary"))
        b'\\x00\\xff binary'
    """
    return _run_two_pass(data, TranscodeMode.DECODE, policy, verify=False)


class XTF8Codec:
    """Configured, reusable XTF8 codec.

    Returns result objects instead of raising when the ABORT policy stops a
    call, and records a diagnostic for every collision and malformed run.

    Attributes:
        config: Codec configuration
        correlation_id: Correlation ID attached to logs and diagnostics

    Examples:
        >>> codec = XTF8Codec()
        >>> result = codec.encode(b"\\x80abc")
        >>> result.success, result.invalid_count
        (True, 1)

        >>> strict = XTF8Codec(CodecConfig.strict())
        >>> strict.encode("\\uef90".encode()).success
        False
    """

    def __init__(
        self,
        config: Optional[CodecConfig] = None,
        correlation_id: Optional[str] = None
    ) -> None:
        """Initialize codec.

        Args:
            config: Codec configuration (defaults to lenient)
            correlation_id: Optional correlation ID for call tracking
        """
        self.config = config or CodecConfig.lenient()
        self.correlation_id = correlation_id or self.config.correlation_id
        self.logger = get_logger(__name__, self.correlation_id, "codec")

        self._call_count = 0
        self._successful_calls = 0
        self._total_processing_time = 0.0

    def encode(self, data: InputType) -> TranscodeResult:
        """Encode arbitrary bytes into valid UTF-8."""
        return self.transcode(data, TranscodeMode.ENCODE)

    def decode(self, data: InputType) -> TranscodeResult:
        """Decode XTF8 UTF-8 back into the original bytes."""
        return self.transcode(data, TranscodeMode.DECODE)

    def transcode(self, data: InputType, mode: TranscodeMode) -> TranscodeResult:
        """Run one encode or decode call.

        Args:
            data: Bytes-like object or binary stream
            mode: ENCODE or DECODE

        Returns:
            TranscodeResult; ``success`` is False when the ABORT policy
            stopped the call or the input exceeded the configured limit
        """
        start_time = time.perf_counter()
        policy = self.config.policy
        limit = self.config.max_input_size_bytes
        if hasattr(data, "read"):
            try:
                data = read_stream(data, max_size=limit)
            except InputTooLargeError as e:
                return self._too_large(
                    mode, f"Stream input exceeds limit of {e.limit} bytes",
                    PerformanceMetrics(), start_time,
                )
        source = as_byte_view(data)  # type: ignore[arg-type]

        metrics = PerformanceMetrics(input_bytes=len(source))
        diagnostics: List[DiagnosticEntry] = []

        self.logger.info(
            f"Starting {mode.value}",
            extra={"input_bytes": len(source), "policy": policy.value}
        )

        if limit is not None and len(source) > limit:
            return self._too_large(
                mode, f"Input of {len(source)} bytes exceeds limit of {limit} bytes",
                metrics, start_time,
            )

        def observe(event: TranscodeEvent) -> None:
            if event.kind is DiagnosticKind.COLLISION:
                metrics.collisions += 1
            else:
                metrics.invalid_sequences += 1
            if self.config.enable_diagnostics:
                details = (
                    {"codepoint": f"U+{event.codepoint:04X}"}
                    if event.codepoint is not None else None
                )
                diagnostics.append(self._diagnostic(
                    DiagnosticSeverity.WARNING,
                    event.kind,
                    _DIAGNOSTIC_MESSAGES[event.kind],
                    offset=event.offset,
                    length=event.length,
                    details=details,
                ))

        try:
            output = _run_two_pass(
                source, mode, policy, self.config.verify_output,
                observer=observe, logger=self.logger, metrics=metrics,
            )
        except TranscodeAbortedError as e:
            self.logger.warning(
                f"{mode.value} aborted", extra={"offset": e.offset, "reason": e.reason}
            )
            diagnostics.append(self._diagnostic(
                DiagnosticSeverity.ERROR,
                DiagnosticKind.ABORTED,
                str(e),
                offset=e.offset,
            ))
            return self._finish(
                b"", mode, TranscodeState.FAILED, diagnostics, metrics, start_time
            )

        return self._finish(
            output, mode, TranscodeState.DONE, diagnostics, metrics, start_time
        )

    def _diagnostic(
        self,
        severity: DiagnosticSeverity,
        kind: DiagnosticKind,
        message: str,
        offset: Optional[int] = None,
        length: int = 0,
        details: Optional[Dict[str, Any]] = None,
    ) -> DiagnosticEntry:
        return DiagnosticEntry(
            severity=severity,
            kind=kind,
            message=message,
            component="codec",
            offset=offset,
            length=length,
            details=details,
            correlation_id=self.correlation_id,
        )

    def _too_large(
        self,
        mode: TranscodeMode,
        message: str,
        metrics: PerformanceMetrics,
        start_time: float,
    ) -> TranscodeResult:
        self.logger.warning(message)
        diagnostics = [self._diagnostic(
            DiagnosticSeverity.ERROR, DiagnosticKind.INPUT_TOO_LARGE, message
        )]
        return self._finish(
            b"", mode, TranscodeState.FAILED, diagnostics, metrics, start_time
        )

    def _finish(
        self,
        output: bytes,
        mode: TranscodeMode,
        state: TranscodeState,
        diagnostics: List[DiagnosticEntry],
        metrics: PerformanceMetrics,
        start_time: float,
    ) -> TranscodeResult:
        metrics.processing_time_ms = (time.perf_counter() - start_time) * MS_PER_SECOND
        self._call_count += 1
        self._total_processing_time += metrics.processing_time_ms
        if state is TranscodeState.DONE:
            self._successful_calls += 1

        self.logger.info(
            f"{mode.value} finished",
            extra={
                "state": state.value,
                "output_bytes": metrics.output_bytes,
                "processing_time_ms": metrics.processing_time_ms,
            }
        )
        return TranscodeResult(
            output=output,
            mode=mode,
            policy=self.config.policy,
            state=state,
            diagnostics=diagnostics,
            performance=metrics,
            correlation_id=self.correlation_id,
        )

    def reconfigure(self, config: CodecConfig) -> None:
        """Replace the codec configuration for subsequent calls."""
        self.config = config
        self.logger.info("Codec reconfigured", extra={"policy": config.policy.value})

    @property
    def statistics(self) -> Dict[str, Any]:
        """Get codec usage statistics."""
        return {
            "total_calls": self._call_count,
            "successful_calls": self._successful_calls,
            "success_rate": (
                self._successful_calls / self._call_count
                if self._call_count > 0 else 0.0
            ),
            "total_processing_time_ms": self._total_processing_time,
            "correlation_id": self.correlation_id,
        }

    def reset_statistics(self) -> None:
        """Reset codec usage statistics."""
        self._call_count = 0
        self._successful_calls = 0
        self._total_processing_time = 0.0
