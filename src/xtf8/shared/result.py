"""Result objects and diagnostic types for XTF8 transcoding.

This module defines the result returned by the configured codec, with the
diagnostics recorded for every collision or malformed run and the
performance figures of the call.
"""

import time
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Any, Dict, List, Optional

from .config import ErrorPolicy, TranscodeMode, TranscodeState


class DiagnosticSeverity(Enum):
    """Severity levels for diagnostic entries."""

    DEBUG = auto()
    INFO = auto()
    WARNING = auto()    # Input was altered (replacement or byte mapping)
    ERROR = auto()      # Call failed under the ABORT policy


class DiagnosticKind(Enum):
    """What a diagnostic entry reports."""

    COLLISION = "collision"              # reserved codepoint in encode input
    INVALID_SEQUENCE = "invalid_sequence"
    TRUNCATED_SEQUENCE = "truncated_sequence"
    ABORTED = "aborted"
    INPUT_TOO_LARGE = "input_too_large"


@dataclass
class DiagnosticEntry:
    """Single diagnostic entry with position information."""

    severity: DiagnosticSeverity
    kind: DiagnosticKind
    message: str
    component: str
    offset: Optional[int] = None
    length: int = 0
    details: Optional[Dict[str, Any]] = None
    timestamp: float = field(default_factory=time.time)
    correlation_id: Optional[str] = None

    def __post_init__(self) -> None:
        """Validate diagnostic entry."""
        if not self.message:
            raise ValueError("Diagnostic message cannot be empty")
        if not self.component:
            raise ValueError("Diagnostic component cannot be empty")
        if self.offset is not None and self.offset < 0:
            raise ValueError("Diagnostic offset must be >= 0")


@dataclass
class PerformanceMetrics:
    """Performance metrics for a transcoding call."""

    processing_time_ms: float = 0.0
    sizing_time_ms: float = 0.0
    writing_time_ms: float = 0.0
    input_bytes: int = 0
    output_bytes: int = 0
    collisions: int = 0
    invalid_sequences: int = 0

    @property
    def bytes_per_second(self) -> float:
        """Input bytes processed per second."""
        if self.processing_time_ms <= 0:
            return 0.0
        return (self.input_bytes * 1000.0) / self.processing_time_ms

    @property
    def expansion_ratio(self) -> float:
        """Output size relative to input size."""
        if self.input_bytes == 0:
            return 1.0
        return self.output_bytes / self.input_bytes


@dataclass
class TranscodeResult:
    """Outcome of a configured encode or decode call."""

    output: bytes
    mode: TranscodeMode
    policy: ErrorPolicy
    state: TranscodeState
    diagnostics: List[DiagnosticEntry] = field(default_factory=list)
    performance: PerformanceMetrics = field(default_factory=PerformanceMetrics)
    correlation_id: Optional[str] = None

    @property
    def success(self) -> bool:
        """Whether the call ran to completion."""
        return self.state is TranscodeState.DONE

    @property
    def collision_count(self) -> int:
        return self.performance.collisions

    @property
    def invalid_count(self) -> int:
        return self.performance.invalid_sequences

    @property
    def lossless(self) -> bool:
        """Whether the output carries the input without loss.

        An encode result is lossy when a collision was replaced; a decode
        result is lossy when a malformed run was replaced with U+FFFD.
        """
        if not self.success:
            return False
        if self.mode is TranscodeMode.DECODE:
            return self.performance.invalid_sequences == 0
        return self.performance.collisions == 0

    def errors(self) -> List[DiagnosticEntry]:
        """Diagnostics at ERROR severity."""
        return [d for d in self.diagnostics if d.severity is DiagnosticSeverity.ERROR]

    def summary(self) -> Dict[str, Any]:
        """Plain dictionary view suitable for JSON reporting."""
        return {
            "mode": self.mode.value,
            "policy": self.policy.value,
            "success": self.success,
            "state": self.state.value,
            "input_bytes": self.performance.input_bytes,
            "output_bytes": self.performance.output_bytes,
            "collisions": self.performance.collisions,
            "invalid_sequences": self.performance.invalid_sequences,
            "processing_time_ms": round(self.performance.processing_time_ms, 3),
            "diagnostics": [
                {
                    "severity": d.severity.name,
                    "kind": d.kind.value,
                    "offset": d.offset,
                    "message": d.message,
                } for d in self.diagnostics
            ],
        }
