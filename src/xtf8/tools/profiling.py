"""Performance profiling for XTF8 transcoding.

Times the sizing and writing passes separately over repeated runs and
tracks the process resident set size around the whole run.
"""

import time
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import psutil

from ..character.scanner import BytesLike
from ..character.transcoder import ABORTED, as_byte_view, transcode_into, transcode_size
from ..shared.config import ErrorPolicy, TranscodeMode
from ..shared.logging import get_logger


@dataclass
class PassTiming:
    """Timing of one sizing or writing pass."""

    pass_name: str
    start_time: float
    end_time: float

    @property
    def duration_ms(self) -> float:
        """Pass duration in milliseconds."""
        return (self.end_time - self.start_time) * 1000


@dataclass
class ProfileReport:
    """Timing and memory figures for repeated runs over one input."""

    mode: TranscodeMode
    policy: ErrorPolicy
    input_bytes: int
    iterations: int
    output_bytes: int = 0
    aborted: bool = False
    passes: List[PassTiming] = field(default_factory=list)
    memory_start: int = 0  # bytes
    memory_end: int = 0  # bytes

    def _durations(self, pass_name: str) -> List[float]:
        return [p.duration_ms for p in self.passes if p.pass_name == pass_name]

    @property
    def average_sizing_ms(self) -> float:
        durations = self._durations("sizing")
        return sum(durations) / len(durations) if durations else 0.0

    @property
    def average_writing_ms(self) -> float:
        durations = self._durations("writing")
        return sum(durations) / len(durations) if durations else 0.0

    @property
    def total_duration_ms(self) -> float:
        return sum(p.duration_ms for p in self.passes)

    @property
    def throughput_mb_per_s(self) -> float:
        """Input processed per second over both passes."""
        duration_s = self.total_duration_ms / 1000
        if duration_s <= 0:
            return 0.0
        return (self.input_bytes * self.iterations / (1024 * 1024)) / duration_s

    @property
    def memory_delta(self) -> int:
        """Memory usage change in bytes."""
        return self.memory_end - self.memory_start

    def to_dict(self) -> Dict[str, Any]:
        """Convert report to dictionary."""
        return {
            "mode": self.mode.value,
            "policy": self.policy.value,
            "input_bytes": self.input_bytes,
            "output_bytes": self.output_bytes,
            "iterations": self.iterations,
            "aborted": self.aborted,
            "average_sizing_ms": round(self.average_sizing_ms, 3),
            "average_writing_ms": round(self.average_writing_ms, 3),
            "total_duration_ms": round(self.total_duration_ms, 3),
            "throughput_mb_per_s": round(self.throughput_mb_per_s, 3),
            "memory_delta_bytes": self.memory_delta,
        }


class TranscodeProfiler:
    """Profiler for the two-pass transcoding protocol.

    Examples:
        >>> profiler = TranscodeProfiler()
        >>> report = profiler.profile(b"\\xff" * 1024, TranscodeMode.ENCODE)
        >>> report.output_bytes
        3072
    """

    def __init__(self, enable_memory_tracking: bool = True) -> None:
        """Initialize profiler.

        Args:
            enable_memory_tracking: Whether to sample the process RSS
        """
        self.enable_memory_tracking = enable_memory_tracking
        self.reports: List[ProfileReport] = []
        self.logger = get_logger(__name__, None, "profiler")

    def _rss(self) -> int:
        if not self.enable_memory_tracking:
            return 0
        return psutil.Process().memory_info().rss

    def profile(
        self,
        data: BytesLike,
        mode: TranscodeMode,
        policy: ErrorPolicy = ErrorPolicy.REPLACE,
        iterations: int = 1,
    ) -> ProfileReport:
        """Run sizing and writing passes ``iterations`` times.

        Under the ABORT policy a conflicting input stops after the first
        sizing pass and the report is marked ``aborted``.

        Args:
            data: Input bytes
            mode: ENCODE or DECODE
            policy: Error policy for both passes
            iterations: Number of runs

        Returns:
            ProfileReport with per-pass timings
        """
        if iterations <= 0:
            raise ValueError("iterations must be > 0")

        source = as_byte_view(data)
        report = ProfileReport(
            mode=mode,
            policy=policy,
            input_bytes=len(source),
            iterations=iterations,
            memory_start=self._rss(),
        )

        for _ in range(iterations):
            start = time.perf_counter()
            size = transcode_size(source, mode, policy)
            report.passes.append(PassTiming("sizing", start, time.perf_counter()))
            if size == ABORTED:
                report.aborted = True
                break

            buffer = bytearray(size)
            start = time.perf_counter()
            report.output_bytes = transcode_into(buffer, source, mode, policy)
            report.passes.append(PassTiming("writing", start, time.perf_counter()))

        report.memory_end = self._rss()
        self.reports.append(report)

        self.logger.info(
            "Profiled transcoding run",
            extra={
                "mode": mode.value,
                "iterations": iterations,
                "total_duration_ms": report.total_duration_ms,
                "memory_delta": report.memory_delta,
            }
        )
        return report

    def clear(self) -> None:
        """Drop collected reports."""
        self.reports.clear()

    def summary(self) -> Optional[Dict[str, Any]]:
        """Aggregate over collected reports, or None if nothing was profiled."""
        if not self.reports:
            return None
        return {
            "report_count": len(self.reports),
            "average_duration_ms": (
                sum(r.total_duration_ms for r in self.reports) / len(self.reports)
            ),
            "average_throughput_mb_per_s": (
                sum(r.throughput_mb_per_s for r in self.reports) / len(self.reports)
            ),
        }
