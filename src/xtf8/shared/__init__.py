"""Shared utilities for XTF8 transcoding.

This module provides shared data structures, configuration objects, error
types, result types and logging used across all layers.
"""

from .errors import (
    ConfigError,
    ConfigValidationError,
    InputTooLargeError,
    InvariantViolationError,
    JSONUnescapeError,
    StreamError,
    StreamReadError,
    StreamWriteError,
    TranscodeAbortedError,
    XTF8Error,
)
from .config import (
    CodecConfig,
    ErrorPolicy,
    GlobalConfig,
    StreamConfig,
    TranscodeMode,
    TranscodeState,
    XTF8Config,
)
from .result import (
    DiagnosticEntry,
    DiagnosticKind,
    DiagnosticSeverity,
    PerformanceMetrics,
    TranscodeResult,
)
from .logging import (
    CorrelationLogger,
    configure_logging,
    get_logger,
)

__all__ = [
    "ConfigError",
    "ConfigValidationError",
    "InputTooLargeError",
    "InvariantViolationError",
    "JSONUnescapeError",
    "StreamError",
    "StreamReadError",
    "StreamWriteError",
    "TranscodeAbortedError",
    "XTF8Error",
    "CodecConfig",
    "ErrorPolicy",
    "GlobalConfig",
    "StreamConfig",
    "TranscodeMode",
    "TranscodeState",
    "XTF8Config",
    "DiagnosticEntry",
    "DiagnosticKind",
    "DiagnosticSeverity",
    "PerformanceMetrics",
    "TranscodeResult",
    "CorrelationLogger",
    "configure_logging",
    "get_logger",
]
