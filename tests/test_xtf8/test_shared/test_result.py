"""Tests for result objects, diagnostics and logging helpers."""

import logging

import pytest

from xtf8.shared.config import ErrorPolicy, TranscodeMode, TranscodeState
from xtf8.shared.errors import TranscodeAbortedError, XTF8Error
from xtf8.shared.logging import get_logger
from xtf8.shared.result import (
    DiagnosticEntry,
    DiagnosticKind,
    DiagnosticSeverity,
    PerformanceMetrics,
    TranscodeResult,
)


def _entry(**overrides):
    values = {
        "severity": DiagnosticSeverity.WARNING,
        "kind": DiagnosticKind.INVALID_SEQUENCE,
        "message": "Invalid UTF-8 sequence",
        "component": "codec",
    }
    values.update(overrides)
    return DiagnosticEntry(**values)


class TestDiagnosticEntry:
    """Test DiagnosticEntry validation."""

    def test_valid_entry(self):
        """Test that a well-formed entry is accepted."""
        entry = _entry(offset=3, length=2)

        assert entry.offset == 3
        assert entry.length == 2
        assert entry.timestamp > 0

    def test_empty_message_rejected(self):
        """Test that an empty message raises ValueError."""
        with pytest.raises(ValueError, match="message cannot be empty"):
            _entry(message="")

    def test_empty_component_rejected(self):
        """Test that an empty component raises ValueError."""
        with pytest.raises(ValueError, match="component cannot be empty"):
            _entry(component="")

    def test_negative_offset_rejected(self):
        """Test that a negative offset raises ValueError."""
        with pytest.raises(ValueError, match="offset"):
            _entry(offset=-1)


class TestPerformanceMetrics:
    """Test PerformanceMetrics derived values."""

    def test_expansion_ratio(self):
        """Test output to input ratio."""
        metrics = PerformanceMetrics(input_bytes=4, output_bytes=12)

        assert metrics.expansion_ratio == 3.0

    def test_expansion_ratio_empty_input(self):
        """Test that empty input reports a neutral ratio."""
        assert PerformanceMetrics().expansion_ratio == 1.0

    def test_bytes_per_second(self):
        """Test throughput calculation."""
        metrics = PerformanceMetrics(processing_time_ms=500.0, input_bytes=1000)

        assert metrics.bytes_per_second == 2000.0
        assert PerformanceMetrics().bytes_per_second == 0.0


class TestTranscodeResult:
    """Test TranscodeResult properties."""

    def test_success_follows_state(self):
        """Test that only DONE counts as success."""
        done = TranscodeResult(
            b"", TranscodeMode.ENCODE, ErrorPolicy.REPLACE, TranscodeState.DONE
        )
        failed = TranscodeResult(
            b"", TranscodeMode.ENCODE, ErrorPolicy.ABORT, TranscodeState.FAILED
        )

        assert done.success is True
        assert failed.success is False

    def test_lossless_requires_no_collisions(self):
        """Test that a replaced collision makes the result lossy."""
        result = TranscodeResult(
            b"\xef\xbf\xbd",
            TranscodeMode.ENCODE,
            ErrorPolicy.REPLACE,
            TranscodeState.DONE,
            performance=PerformanceMetrics(collisions=1),
        )

        assert result.collision_count == 1
        assert result.lossless is False

    def test_decode_replacement_is_lossy(self):
        """Test that a decode result with replaced runs is not lossless."""
        replaced = TranscodeResult(
            b"\xef\xbf\xbd",
            TranscodeMode.DECODE,
            ErrorPolicy.REPLACE,
            TranscodeState.DONE,
            performance=PerformanceMetrics(invalid_sequences=1),
        )
        clean = TranscodeResult(
            b"\xff",
            TranscodeMode.DECODE,
            ErrorPolicy.REPLACE,
            TranscodeState.DONE,
        )

        assert replaced.invalid_count == 1
        assert replaced.lossless is False
        assert clean.lossless is True

    def test_errors_filter(self):
        """Test that errors() returns only ERROR severity entries."""
        result = TranscodeResult(
            b"",
            TranscodeMode.DECODE,
            ErrorPolicy.ABORT,
            TranscodeState.FAILED,
            diagnostics=[
                _entry(),
                _entry(
                    severity=DiagnosticSeverity.ERROR,
                    kind=DiagnosticKind.ABORTED,
                    message="decode aborted",
                ),
            ],
        )

        assert [d.kind for d in result.errors()] == [DiagnosticKind.ABORTED]

    def test_summary(self):
        """Test the dictionary summary."""
        result = TranscodeResult(
            b"abc",
            TranscodeMode.ENCODE,
            ErrorPolicy.REPLACE,
            TranscodeState.DONE,
            diagnostics=[_entry(offset=1)],
            performance=PerformanceMetrics(input_bytes=3, output_bytes=3),
        )

        summary = result.summary()

        assert summary["mode"] == "encode"
        assert summary["policy"] == "replace"
        assert summary["success"] is True
        assert summary["diagnostics"][0]["kind"] == "invalid_sequence"
        assert summary["diagnostics"][0]["offset"] == 1


class TestErrorsAndLogging:
    """Test the error hierarchy and correlation logger."""

    def test_aborted_error_fields(self):
        """Test that the abort error keeps its position and reason."""
        error = TranscodeAbortedError("decode", 7, "invalid UTF-8 sequence")

        assert isinstance(error, XTF8Error)
        assert error.offset == 7
        assert str(error) == "decode aborted at byte 7: invalid UTF-8 sequence"

    def test_logger_adds_component_and_correlation(self, caplog):
        """Test that records carry component and correlation ID extras."""
        logger = get_logger("xtf8.test", "req-1", "codec")

        with caplog.at_level(logging.INFO, logger="xtf8.test"):
            logger.info("started", extra={"input_bytes": 5})

        record = caplog.records[-1]
        assert record.component == "codec"
        assert record.correlation_id == "req-1"
        assert record.input_bytes == 5

    def test_logger_default_component(self):
        """Test that the component defaults to the last name segment."""
        logger = get_logger("xtf8.character.transcoder")

        assert logger.component == "transcoder"
