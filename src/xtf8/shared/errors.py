"""Exception hierarchy for XTF8 transcoding.

Library code raises these; the command-line driver catches them at the edge
and turns them into exit codes.
"""

from typing import List, Optional


class XTF8Error(Exception):
    """Base exception for all XTF8 errors."""


class TranscodeAbortedError(XTF8Error):
    """Raised when the ABORT policy stops a transcoding call.

    During encode this means a genuine codepoint inside the reserved
    private-use range was found; during decode it means the input is not
    well-formed UTF-8.
    """

    def __init__(self, mode: str, offset: int, reason: str) -> None:
        super().__init__(f"{mode} aborted at byte {offset}: {reason}")
        self.mode = mode
        self.offset = offset
        self.reason = reason


class InvariantViolationError(XTF8Error):
    """Raised when an internal transcoder invariant does not hold."""


class JSONUnescapeError(XTF8Error):
    """Raised when a JSON string escape sequence cannot be parsed."""

    def __init__(self, message: str, offset: int) -> None:
        super().__init__(f"{message} (at byte {offset})")
        self.offset = offset


class StreamError(XTF8Error):
    """Base exception for stream reading and writing failures."""


class StreamReadError(StreamError):
    """Raised when input cannot be read completely."""


class InputTooLargeError(StreamReadError):
    """Raised when a stream holds more bytes than the configured limit."""

    def __init__(self, limit: int) -> None:
        super().__init__(f"input exceeds limit of {limit} bytes")
        self.limit = limit


class StreamWriteError(StreamError):
    """Raised when output cannot be written completely."""


class ConfigError(XTF8Error):
    """Base exception for configuration errors."""


class ConfigValidationError(ConfigError):
    """Exception raised when configuration validation fails."""

    def __init__(self, message: str, field_name: Optional[str] = None,
                 suggestions: Optional[List[str]] = None):
        super().__init__(message)
        self.field_name = field_name
        self.suggestions = suggestions or []
