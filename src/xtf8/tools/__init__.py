"""Developer tools module for XTF8.

This module provides the JSON string escaper, the hexdump formatter and
scanner trace, and the transcoding profiler.
"""

from .debugging import ScanTraceEntry, hexdump, trace_scan, write_hexdump
from .json_string import json_escape, json_escaped_size, json_unescape
from .profiling import PassTiming, ProfileReport, TranscodeProfiler

__all__ = [
    "ScanTraceEntry",
    "hexdump",
    "trace_scan",
    "write_hexdump",
    "json_escape",
    "json_escaped_size",
    "json_unescape",
    "PassTiming",
    "ProfileReport",
    "TranscodeProfiler",
]
