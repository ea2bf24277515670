"""Command-line interface module for XTF8.

This module provides the ``xtf8`` tool for encoding and decoding files and
standard streams, and for profiling the transcoder.
"""

from .main import main

__all__ = ["main"]
