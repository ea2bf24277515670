"""XTF8: lossless transcoding between arbitrary bytes and valid UTF-8.

Well-formed UTF-8 in the input passes through unchanged; every other byte is
carried in the private-use range U+EF80..U+EFFF so that the output is always
valid UTF-8 and decodes back to the original bytes.

Progressive API Disclosure:
- Level 1: Simple functions - encode(), decode()
- Level 2: Configured codec - XTF8Codec class
- Level 3: Two-pass primitives - transcode_size(), transcode_into()
"""

__version__ = "0.1.0"
__author__ = "XTF8 Team"

# Progressive API disclosure - Level 1 and Level 2
from .api import XTF8Codec, decode, encode

# Level 3: caller-managed buffers
from .character.transcoder import ABORTED, transcode_into, transcode_size, transform

# Configuration classes for advanced usage
from .shared.config import CodecConfig, ErrorPolicy, TranscodeMode, XTF8Config

# Errors and result objects
from .shared.errors import JSONUnescapeError, TranscodeAbortedError, XTF8Error
from .shared.result import TranscodeResult

__all__ = [
    # Version and metadata
    "__author__",
    "__version__",

    # Level 1: Simple functions
    "encode",
    "decode",

    # Level 2: Configured codec
    "XTF8Codec",

    # Level 3: Two-pass primitives
    "ABORTED",
    "transcode_size",
    "transcode_into",
    "transform",

    # Configuration classes
    "CodecConfig",
    "ErrorPolicy",
    "TranscodeMode",
    "XTF8Config",

    # Errors and results
    "JSONUnescapeError",
    "TranscodeAbortedError",
    "XTF8Error",
    "TranscodeResult",
]
