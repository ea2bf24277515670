"""Public codec API for XTF8."""

from .codec import XTF8Codec, decode, encode

__all__ = ["XTF8Codec", "decode", "encode"]
