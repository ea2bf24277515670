#!/usr/bin/env python3
"""
Quick Start Guide for XTF8.

This example walks through the three API levels: the simple encode and
decode functions, the configured codec with diagnostics, and the two-pass
primitives for caller-managed buffers.
"""

import sys
from pathlib import Path

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from xtf8 import (
    ABORTED,
    CodecConfig,
    ErrorPolicy,
    TranscodeMode,
    XTF8Codec,
    decode,
    encode,
    transcode_into,
    transcode_size,
)
from xtf8.tools import hexdump, json_escape, json_unescape


def quick_start_example():
    """Quick start example showing basic usage."""

    print("🚀 QUICK START - XTF8")
    print("=" * 45)

    # Step 1: Round-trip arbitrary bytes
    print("\n📦 Step 1: Encode and Decode")
    print("-" * 30)

    payload = b"\x89PNG\r\n\x1a\n\x00\x00 header \xff\xfe text \xe2\x82\xac"
    encoded = encode(payload)
    print(f"✅ Encoded {len(payload)} bytes into {len(encoded)} bytes of UTF-8")
    print(f"🔤 As text: {encoded.decode('utf-8')!r}")
    print(f"🔁 Round trip exact: {decode(encoded) == payload}")
    print(hexdump(encoded), end="")

    # Step 2: Configured codec with diagnostics
    print("\n🔍 Step 2: Diagnostics")
    print("-" * 30)

    codec = XTF8Codec(correlation_id="quick-start")
    result = codec.encode(payload + "\uef90".encode("utf-8"))
    print(f"✅ Success: {result.success}, lossless: {result.lossless}")
    for diagnostic in result.diagnostics:
        print(f"  - {diagnostic.kind.value} at byte {diagnostic.offset}: "
              f"{diagnostic.message}")

    strict = XTF8Codec(CodecConfig.strict())
    failed = strict.decode(b"not utf-8 \xff")
    print(f"⛔ Strict decode success: {failed.success}")
    for error in failed.errors():
        print(f"  - {error.message}")

    # Step 3: Two-pass primitives
    print("\n📏 Step 3: Sizing and Writing Passes")
    print("-" * 30)

    size = transcode_size(payload, TranscodeMode.ENCODE, ErrorPolicy.ABORT)
    if size == ABORTED:
        print("⛔ Input contains a reserved codepoint")
    else:
        buffer = bytearray(size)
        end = transcode_into(buffer, payload, TranscodeMode.ENCODE, ErrorPolicy.ABORT)
        print(f"✅ Measured {size} bytes, wrote {end}")

    # Step 4: JSON transport
    print("\n🧾 Step 4: JSON String Transport")
    print("-" * 30)

    body = json_escape(encoded)
    print(f"✅ JSON body: \"{body.decode('utf-8')}\"")
    print(f"🔁 Recovered: {decode(json_unescape(body)) == payload}")


if __name__ == "__main__":
    quick_start_example()
