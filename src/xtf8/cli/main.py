"""Main CLI entry point for the xtf8 command-line tool.

Encodes arbitrary binary input into valid UTF-8 and decodes it back, with
optional JSON string escaping, hexdump output and a profiling subcommand.
"""

import argparse
import json
import sys
from pathlib import Path
from typing import List, Optional

from .. import __version__
from ..api.codec import XTF8Codec
from ..character.stream import read_input, write_output
from ..shared.config import CodecConfig, ErrorPolicy, TranscodeMode, XTF8Config
from ..shared.errors import ConfigError, ConfigValidationError, XTF8Error
from ..shared.logging import configure_logging, get_logger
from ..tools.debugging import hexdump, write_hexdump
from ..tools.json_string import json_escape, json_unescape
from ..tools.profiling import TranscodeProfiler

EXIT_SUCCESS = 0
EXIT_FAILURE = 1
EXIT_INTERRUPTED = 130  # Standard exit code for SIGINT

_logger = get_logger(__name__, None, "cli")


class CLIConfig:
    """Configuration management for CLI operations."""

    def __init__(self, settings: Optional[XTF8Config] = None) -> None:
        self.settings = settings or XTF8Config()
        self.verbose = False

    @classmethod
    def from_file(cls, config_path: Path) -> "CLIConfig":
        """Load CLI configuration from a JSON settings file.

        Raises:
            ConfigError: the file cannot be read
            ConfigValidationError: the file is not a valid configuration
        """
        try:
            text = config_path.read_text()
        except OSError as e:
            raise ConfigError(f"cannot read config file {config_path}: {e}") from e
        return cls(XTF8Config.from_json(text))

    def codec_config(self, policy: Optional[str] = None) -> CodecConfig:
        """Codec settings with an optional command-line policy override."""
        if policy is None:
            return self.settings.codec
        try:
            return self.settings.override(codec__policy=ErrorPolicy(policy)).codec
        except ValueError as e:
            raise ConfigValidationError(str(e), field_name="policy") from e


def _add_transcode_arguments(parser: argparse.ArgumentParser, json_help: str) -> None:
    parser.add_argument(
        "--input", "-i",
        type=Path,
        help="Input file (default: stdin)"
    )
    parser.add_argument(
        "--output", "-o",
        type=Path,
        help="Output file (default: stdout)"
    )
    parser.add_argument(
        "--json", "-j",
        action="store_true",
        help=json_help
    )
    parser.add_argument(
        "--hexdump", "-x",
        action="store_true",
        help="Write a hexdump of the result instead of raw bytes"
    )
    parser.add_argument(
        "--policy",
        choices=[p.value for p in ErrorPolicy],
        help="Error policy (default: replace, or the config file setting)"
    )
    parser.add_argument(
        "--config", "-c",
        type=Path,
        help="Configuration file path"
    )


def create_argument_parser() -> argparse.ArgumentParser:
    """Create and configure argument parser."""
    parser = argparse.ArgumentParser(
        prog="xtf8",
        description="Binary-safe transcoding between arbitrary bytes and UTF-8",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  xtf8 encode -i image.bin -o image.txt
  xtf8 decode -i image.txt -o image.bin
  xtf8 encode --json < blob.bin
  xtf8 decode --policy abort -x < text.txt
  xtf8 bench -i large.bin --iterations 20
        """
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}"
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    encode_parser = subparsers.add_parser(
        "encode", help="Encode arbitrary bytes into valid UTF-8"
    )
    _add_transcode_arguments(encode_parser, "Escape the output as a JSON string body")

    decode_parser = subparsers.add_parser(
        "decode", help="Decode XTF8 UTF-8 back into the original bytes"
    )
    _add_transcode_arguments(decode_parser, "Unescape JSON string escapes before decoding")

    bench_parser = subparsers.add_parser(
        "bench", help="Profile the sizing and writing passes over an input file"
    )
    bench_parser.add_argument(
        "--input", "-i",
        type=Path,
        required=True,
        help="Input file to profile"
    )
    bench_parser.add_argument(
        "--mode",
        choices=[m.value for m in TranscodeMode],
        default=TranscodeMode.ENCODE.value,
        help="Direction to profile (default: encode)"
    )
    bench_parser.add_argument(
        "--policy",
        choices=[p.value for p in ErrorPolicy],
        default=ErrorPolicy.REPLACE.value,
        help="Error policy (default: replace)"
    )
    bench_parser.add_argument(
        "--iterations", "-n",
        type=int,
        default=10,
        help="Number of runs (default: 10)"
    )
    bench_parser.add_argument(
        "--format", "-f",
        choices=["json", "text"],
        default="text",
        help="Report format"
    )

    # Global options
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Debug logging and hexdumps of each stage on stderr"
    )
    parser.add_argument(
        "--quiet", "-q",
        action="store_true",
        help="Only log errors"
    )

    return parser


def _load_config(args: argparse.Namespace) -> CLIConfig:
    if args.config:
        config = CLIConfig.from_file(args.config)
        if not (args.verbose or args.quiet):
            configure_logging(config.settings.global_.logging_level)
    else:
        config = CLIConfig()
    config.verbose = args.verbose
    return config


def _trace(config: CLIConfig, title: str, data: bytes) -> None:
    if config.verbose:
        write_hexdump(sys.stderr, data, title)


def _transcode(args: argparse.Namespace, mode: TranscodeMode) -> int:
    config = _load_config(args)
    codec = XTF8Codec(config.codec_config(args.policy))
    use_json = args.json or config.settings.global_.json_escape

    data = read_input(args.input, config.settings.stream)
    _trace(config, "input", data)

    if use_json and mode is TranscodeMode.DECODE:
        data = json_unescape(data)
        _trace(config, "unescaped", data)

    result = codec.transcode(data, mode)
    if not result.success:
        for diagnostic in result.errors():
            print(f"xtf8: {diagnostic.message}", file=sys.stderr)
        return EXIT_FAILURE

    output = result.output
    _trace(config, mode.value + "d", output)

    if use_json and mode is TranscodeMode.ENCODE:
        output = json_escape(output)
        _trace(config, "escaped", output)

    if args.hexdump:
        output = hexdump(output).encode("ascii")

    write_output(args.output, output, config.settings.stream)

    _logger.info(
        f"{mode.value} complete",
        extra={
            "input_bytes": result.performance.input_bytes,
            "output_bytes": len(output),
            "collisions": result.collision_count,
            "invalid_sequences": result.invalid_count,
        }
    )
    return EXIT_SUCCESS


def cmd_encode(args: argparse.Namespace) -> int:
    """Handle encode command."""
    return _transcode(args, TranscodeMode.ENCODE)


def cmd_decode(args: argparse.Namespace) -> int:
    """Handle decode command."""
    return _transcode(args, TranscodeMode.DECODE)


def cmd_bench(args: argparse.Namespace) -> int:
    """Handle bench command."""
    if args.iterations <= 0:
        print("xtf8: --iterations must be > 0", file=sys.stderr)
        return EXIT_FAILURE

    data = read_input(args.input)
    profiler = TranscodeProfiler()
    report = profiler.profile(
        data, TranscodeMode(args.mode), ErrorPolicy(args.policy), args.iterations
    )

    if args.format == "json":
        print(json.dumps(report.to_dict(), indent=2))
    else:
        print(f"Profiled {report.mode.value} of {report.input_bytes} bytes, "
              f"{report.iterations} iteration(s)")
        print("-" * 50)
        if report.aborted:
            print("Aborted during the sizing pass")
        print(f"Output size:     {report.output_bytes} bytes")
        print(f"Sizing pass:     {report.average_sizing_ms:.3f} ms avg")
        print(f"Writing pass:    {report.average_writing_ms:.3f} ms avg")
        print(f"Throughput:      {report.throughput_mb_per_s:.2f} MB/s")
        print(f"Memory delta:    {report.memory_delta} bytes")

    return EXIT_FAILURE if report.aborted else EXIT_SUCCESS


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI entry point."""
    parser = create_argument_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return EXIT_FAILURE

    # Set up logging verbosity
    if args.verbose:
        configure_logging("DEBUG")
    elif args.quiet:
        configure_logging("ERROR")

    # Route to appropriate command handler
    try:
        if args.command == "encode":
            return cmd_encode(args)
        elif args.command == "decode":
            return cmd_decode(args)
        elif args.command == "bench":
            return cmd_bench(args)
        else:
            print(f"Unknown command: {args.command}", file=sys.stderr)
            return EXIT_FAILURE

    except XTF8Error as e:
        print(f"xtf8: {e}", file=sys.stderr)
        return EXIT_FAILURE
    except KeyboardInterrupt:
        print("\nOperation interrupted by user", file=sys.stderr)
        return EXIT_INTERRUPTED


if __name__ == "__main__":
    sys.exit(main())
