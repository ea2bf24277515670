"""Tests for the CLI main module."""

import io
import json
from pathlib import Path
from unittest.mock import Mock, patch

import pytest

from xtf8.cli.main import CLIConfig, create_argument_parser, main
from xtf8.shared.config import ErrorPolicy
from xtf8.shared.errors import ConfigError, ConfigValidationError

BINARY = b"\x00\x01 binary \xff\xfe\x80 \xc3\x28 \xe2\x82\xac \xf0\x9f"
COLLISION = "\uef90".encode("utf-8")


@pytest.fixture
def binary_file(tmp_path):
    path = tmp_path / "input.bin"
    path.write_bytes(BINARY)
    return path


class TestCLIConfig:
    """Test CLI configuration management."""

    def test_default_config(self):
        """Test default configuration values."""
        config = CLIConfig()

        assert config.settings.codec.policy is ErrorPolicy.REPLACE
        assert config.verbose is False

    def test_config_from_file(self, tmp_path):
        """Test loading configuration from a JSON file."""
        path = tmp_path / "xtf8.json"
        path.write_text(json.dumps({
            "codec": {"policy": "abort"},
            "global_": {"json_escape": True},
        }))

        config = CLIConfig.from_file(path)

        assert config.settings.codec.policy is ErrorPolicy.ABORT
        assert config.settings.global_.json_escape is True

    def test_config_from_nonexistent_file(self):
        """Test that a missing config file raises ConfigError."""
        with pytest.raises(ConfigError, match="cannot read config file"):
            CLIConfig.from_file(Path("nonexistent.json"))

    def test_config_invalid_content(self, tmp_path):
        """Test that an invalid settings file is reported."""
        path = tmp_path / "bad.json"
        path.write_text(json.dumps({"codec": {"policy": "skip"}}))

        with pytest.raises(ConfigValidationError):
            CLIConfig.from_file(path)

    def test_policy_override(self):
        """Test that a command-line policy overrides the settings."""
        config = CLIConfig()

        assert config.codec_config("abort").policy is ErrorPolicy.ABORT
        assert config.codec_config(None).policy is ErrorPolicy.REPLACE


class TestArgumentParser:
    """Test argument parser creation."""

    def test_encode_arguments(self):
        """Test parsing of encode options."""
        parser = create_argument_parser()

        args = parser.parse_args([
            "encode", "-i", "in.bin", "-o", "out.txt", "-j", "-x", "--policy", "abort"
        ])

        assert args.command == "encode"
        assert args.input == Path("in.bin")
        assert args.output == Path("out.txt")
        assert args.json and args.hexdump
        assert args.policy == "abort"

    def test_global_options(self):
        """Test global verbosity flags."""
        parser = create_argument_parser()

        args = parser.parse_args(["-v", "decode"])

        assert args.verbose is True
        assert args.quiet is False
        assert args.input is None

    def test_invalid_policy(self):
        """Test that unknown policies are refused by argparse."""
        parser = create_argument_parser()

        with pytest.raises(SystemExit):
            parser.parse_args(["encode", "--policy", "ignore"])

    def test_version(self, capsys):
        """Test --version output."""
        with pytest.raises(SystemExit) as exc_info:
            main(["--version"])

        assert exc_info.value.code == 0
        assert "xtf8 0.1.0" in capsys.readouterr().out


class TestMainFunction:
    """Test the main CLI entry point."""

    def test_no_command(self, capsys):
        """Test that running without a command prints help and fails."""
        assert main([]) == 1
        assert "usage" in capsys.readouterr().out

    def test_encode_decode_files(self, tmp_path, binary_file):
        """Test an end-to-end round trip through files."""
        # Arrange
        encoded = tmp_path / "encoded.txt"
        decoded = tmp_path / "decoded.bin"

        # Act
        encode_status = main(["encode", "-i", str(binary_file), "-o", str(encoded)])
        decode_status = main(["decode", "-i", str(encoded), "-o", str(decoded)])

        # Assert
        assert encode_status == 0
        assert decode_status == 0
        encoded.read_bytes().decode("utf-8")
        assert decoded.read_bytes() == BINARY

    def test_json_round_trip(self, tmp_path, binary_file):
        """Test encode with escaping and decode with unescaping."""
        escaped = tmp_path / "escaped.txt"
        decoded = tmp_path / "decoded.bin"

        assert main(["encode", "-j", "-i", str(binary_file), "-o", str(escaped)]) == 0
        assert main(["decode", "-j", "-i", str(escaped), "-o", str(decoded)]) == 0

        assert b"\x00" not in escaped.read_bytes()
        assert decoded.read_bytes() == BINARY

    def test_empty_input(self, tmp_path):
        """Test that empty input produces empty output."""
        source = tmp_path / "empty.bin"
        source.write_bytes(b"")
        target = tmp_path / "out.txt"

        assert main(["encode", "-i", str(source), "-o", str(target)]) == 0
        assert target.read_bytes() == b""

    def test_hexdump_output(self, tmp_path):
        """Test that -x writes a hexdump instead of raw bytes."""
        source = tmp_path / "in.bin"
        source.write_bytes(b"\xff")
        target = tmp_path / "out.txt"

        assert main(["encode", "-x", "-i", str(source), "-o", str(target)]) == 0
        assert target.read_text() == (
            "00000000  " + "ee bf bf ".ljust(49) + " |...|\n00000003\n"
        )

    def test_abort_policy_failure(self, tmp_path, capsys):
        """Test that an aborted call exits with status 1."""
        source = tmp_path / "in.txt"
        source.write_bytes(b"ok\xff")
        target = tmp_path / "out.bin"

        status = main(["decode", "--policy", "abort", "-i", str(source), "-o", str(target)])

        assert status == 1
        assert "xtf8: decode aborted at byte 2" in capsys.readouterr().err
        assert not target.exists()

    def test_config_file_policy(self, tmp_path, capsys):
        """Test that the settings file policy is applied."""
        config_path = tmp_path / "xtf8.json"
        config_path.write_text(json.dumps({"codec": {"policy": "abort"}}))
        source = tmp_path / "in.txt"
        source.write_bytes(COLLISION)

        with patch("xtf8.cli.main.configure_logging") as configure:
            status = main([
                "encode", "-c", str(config_path), "-i", str(source),
                "-o", str(tmp_path / "out.txt"),
            ])

        assert status == 1
        configure.assert_called_once_with("WARNING")
        assert "collides with the reserved range" in capsys.readouterr().err

    def test_bad_json_escape(self, tmp_path, capsys):
        """Test that malformed escapes exit with status 1."""
        source = tmp_path / "in.txt"
        source.write_bytes(b"abc\\q")

        status = main(["decode", "-j", "-i", str(source), "-o", str(tmp_path / "o")])

        assert status == 1
        assert "invalid escape sequence" in capsys.readouterr().err

    def test_missing_input_file(self, tmp_path, capsys):
        """Test that a missing input file exits with status 1."""
        status = main(["encode", "-i", str(tmp_path / "missing.bin")])

        assert status == 1
        assert "cannot open" in capsys.readouterr().err

    def test_standard_streams(self):
        """Test reading stdin and writing stdout by default."""
        stdin = Mock()
        stdin.buffer = io.BytesIO(b"\x80")
        stdout = Mock()
        stdout.buffer = io.BytesIO()

        with patch("sys.stdin", stdin), patch("sys.stdout", stdout):
            status = main(["encode"])

        assert status == 0
        assert stdout.buffer.getvalue() == b"\xee\xbe\x80"

    def test_verbose_dumps_stages(self, binary_file, tmp_path, capsys):
        """Test that verbose mode writes hexdumps to stderr."""
        with patch("xtf8.cli.main.configure_logging") as configure:
            status = main([
                "-v", "encode", "-i", str(binary_file), "-o", str(tmp_path / "out.txt")
            ])

        assert status == 0
        configure.assert_called_once_with("DEBUG")
        err = capsys.readouterr().err
        assert f"input (len={len(BINARY)})" in err
        assert "encoded (len=" in err

    def test_quiet(self, binary_file, tmp_path):
        """Test that quiet mode only logs errors."""
        with patch("xtf8.cli.main.configure_logging") as configure:
            main(["-q", "encode", "-i", str(binary_file), "-o", str(tmp_path / "o")])

        configure.assert_called_once_with("ERROR")

    def test_keyboard_interrupt(self, capsys):
        """Test exit status on interrupt."""
        with patch("xtf8.cli.main.cmd_encode", side_effect=KeyboardInterrupt):
            assert main(["encode"]) == 130

        assert "interrupted" in capsys.readouterr().err

    def test_bench_json(self, binary_file, capsys):
        """Test the bench subcommand with JSON output."""
        status = main(["bench", "-i", str(binary_file), "-n", "2", "-f", "json"])

        report = json.loads(capsys.readouterr().out)
        assert status == 0
        assert report["iterations"] == 2
        assert report["input_bytes"] == len(BINARY)
        assert report["aborted"] is False

    def test_bench_text_abort(self, binary_file, capsys):
        """Test that a bench run aborted by policy exits with status 1."""
        status = main([
            "bench", "-i", str(binary_file), "--mode", "decode", "--policy", "abort"
        ])

        assert status == 1
        assert "Aborted during the sizing pass" in capsys.readouterr().out
