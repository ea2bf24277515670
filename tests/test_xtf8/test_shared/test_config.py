"""Tests for the configuration classes."""

import json

import pytest

from xtf8.shared.config import (
    DEFAULT_BLOCK_SIZE,
    CodecConfig,
    ErrorPolicy,
    GlobalConfig,
    StreamConfig,
    TranscodeMode,
    XTF8Config,
)
from xtf8.shared.errors import ConfigValidationError


class TestEnums:
    """Test mode and policy enumerations."""

    def test_mode_values(self):
        """Test that mode values match their command-line names."""
        assert TranscodeMode("encode") is TranscodeMode.ENCODE
        assert TranscodeMode("decode") is TranscodeMode.DECODE

    def test_policy_values(self):
        """Test that policy values match their command-line names."""
        assert ErrorPolicy("replace") is ErrorPolicy.REPLACE
        assert ErrorPolicy("abort") is ErrorPolicy.ABORT


class TestCodecConfig:
    """Test CodecConfig validation and presets."""

    def test_default_initialization(self):
        """Test default configuration values."""
        # Act
        config = CodecConfig()

        # Assert
        assert config.policy is ErrorPolicy.REPLACE
        assert config.verify_output is True
        assert config.max_input_size_bytes is None
        assert config.enable_diagnostics is True

    def test_policy_string_is_coerced(self):
        """Test that a policy given by name becomes the enum member."""
        config = CodecConfig(policy="abort")

        assert config.policy is ErrorPolicy.ABORT

    def test_unknown_policy_rejected(self):
        """Test that an unknown policy name raises ValueError."""
        with pytest.raises(ValueError):
            CodecConfig(policy="ignore")

    def test_non_positive_limit_rejected(self):
        """Test that a zero input limit is rejected."""
        with pytest.raises(ValueError, match="max_input_size_bytes"):
            CodecConfig(max_input_size_bytes=0)

    def test_presets(self):
        """Test the strict and lenient presets."""
        assert CodecConfig.strict().policy is ErrorPolicy.ABORT
        assert CodecConfig.lenient().policy is ErrorPolicy.REPLACE


class TestStreamAndGlobalConfig:
    """Test StreamConfig and GlobalConfig validation."""

    def test_stream_defaults(self):
        """Test default stream settings."""
        config = StreamConfig()

        assert config.block_size == DEFAULT_BLOCK_SIZE == 1024
        assert config.max_input_size_bytes is None

    def test_stream_block_size_must_be_positive(self):
        """Test that a zero block size is rejected."""
        with pytest.raises(ValueError, match="block_size"):
            StreamConfig(block_size=0)

    def test_invalid_logging_level(self):
        """Test that an unknown logging level is rejected."""
        with pytest.raises(ValueError, match="logging_level"):
            GlobalConfig(logging_level="VERBOSE")


class TestXTF8Config:
    """Test the aggregate configuration."""

    def test_default_configuration(self):
        """Test that defaults compose."""
        config = XTF8Config()

        assert config.codec.policy is ErrorPolicy.REPLACE
        assert config.stream.block_size == 1024
        assert config.global_.logging_level == "WARNING"
        assert config.name is None

    def test_immutable(self):
        """Test that the aggregate configuration is frozen."""
        config = XTF8Config()

        with pytest.raises(AttributeError):
            config.name = "changed"

    def test_override_nested_field(self):
        """Test overriding a component field with a double underscore key."""
        # Arrange
        config = XTF8Config()

        # Act
        strict = config.override(codec__policy=ErrorPolicy.ABORT, name="custom")

        # Assert
        assert strict.codec.policy is ErrorPolicy.ABORT
        assert strict.name == "custom"
        assert config.codec.policy is ErrorPolicy.REPLACE

    def test_override_whole_component(self):
        """Test replacing a whole component configuration."""
        config = XTF8Config().override(stream=StreamConfig(block_size=16))

        assert config.stream.block_size == 16

    def test_override_unknown_component(self):
        """Test that an unknown component raises ConfigValidationError."""
        with pytest.raises(ConfigValidationError, match="Unknown configuration component"):
            XTF8Config().override(parser__policy="abort")

    def test_override_invalid_value(self):
        """Test that invalid override values raise ConfigValidationError."""
        with pytest.raises(ConfigValidationError):
            XTF8Config().override(stream__block_size=-1)

    def test_cross_component_limit_check(self):
        """Test that the stream limit may not exceed the codec limit."""
        with pytest.raises(ConfigValidationError) as exc_info:
            XTF8Config(
                codec=CodecConfig(max_input_size_bytes=10),
                stream=StreamConfig(max_input_size_bytes=100),
            )

        assert exc_info.value.field_name == "stream.max_input_size_bytes"
        assert exc_info.value.suggestions

    def test_to_dict_uses_enum_values(self):
        """Test dictionary serialization."""
        data = XTF8Config.strict().to_dict()

        assert data["codec"]["policy"] == "abort"
        assert data["stream"]["block_size"] == 1024
        assert data["name"] == "strict"

    def test_json_round_trip(self):
        """Test that to_json output is accepted by from_json."""
        # Arrange
        config = XTF8Config().override(
            codec__policy=ErrorPolicy.ABORT, stream__block_size=64
        )

        # Act
        restored = XTF8Config.from_json(config.to_json())

        # Assert
        assert restored == config

    def test_from_dict_partial(self):
        """Test that missing sections take their defaults."""
        config = XTF8Config.from_dict({"codec": {"policy": "abort"}})

        assert config.codec.policy is ErrorPolicy.ABORT
        assert config.stream == StreamConfig()

    def test_from_dict_unknown_key(self):
        """Test that unknown top-level keys are rejected."""
        with pytest.raises(ConfigValidationError, match="Unknown configuration key"):
            XTF8Config.from_dict({"codecs": {}})

    def test_from_dict_unknown_field(self):
        """Test that unknown component fields are rejected."""
        with pytest.raises(ConfigValidationError) as exc_info:
            XTF8Config.from_dict({"codec": {"policie": "abort"}})

        assert exc_info.value.field_name == "codec"

    def test_from_dict_section_must_be_object(self):
        """Test that a non-object section is rejected."""
        with pytest.raises(ConfigValidationError, match="must be an object"):
            XTF8Config.from_dict({"stream": 1024})

    def test_from_json_invalid(self):
        """Test that malformed JSON raises ConfigValidationError."""
        with pytest.raises(ConfigValidationError, match="Invalid JSON"):
            XTF8Config.from_json("{not json")

    def test_from_json_requires_object(self):
        """Test that a non-object JSON root is rejected."""
        with pytest.raises(ConfigValidationError, match="root must be an object"):
            XTF8Config.from_json(json.dumps(["codec"]))

    def test_validate_compatibility(self):
        """Test that differing policies are reported."""
        warnings = XTF8Config.strict().validate_compatibility(XTF8Config.lenient())

        assert len(warnings) == 1
        assert "abort vs replace" in warnings[0]
