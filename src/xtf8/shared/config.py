"""Configuration classes for XTF8 transcoding.

This module provides the per-call enumerations (mode and error policy) and
configuration objects for the codec, the stream collaborators and global
settings such as logging.
"""

import json
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Dict, List, Optional

from .errors import ConfigValidationError

VALID_LOGGING_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
DEFAULT_BLOCK_SIZE = 1024

_COMPONENTS = ["codec", "stream", "global_"]


class TranscodeMode(Enum):
    """Direction of a transcoding call."""

    ENCODE = "encode"   # arbitrary bytes -> valid UTF-8
    DECODE = "decode"   # XTF8 UTF-8 -> original bytes


class ErrorPolicy(Enum):
    """How conflicts and malformed input are handled."""

    REPLACE = "replace"  # substitute U+FFFD and carry on
    ABORT = "abort"      # fail the whole call


class TranscodeState(Enum):
    """States of a transcoding run."""

    SCANNING = "scanning"
    RESOLVING_INVALID = "resolving_invalid"
    DONE = "done"
    FAILED = "failed"


@dataclass
class CodecConfig:
    """Configuration for encode/decode calls made through the API layer."""

    policy: ErrorPolicy = ErrorPolicy.REPLACE
    verify_output: bool = True
    max_input_size_bytes: Optional[int] = None
    enable_diagnostics: bool = True
    correlation_id: Optional[str] = None

    def __post_init__(self) -> None:
        """Validate codec configuration."""
        if isinstance(self.policy, str):
            self.policy = ErrorPolicy(self.policy)
        if self.max_input_size_bytes is not None and self.max_input_size_bytes <= 0:
            raise ValueError("max_input_size_bytes must be > 0 or None")

    @classmethod
    def strict(cls) -> "CodecConfig":
        """Create configuration that refuses collisions and malformed input."""
        return cls(policy=ErrorPolicy.ABORT)

    @classmethod
    def lenient(cls) -> "CodecConfig":
        """Create configuration that always produces output."""
        return cls()  # Default configuration replaces


@dataclass
class StreamConfig:
    """Configuration for reading and writing byte streams."""

    block_size: int = DEFAULT_BLOCK_SIZE
    max_input_size_bytes: Optional[int] = None

    def __post_init__(self) -> None:
        """Validate stream configuration."""
        if self.block_size <= 0:
            raise ValueError("block_size must be > 0")
        if self.max_input_size_bytes is not None and self.max_input_size_bytes <= 0:
            raise ValueError("max_input_size_bytes must be > 0 or None")


@dataclass
class GlobalConfig:
    """Global settings that apply across all components."""

    logging_level: str = "WARNING"
    json_escape: bool = False

    def __post_init__(self) -> None:
        """Validate global configuration."""
        if self.logging_level not in VALID_LOGGING_LEVELS:
            raise ValueError(f"logging_level must be one of {VALID_LOGGING_LEVELS}")


@dataclass(frozen=True)
class XTF8Config:
    """Complete configuration for the codec, streams and global settings.

    Immutable; use :meth:`override` to derive a modified copy.
    """

    codec: CodecConfig = field(default_factory=CodecConfig)
    stream: StreamConfig = field(default_factory=StreamConfig)
    global_: GlobalConfig = field(default_factory=GlobalConfig)

    name: Optional[str] = None

    def __post_init__(self) -> None:
        """Validate the complete configuration."""
        try:
            self.codec.__post_init__()
            self.stream.__post_init__()
            self.global_.__post_init__()
        except ValueError as e:
            raise ConfigValidationError(str(e)) from e

        self._validate_cross_component_dependencies()

    def _validate_cross_component_dependencies(self) -> None:
        """Validate dependencies between component configurations."""
        codec_limit = self.codec.max_input_size_bytes
        stream_limit = self.stream.max_input_size_bytes
        if (
            codec_limit is not None
            and stream_limit is not None
            and stream_limit > codec_limit
        ):
            raise ConfigValidationError(
                f"Stream input limit ({stream_limit}) exceeds codec input "
                f"limit ({codec_limit})",
                field_name="stream.max_input_size_bytes",
                suggestions=["Reduce stream.max_input_size_bytes",
                             "Increase codec.max_input_size_bytes"]
            )

    def override(self, **kwargs: Any) -> "XTF8Config":
        """Create a new configuration with specific overrides.

        Args:
            **kwargs: ``component__field`` keys for component fields, plain
                keys for top-level fields

        Returns:
            New XTF8Config instance with overrides applied

        Example:
            >>> config = XTF8Config()
            >>> strict = config.override(codec__policy=ErrorPolicy.ABORT)
        """
        nested_overrides: Dict[str, Dict[str, Any]] = {}
        new_fields: Dict[str, Any] = {}
        for key, value in kwargs.items():
            if "__" in key:
                component, field_name = key.rsplit("__", 1)
                if component not in _COMPONENTS:
                    raise ConfigValidationError(
                        f"Unknown configuration component: {component}",
                        field_name=key,
                        suggestions=[f"Use one of {_COMPONENTS}"]
                    )
                nested_overrides.setdefault(component, {})[field_name] = value
            else:
                new_fields[key] = value

        for component, overrides in nested_overrides.items():
            current = new_fields.get(component, getattr(self, component))
            try:
                new_fields[component] = replace(current, **overrides)
            except (TypeError, ValueError) as e:
                raise ConfigValidationError(str(e), field_name=component) from e

        return replace(self, **new_fields)

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to dictionary format."""

        def _convert(obj: Any) -> Any:
            if hasattr(obj, "__dataclass_fields__"):
                return {name: _convert(getattr(obj, name))
                        for name in obj.__dataclass_fields__}
            if isinstance(obj, Enum):
                return obj.value
            return obj

        result = _convert(self)
        if not isinstance(result, dict):
            raise ConfigValidationError("Configuration serialization failed")
        return result

    def to_json(self, indent: int = 2) -> str:
        """Convert configuration to JSON string."""
        return json.dumps(self.to_dict(), indent=indent)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "XTF8Config":
        """Create configuration from dictionary.

        Unknown keys are rejected so that typos in settings files surface
        instead of being ignored.
        """
        components = {
            "codec": CodecConfig,
            "stream": StreamConfig,
            "global_": GlobalConfig,
        }
        values: Dict[str, Any] = {}
        for key, value in data.items():
            if key in components:
                if not isinstance(value, dict):
                    raise ConfigValidationError(
                        f"Section '{key}' must be an object", field_name=key
                    )
                try:
                    values[key] = components[key](**value)
                except (TypeError, ValueError) as e:
                    raise ConfigValidationError(str(e), field_name=key) from e
            elif key == "name":
                values[key] = value
            else:
                raise ConfigValidationError(
                    f"Unknown configuration key: {key}",
                    field_name=key,
                    suggestions=[f"Valid keys: {_COMPONENTS + ['name']}"]
                )
        return cls(**values)

    @classmethod
    def from_json(cls, json_str: str) -> "XTF8Config":
        """Create configuration from JSON string."""
        try:
            data = json.loads(json_str)
        except json.JSONDecodeError as e:
            raise ConfigValidationError(f"Invalid JSON configuration: {e}") from e
        if not isinstance(data, dict):
            raise ConfigValidationError("Configuration root must be an object")
        return cls.from_dict(data)

    def validate_compatibility(self, other: "XTF8Config") -> List[str]:
        """List settings that make two configurations produce different output."""
        warnings = []
        if self.codec.policy != other.codec.policy:
            warnings.append(
                f"Error policy differs: {self.codec.policy.value} vs "
                f"{other.codec.policy.value}"
            )
        if self.global_.json_escape != other.global_.json_escape:
            warnings.append("JSON escaping differs - outputs are not interchangeable")
        return warnings

    @classmethod
    def strict(cls) -> "XTF8Config":
        """Create preset that aborts on any conflict."""
        return cls(codec=CodecConfig.strict(), name="strict")

    @classmethod
    def lenient(cls) -> "XTF8Config":
        """Create preset that always produces output."""
        return cls(codec=CodecConfig.lenient(), name="lenient")
