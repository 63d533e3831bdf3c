"""Configuration classes for tag shape extraction.

This module provides configuration objects for the event source, the tree
builder and the renderer, plus an immutable aggregate with presets and JSON
round-tripping.
"""

import json
from dataclasses import dataclass, field, replace
from enum import Enum, auto
from pathlib import Path
from typing import Any, Dict, List, Optional, Union


class UnderflowPolicy(Enum):
    """What to do with a closing tag when only the root is open."""

    IGNORE = auto()   # Drop it silently
    WARN = auto()     # Drop it and record a warning diagnostic
    RAISE = auto()    # Abort the build with StackUnderflowError


class TruncationPolicy(Enum):
    """How a stream cut short by a malformed token is reported."""

    SILENT = auto()   # Adapter log record only
    WARN = auto()     # Also a warning diagnostic on the result


@dataclass
class EventSourceConfig:
    """Configuration for the lxml-backed raw event source."""

    huge_tree: bool = False
    no_network: bool = True
    recover: bool = False
    release_elements: bool = True

    def __post_init__(self) -> None:
        """Validate event source configuration."""
        for name in ("huge_tree", "no_network", "recover", "release_elements"):
            if not isinstance(getattr(self, name), bool):
                raise ValueError(f"{name} must be a boolean")


@dataclass
class BuilderConfig:
    """Configuration for shape tree construction."""

    underflow_policy: UnderflowPolicy = UnderflowPolicy.IGNORE
    truncation_policy: TruncationPolicy = TruncationPolicy.WARN
    max_depth: Optional[int] = None
    collect_metrics: bool = True

    def __post_init__(self) -> None:
        """Validate builder configuration."""
        if not isinstance(self.underflow_policy, UnderflowPolicy):
            raise ValueError("underflow_policy must be an UnderflowPolicy")
        if not isinstance(self.truncation_policy, TruncationPolicy):
            raise ValueError("truncation_policy must be a TruncationPolicy")
        if self.max_depth is not None:
            if isinstance(self.max_depth, bool) or not isinstance(self.max_depth, int):
                raise ValueError("max_depth must be an integer or None")
            if self.max_depth <= 0:
                raise ValueError("max_depth must be > 0 or None")
        if not isinstance(self.collect_metrics, bool):
            raise ValueError("collect_metrics must be a boolean")


@dataclass
class RenderConfig:
    """Configuration for indented text rendering."""

    indent_width: int = 2
    sort_children: bool = True

    def __post_init__(self) -> None:
        """Validate render configuration."""
        if isinstance(self.indent_width, bool) or not isinstance(self.indent_width, int):
            raise ValueError("indent_width must be an integer")
        if self.indent_width < 0:
            raise ValueError("indent_width must be >= 0")
        if not isinstance(self.sort_children, bool):
            raise ValueError("sort_children must be a boolean")


class ConfigError(Exception):
    """Base exception for configuration errors."""


class ConfigValidationError(ConfigError):
    """Exception raised when configuration validation fails."""

    def __init__(self, message: str, field_name: Optional[str] = None,
                 suggestions: Optional[List[str]] = None):
        super().__init__(message)
        self.field_name = field_name
        self.suggestions = suggestions or []


_COMPONENTS = ("source", "builder", "render")


@dataclass(frozen=True)
class ShapeConfig:
    """Complete configuration for a shape extraction run.

    Frozen so a single instance can be shared between the API, the CLI and
    tests; use :meth:`override` to derive variants.
    """

    source: EventSourceConfig = field(default_factory=EventSourceConfig)
    builder: BuilderConfig = field(default_factory=BuilderConfig)
    render: RenderConfig = field(default_factory=RenderConfig)
    correlation_id: Optional[str] = None

    def __post_init__(self) -> None:
        """Validate every component configuration."""
        try:
            self.source.__post_init__()
            self.builder.__post_init__()
            self.render.__post_init__()
        except (TypeError, ValueError) as e:
            raise ConfigValidationError(str(e)) from e

    def override(self, **kwargs: Any) -> "ShapeConfig":
        """Create a new configuration with specific overrides.

        Example:
            >>> config = ShapeConfig().override(
            ...     render__indent_width=4,
            ...     builder__underflow_policy=UnderflowPolicy.WARN,
            ... )
        """
        nested_overrides: Dict[str, Dict[str, Any]] = {}
        top_level: Dict[str, Any] = {}
        for key, value in kwargs.items():
            if "__" in key:
                component, field_name = key.split("__", 1)
                if component not in _COMPONENTS:
                    raise ConfigValidationError(
                        f"Unknown configuration component: {component}",
                        field_name=key,
                        suggestions=[f"Use one of {list(_COMPONENTS)}"],
                    )
                nested_overrides.setdefault(component, {})[field_name] = value
            else:
                top_level[key] = value

        new_fields: Dict[str, Any] = {}
        try:
            for component in _COMPONENTS:
                current = getattr(self, component)
                if component in nested_overrides:
                    new_fields[component] = replace(current, **nested_overrides[component])
                else:
                    new_fields[component] = current
            new_fields.update(top_level)
            return replace(self, **new_fields)
        except (TypeError, ValueError) as e:
            raise ConfigValidationError(str(e)) from e

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to a JSON-compatible dictionary."""
        def _dataclass_to_dict(obj: Any) -> Any:
            if hasattr(obj, "__dataclass_fields__"):
                return {
                    name: _dataclass_to_dict(getattr(obj, name))
                    for name in obj.__dataclass_fields__
                }
            if isinstance(obj, Enum):
                return obj.name
            return obj

        return _dataclass_to_dict(self)

    def to_json(self, indent: int = 2) -> str:
        return json.dumps(self.to_dict(), indent=indent)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ShapeConfig":
        """Create configuration from a dictionary.

        Unknown keys are rejected; enum fields accept member names.
        """
        def _dict_to_dataclass(data_dict: Dict[str, Any], target_class: type) -> Any:
            if not isinstance(data_dict, dict):
                raise ConfigValidationError(
                    f"Expected a mapping for {target_class.__name__}"
                )
            known = target_class.__dataclass_fields__
            unknown = sorted(set(data_dict) - set(known))
            if unknown:
                raise ConfigValidationError(
                    f"Unknown {target_class.__name__} fields: {', '.join(unknown)}",
                    field_name=unknown[0],
                )

            field_values: Dict[str, Any] = {}
            for field_name, field_info in known.items():
                if field_name not in data_dict:
                    continue
                value = data_dict[field_name]
                field_type = field_info.type
                if hasattr(field_type, "__dataclass_fields__"):
                    field_values[field_name] = _dict_to_dataclass(value, field_type)
                elif hasattr(field_type, "__members__") and isinstance(value, str):
                    try:
                        field_values[field_name] = field_type[value.upper()]
                    except KeyError as e:
                        raise ConfigValidationError(
                            f"Invalid value {value!r} for {field_name}",
                            field_name=field_name,
                            suggestions=list(field_type.__members__),
                        ) from e
                else:
                    field_values[field_name] = value

            try:
                return target_class(**field_values)
            except (TypeError, ValueError) as e:
                raise ConfigValidationError(str(e)) from e

        return _dict_to_dataclass(data, cls)

    @classmethod
    def from_json(cls, json_str: str) -> "ShapeConfig":
        try:
            data = json.loads(json_str)
        except json.JSONDecodeError as e:
            raise ConfigError(f"Invalid configuration JSON: {e}") from e
        return cls.from_dict(data)

    @classmethod
    def from_file(cls, config_path: Union[str, Path]) -> "ShapeConfig":
        """Load configuration from a JSON file."""
        path = Path(config_path)
        try:
            content = path.read_text(encoding="utf-8")
        except OSError as e:
            raise ConfigError(f"Could not read config file {path}: {e}") from e
        return cls.from_json(content)

    # Preset factory methods
    @classmethod
    def lenient(cls) -> "ShapeConfig":
        """Default behaviour: stray closes ignored, truncation warned."""
        return cls()

    @classmethod
    def strict(cls) -> "ShapeConfig":
        """Surface every irregularity in the input as a warning diagnostic."""
        return cls(
            builder=BuilderConfig(
                underflow_policy=UnderflowPolicy.WARN,
                truncation_policy=TruncationPolicy.WARN,
            )
        )

    @classmethod
    def quiet(cls) -> "ShapeConfig":
        """Record nothing beyond the adapter's own error log."""
        return cls(
            builder=BuilderConfig(
                underflow_policy=UnderflowPolicy.IGNORE,
                truncation_policy=TruncationPolicy.SILENT,
            )
        )
