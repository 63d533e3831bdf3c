"""Tests for the configuration system."""

import json
from pathlib import Path

import pytest

from xml_tag_shape.shared.config import (
    BuilderConfig,
    ConfigError,
    ConfigValidationError,
    EventSourceConfig,
    RenderConfig,
    ShapeConfig,
    TruncationPolicy,
    UnderflowPolicy,
)


class TestComponentConfigs:
    """Defaults and validation of the individual components."""

    def test_event_source_defaults(self):
        """Test default event source configuration values."""
        config = EventSourceConfig()

        assert config.huge_tree is False
        assert config.no_network is True
        assert config.recover is False
        assert config.release_elements is True

    def test_event_source_rejects_non_booleans(self):
        """Flags must be real booleans."""
        with pytest.raises(ValueError, match="recover must be a boolean"):
            EventSourceConfig(recover="yes")  # type: ignore[arg-type]

    def test_builder_defaults(self):
        """Stray closes are ignored and truncation warned by default."""
        config = BuilderConfig()

        assert config.underflow_policy is UnderflowPolicy.IGNORE
        assert config.truncation_policy is TruncationPolicy.WARN
        assert config.max_depth is None
        assert config.collect_metrics is True

    def test_builder_rejects_wrong_policy_type(self):
        """Policies must be enum members."""
        with pytest.raises(ValueError, match="underflow_policy must be an UnderflowPolicy"):
            BuilderConfig(underflow_policy="IGNORE")  # type: ignore[arg-type]

    def test_render_defaults(self):
        """Two-space indent with sorted siblings."""
        config = RenderConfig()

        assert config.indent_width == 2
        assert config.sort_children is True

    @pytest.mark.parametrize(
        "factory, message",
        [
            (lambda: RenderConfig(indent_width="4"), "indent_width must be an integer"),
            (lambda: RenderConfig(indent_width=True), "indent_width must be an integer"),
            (lambda: RenderConfig(sort_children="false"), "sort_children must be a boolean"),
            (lambda: BuilderConfig(max_depth="5"), "max_depth must be an integer or None"),
            (lambda: BuilderConfig(collect_metrics=1), "collect_metrics must be a boolean"),
        ],
    )
    def test_wrong_types_are_rejected(self, factory, message):
        """Numeric and boolean fields check their types."""
        with pytest.raises(ValueError, match=message):
            factory()


class TestShapeConfig:
    """Aggregate configuration, presets and serialization."""

    def test_presets(self):
        """Presets differ only in builder policies."""
        assert ShapeConfig.lenient() == ShapeConfig()
        strict = ShapeConfig.strict()
        assert strict.builder.underflow_policy is UnderflowPolicy.WARN
        assert strict.builder.truncation_policy is TruncationPolicy.WARN
        quiet = ShapeConfig.quiet()
        assert quiet.builder.underflow_policy is UnderflowPolicy.IGNORE
        assert quiet.builder.truncation_policy is TruncationPolicy.SILENT

    def test_config_is_frozen(self):
        """Attributes cannot be reassigned."""
        config = ShapeConfig()

        with pytest.raises(AttributeError):
            config.correlation_id = "x"  # type: ignore[misc]

    def test_override_nested_fields(self):
        """component__field overrides create a new configuration."""
        config = ShapeConfig()

        new_config = config.override(
            render__indent_width=4,
            builder__underflow_policy=UnderflowPolicy.RAISE,
            correlation_id="abc",
        )

        assert new_config.render.indent_width == 4
        assert new_config.builder.underflow_policy is UnderflowPolicy.RAISE
        assert new_config.correlation_id == "abc"
        assert config.render.indent_width == 2

    def test_override_unknown_component(self):
        """Unknown components are rejected with a suggestion."""
        with pytest.raises(ConfigValidationError) as excinfo:
            ShapeConfig().override(tokenizer__buffer_size=10)

        assert excinfo.value.field_name == "tokenizer__buffer_size"
        assert excinfo.value.suggestions

    def test_override_invalid_value(self):
        """Validation errors surface as ConfigValidationError."""
        with pytest.raises(ConfigValidationError, match="indent_width must be >= 0"):
            ShapeConfig().override(render__indent_width=-2)

    def test_to_dict_uses_enum_names(self):
        """Enums serialize by member name."""
        data = ShapeConfig.strict().to_dict()

        assert data["builder"]["underflow_policy"] == "WARN"
        assert data["render"] == {"indent_width": 2, "sort_children": True}
        assert json.loads(ShapeConfig().to_json()) == ShapeConfig().to_dict()

    def test_round_trip_through_json(self):
        """from_json restores what to_json produced."""
        config = ShapeConfig(
            builder=BuilderConfig(underflow_policy=UnderflowPolicy.WARN, max_depth=64),
            render=RenderConfig(indent_width=3, sort_children=False),
            correlation_id="run-7",
        )

        assert ShapeConfig.from_json(config.to_json()) == config

    def test_from_dict_partial_and_case_insensitive(self):
        """Missing fields keep defaults; enum names ignore case."""
        config = ShapeConfig.from_dict({"builder": {"truncation_policy": "silent"}})

        assert config.builder.truncation_policy is TruncationPolicy.SILENT
        assert config.builder.underflow_policy is UnderflowPolicy.IGNORE
        assert config.render == RenderConfig()

    def test_from_dict_rejects_unknown_fields(self):
        """Typos in configuration files are reported."""
        with pytest.raises(ConfigValidationError, match="Unknown RenderConfig fields: indent"):
            ShapeConfig.from_dict({"render": {"indent": 4}})

    def test_from_dict_rejects_bad_enum_value(self):
        """Invalid enum names list the valid choices."""
        with pytest.raises(ConfigValidationError) as excinfo:
            ShapeConfig.from_dict({"builder": {"underflow_policy": "explode"}})

        assert excinfo.value.suggestions == ["IGNORE", "WARN", "RAISE"]

    def test_from_dict_wraps_validation_errors(self):
        """Out-of-range values raise ConfigValidationError."""
        with pytest.raises(ConfigValidationError, match="max_depth must be > 0 or None"):
            ShapeConfig.from_dict({"builder": {"max_depth": -1}})

    def test_from_json_invalid(self):
        """Malformed JSON raises ConfigError."""
        with pytest.raises(ConfigError, match="Invalid configuration JSON"):
            ShapeConfig.from_json("{not json")

    def test_from_file(self, tmp_path: Path):
        """Configuration files are plain JSON."""
        path = tmp_path / "shape.json"
        path.write_text(json.dumps({"render": {"indent_width": 8}}))

        assert ShapeConfig.from_file(path).render.indent_width == 8

    def test_from_missing_file(self, tmp_path: Path):
        """A missing file raises ConfigError."""
        with pytest.raises(ConfigError, match="Could not read config file"):
            ShapeConfig.from_file(tmp_path / "absent.json")

    @pytest.mark.parametrize(
        "data",
        [
            {"render": {"indent_width": "4"}},
            {"render": {"sort_children": "false"}},
            {"builder": {"max_depth": "5"}},
            {"builder": {"collect_metrics": None}},
        ],
    )
    def test_from_dict_rejects_wrong_types(self, data):
        """Mistyped values raise ConfigValidationError rather than TypeError."""
        with pytest.raises(ConfigValidationError):
            ShapeConfig.from_dict(data)
