"""
Unit tests for configuration parsing.

Tests InspectionConfig defaults, dictionary/YAML loading, validation of keys
and values, and the YAML security limits.
"""

import dataclasses

import pytest
import yaml

from datainspect.core.config import DiagnosticThresholds, InspectionConfig, sample_config_yaml
from datainspect.core.exceptions import ConfigError, ConfigValidationError, YAMLSizeError


class TestDefaults:
    """Test default configuration."""

    def test_default_config(self):
        """Test defaults match the documented policy."""
        config = InspectionConfig()

        assert config.reservoir_size == 100_000
        assert config.random_seed == 42
        assert "n/a" in config.missing_tokens
        assert config.thresholds.outlier_robust_z == 5.0

    def test_config_is_frozen(self):
        """Test that a config cannot be mutated."""
        config = InspectionConfig()
        with pytest.raises(dataclasses.FrozenInstanceError):
            config.reservoir_size = 10

    def test_replace_revalidates(self):
        """Test dataclasses.replace runs validation."""
        with pytest.raises(ConfigValidationError):
            dataclasses.replace(InspectionConfig(), reservoir_size=0)


class TestFromDict:
    """Test InspectionConfig.from_dict()."""

    def test_none_gives_defaults(self):
        assert InspectionConfig.from_dict(None) == InspectionConfig()

    def test_full_dict(self):
        """Test every section is applied."""
        config = InspectionConfig.from_dict({
            "inspection": {
                "reservoir_size": 500,
                "random_seed": 7,
                "missing_tokens": ["", " NA ", "-"],
                "true_tokens": ["Y"],
                "false_tokens": ["N"],
            },
            "thresholds": {
                "outlier_robust_z": 3.5,
                "identifier_min_count": 50.0,
            },
        })

        assert config.reservoir_size == 500
        assert config.random_seed == 7
        assert config.missing_tokens == frozenset({"", "na", "-"})
        assert config.true_tokens == frozenset({"y"})
        assert config.thresholds.outlier_robust_z == 3.5
        assert config.thresholds.identifier_min_count == 50
        assert isinstance(config.thresholds.identifier_min_count, int)

    def test_unknown_section_rejected(self):
        with pytest.raises(ConfigValidationError) as exc_info:
            InspectionConfig.from_dict({"validation_job": {}})
        assert "validation_job" in str(exc_info.value)

    def test_unknown_inspection_key_rejected(self):
        with pytest.raises(ConfigValidationError) as exc_info:
            InspectionConfig.from_dict({"inspection": {"chunk_size": 10}})
        assert exc_info.value.field == "inspection.chunk_size"

    def test_unknown_threshold_rejected(self):
        with pytest.raises(ConfigValidationError):
            InspectionConfig.from_dict({"thresholds": {"iqr_multiplier": 1.5}})

    def test_non_numeric_threshold_rejected(self):
        with pytest.raises(ConfigValidationError):
            InspectionConfig.from_dict({"thresholds": {"outlier_robust_z": "high"}})

    def test_boolean_reservoir_size_rejected(self):
        with pytest.raises(ConfigValidationError):
            InspectionConfig.from_dict({"inspection": {"reservoir_size": True}})

    def test_tokens_must_be_strings(self):
        with pytest.raises(ConfigValidationError):
            InspectionConfig.from_dict({"inspection": {"missing_tokens": "na"}})

    def test_overlapping_boolean_tokens_rejected(self):
        with pytest.raises(ConfigValidationError):
            InspectionConfig.from_dict({"inspection": {"true_tokens": ["y"], "false_tokens": ["Y"]}})


class TestThresholdValidation:
    """Test DiagnosticThresholds.validate()."""

    @pytest.mark.parametrize("overrides", [
        {"missing_critical_fraction": 1.5},
        {"missing_warning_fraction": 0.0},
        {"missing_warning_fraction": 0.6, "missing_critical_fraction": 0.5},
        {"identifier_min_count": 0},
        {"near_constant_cv": 0.0},
        {"outlier_robust_z": -1.0},
    ])
    def test_invalid_thresholds(self, overrides):
        with pytest.raises(ConfigValidationError):
            InspectionConfig(thresholds=DiagnosticThresholds(**overrides))

    def test_valid_custom_thresholds(self):
        thresholds = DiagnosticThresholds(missing_warning_fraction=0.05, outlier_robust_z=3.0)
        thresholds.validate()


class TestFromYaml:
    """Test YAML loading and limits."""

    def test_load_yaml(self, tmp_path):
        path = tmp_path / "inspect.yaml"
        path.write_text("inspection:\n  reservoir_size: 1000\nthresholds:\n  outlier_robust_z: 4\n")

        config = InspectionConfig.from_yaml(str(path))

        assert config.reservoir_size == 1000
        assert config.thresholds.outlier_robust_z == 4.0

    def test_empty_yaml_gives_defaults(self, tmp_path):
        path = tmp_path / "empty.yaml"
        path.write_text("")

        assert InspectionConfig.from_yaml(str(path)) == InspectionConfig()

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigError):
            InspectionConfig.from_yaml(str(tmp_path / "nope.yaml"))

    def test_invalid_yaml(self, tmp_path):
        path = tmp_path / "bad.yaml"
        path.write_text("inspection: [unclosed\n")

        with pytest.raises(ConfigError):
            InspectionConfig.from_yaml(str(path))

    def test_file_too_large(self, tmp_path):
        path = tmp_path / "huge.yaml"
        path.write_text("# " + "x" * (InspectionConfig.MAX_YAML_FILE_SIZE + 10))

        with pytest.raises(YAMLSizeError):
            InspectionConfig.from_yaml(str(path))

    def test_nesting_too_deep(self, tmp_path):
        nested = "leaf"
        for _ in range(InspectionConfig.MAX_YAML_NESTING_DEPTH + 2):
            nested = {"level": nested}
        path = tmp_path / "deep.yaml"
        path.write_text(yaml.safe_dump({"inspection": nested}))

        with pytest.raises(ConfigValidationError):
            InspectionConfig.from_yaml(str(path))

    def test_sample_config_round_trips(self, tmp_path):
        """Test the init-config template loads back to the defaults."""
        path = tmp_path / "sample.yaml"
        path.write_text(sample_config_yaml())

        assert InspectionConfig.from_yaml(str(path)) == InspectionConfig()
