"""Configuration parsing and validation."""

import os
from dataclasses import dataclass, field, fields, asdict
from pathlib import Path
from typing import Dict, Any, List, Optional

import yaml

from datainspect.core import constants
from datainspect.core.exceptions import (
    ConfigError,
    YAMLSizeError,
    ConfigValidationError
)


@dataclass(frozen=True)
class DiagnosticThresholds:
    """
    Policy thresholds used by the diagnostic rule table.

    Defaults come from :mod:`datainspect.core.constants`; see that module for
    what each value means.
    """
    missing_critical_fraction: float = constants.MISSING_CRITICAL_FRACTION
    missing_warning_fraction: float = constants.MISSING_WARNING_FRACTION
    identifier_min_count: int = constants.IDENTIFIER_MIN_COUNT
    identifier_distinct_ratio: float = constants.IDENTIFIER_DISTINCT_RATIO
    near_constant_modal_fraction: float = constants.NEAR_CONSTANT_MODAL_FRACTION
    near_constant_cv: float = constants.NEAR_CONSTANT_CV
    mixed_type_critical_fraction: float = constants.MIXED_TYPE_CRITICAL_FRACTION
    outlier_robust_z: float = constants.OUTLIER_ROBUST_Z

    def validate(self) -> None:
        """Raise ConfigValidationError for out-of-range values."""
        fractions = (
            "missing_critical_fraction",
            "missing_warning_fraction",
            "identifier_distinct_ratio",
            "near_constant_modal_fraction",
            "mixed_type_critical_fraction",
        )
        for name in fractions:
            value = getattr(self, name)
            if not 0.0 < value <= 1.0:
                raise ConfigValidationError(
                    f"Threshold '{name}' must be in (0, 1]",
                    field=f"thresholds.{name}",
                    expected="0 < value <= 1",
                    actual=str(value)
                )

        if self.missing_warning_fraction > self.missing_critical_fraction:
            raise ConfigValidationError(
                "missing_warning_fraction must not exceed missing_critical_fraction",
                field="thresholds.missing_warning_fraction",
                expected=f"<= {self.missing_critical_fraction}",
                actual=str(self.missing_warning_fraction)
            )

        if self.identifier_min_count < 1:
            raise ConfigValidationError(
                "identifier_min_count must be at least 1",
                field="thresholds.identifier_min_count",
                expected=">= 1",
                actual=str(self.identifier_min_count)
            )

        for name in ("near_constant_cv", "outlier_robust_z"):
            value = getattr(self, name)
            if value <= 0:
                raise ConfigValidationError(
                    f"Threshold '{name}' must be positive",
                    field=f"thresholds.{name}",
                    expected="> 0",
                    actual=str(value)
                )


@dataclass(frozen=True)
class InspectionConfig:
    """
    Configuration for one inspection run.

    Attributes:
        reservoir_size: Numeric values retained per column for median/MAD
        random_seed: Seed for reservoir sampling
        missing_tokens: Lowercase tokens classified as missing
        true_tokens: Lowercase tokens classified as boolean True
        false_tokens: Lowercase tokens classified as boolean False
        thresholds: Diagnostic rule thresholds
    """
    reservoir_size: int = constants.DEFAULT_RESERVOIR_SIZE
    random_seed: int = constants.DEFAULT_RANDOM_SEED
    missing_tokens: frozenset = constants.MISSING_TOKENS
    true_tokens: frozenset = constants.TRUE_TOKENS
    false_tokens: frozenset = constants.FALSE_TOKENS
    thresholds: DiagnosticThresholds = field(default_factory=DiagnosticThresholds)

    # Security limits for YAML files
    MAX_YAML_FILE_SIZE = constants.MAX_YAML_FILE_SIZE
    MAX_YAML_NESTING_DEPTH = constants.MAX_YAML_NESTING_DEPTH
    MAX_YAML_KEYS = constants.MAX_YAML_KEY_COUNT

    def __post_init__(self):
        if not isinstance(self.reservoir_size, int) or self.reservoir_size < 1:
            raise ConfigValidationError(
                "reservoir_size must be a positive integer",
                field="inspection.reservoir_size",
                expected="integer >= 1",
                actual=str(self.reservoir_size)
            )
        overlap = set(self.true_tokens) & set(self.false_tokens)
        if overlap:
            raise ConfigValidationError(
                f"Tokens cannot be both true and false: {sorted(overlap)}",
                field="inspection.true_tokens"
            )
        self.thresholds.validate()

    @classmethod
    def from_dict(cls, config_dict: Optional[Dict[str, Any]]) -> "InspectionConfig":
        """
        Build a config from a parsed dictionary.

        Expected layout (every key optional)::

            inspection:
              reservoir_size: 100000
              random_seed: 42
              missing_tokens: ["", "na", "null"]
              true_tokens: ["true", "yes"]
              false_tokens: ["false", "no"]
            thresholds:
              outlier_robust_z: 5.0
              ...

        Raises:
            ConfigValidationError: On unknown keys or wrongly typed values
        """
        if config_dict is None:
            return cls()
        if not isinstance(config_dict, dict):
            raise ConfigValidationError(
                "Configuration root must be a mapping",
                expected="mapping",
                actual=type(config_dict).__name__
            )

        unknown = set(config_dict) - {"inspection", "thresholds"}
        if unknown:
            raise ConfigValidationError(
                f"Unknown configuration section(s): {', '.join(sorted(unknown))}",
                field=sorted(unknown)[0],
                expected="inspection, thresholds"
            )

        inspection = config_dict.get("inspection") or {}
        threshold_values = config_dict.get("thresholds") or {}
        for section_name, section in (("inspection", inspection), ("thresholds", threshold_values)):
            if not isinstance(section, dict):
                raise ConfigValidationError(
                    f"Section '{section_name}' must be a mapping",
                    field=section_name,
                    expected="mapping",
                    actual=type(section).__name__
                )

        kwargs: Dict[str, Any] = {}
        for key, value in inspection.items():
            if key in ("reservoir_size", "random_seed"):
                if isinstance(value, bool) or not isinstance(value, int):
                    raise ConfigValidationError(
                        f"'{key}' must be an integer",
                        field=f"inspection.{key}",
                        expected="integer",
                        actual=repr(value)
                    )
                kwargs[key] = value
            elif key in ("missing_tokens", "true_tokens", "false_tokens"):
                kwargs[key] = cls._parse_tokens(key, value)
            else:
                raise ConfigValidationError(
                    f"Unknown inspection option: '{key}'",
                    field=f"inspection.{key}"
                )

        known_thresholds = {f.name: f.type for f in fields(DiagnosticThresholds)}
        threshold_kwargs: Dict[str, Any] = {}
        for key, value in threshold_values.items():
            if key not in known_thresholds:
                raise ConfigValidationError(
                    f"Unknown threshold: '{key}'",
                    field=f"thresholds.{key}",
                    expected=", ".join(sorted(known_thresholds))
                )
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                raise ConfigValidationError(
                    f"Threshold '{key}' must be a number",
                    field=f"thresholds.{key}",
                    expected="number",
                    actual=repr(value)
                )
            threshold_kwargs[key] = int(value) if key == "identifier_min_count" else float(value)

        return cls(thresholds=DiagnosticThresholds(**threshold_kwargs), **kwargs)

    @staticmethod
    def _parse_tokens(key: str, value: Any) -> frozenset:
        if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
            raise ConfigValidationError(
                f"'{key}' must be a list of strings",
                field=f"inspection.{key}",
                expected="list of strings",
                actual=repr(value)
            )
        return frozenset(v.strip().lower() for v in value)

    @classmethod
    def from_yaml(cls, config_path: str) -> "InspectionConfig":
        """
        Load configuration from a YAML file.

        Protections:
        - File size limit
        - Nesting depth limit
        - Total keys limit

        Raises:
            ConfigError: If file not found or invalid
            YAMLSizeError: If file exceeds size limit
            ConfigValidationError: If structure or values are invalid
        """
        config_file = Path(config_path)
        if not config_file.exists():
            raise ConfigError(f"Configuration file not found: {config_path}")

        file_size = os.path.getsize(config_file)
        if file_size > cls.MAX_YAML_FILE_SIZE:
            raise YAMLSizeError(
                f"Configuration file too large: {file_size:,} bytes. "
                f"Maximum allowed: {cls.MAX_YAML_FILE_SIZE:,} bytes",
                file_size=file_size,
                max_size=cls.MAX_YAML_FILE_SIZE
            )

        try:
            with open(config_file, "r", encoding="utf-8") as f:
                config_dict = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigError(f"Failed to parse YAML file: {str(e)}")
        except UnicodeDecodeError as e:
            raise ConfigError(f"Invalid file encoding (expected UTF-8): {str(e)}")

        if config_dict is not None:
            cls._validate_yaml_structure(config_dict)

        return cls.from_dict(config_dict)

    @classmethod
    def _validate_yaml_structure(cls, obj: Any, current_depth: int = 0, total_keys: List[int] = None) -> None:
        """
        Reject documents that are too deep or have too many keys.

        Args:
            obj: Object to validate (dict, list, or primitive)
            current_depth: Current nesting depth
            total_keys: Mutable list with single element tracking total key count
        """
        if total_keys is None:
            total_keys = [0]

        if current_depth > cls.MAX_YAML_NESTING_DEPTH:
            raise ConfigValidationError(
                f"YAML nesting depth exceeds maximum of {cls.MAX_YAML_NESTING_DEPTH} levels"
            )

        if isinstance(obj, dict):
            total_keys[0] += len(obj)
            if total_keys[0] > cls.MAX_YAML_KEYS:
                raise ConfigValidationError(
                    f"YAML structure contains more than {cls.MAX_YAML_KEYS:,} keys/items"
                )
            for value in obj.values():
                cls._validate_yaml_structure(value, current_depth + 1, total_keys)
        elif isinstance(obj, list):
            total_keys[0] += len(obj)
            if total_keys[0] > cls.MAX_YAML_KEYS:
                raise ConfigValidationError(
                    f"YAML structure contains more than {cls.MAX_YAML_KEYS:,} keys/items"
                )
            for item in obj:
                cls._validate_yaml_structure(item, current_depth + 1, total_keys)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the same layout :meth:`from_dict` accepts."""
        return {
            "inspection": {
                "reservoir_size": self.reservoir_size,
                "random_seed": self.random_seed,
                "missing_tokens": sorted(self.missing_tokens),
                "true_tokens": sorted(self.true_tokens),
                "false_tokens": sorted(self.false_tokens),
            },
            "thresholds": asdict(self.thresholds),
        }


def sample_config_yaml() -> str:
    """Return a commented sample configuration written by ``init-config``."""
    body = yaml.safe_dump(InspectionConfig().to_dict(), sort_keys=False, default_flow_style=False)
    header = (
        "# datainspect configuration\n"
        "#\n"
        "# inspection.reservoir_size: numeric values kept per column for median/MAD.\n"
        "#   Set it >= the row count of your files for exact outlier counts.\n"
        "# thresholds: diagnostic policy values (fractions are 0-1).\n"
        "\n"
    )
    return header + body
