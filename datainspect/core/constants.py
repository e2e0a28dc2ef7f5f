"""
datainspect Constants.

This module defines the policy values, configuration defaults and limits
used throughout datainspect. Every diagnostic threshold lives here so that
it can be documented in one place and overridden from a YAML config rather
than silently changed in code.
"""

# ============================================================================
# Field Classification
# ============================================================================

# Tokens treated as a missing value (compared after strip + lowercase).
# The empty string is always missing regardless of this set.
MISSING_TOKENS: frozenset = frozenset({"", "na", "n/a", "null", "none", "nan"})

# Boolean tokens (compared after strip + lowercase)
TRUE_TOKENS: frozenset = frozenset({"true", "yes"})
FALSE_TOKENS: frozenset = frozenset({"false", "no"})

# Signed 64-bit integer range; integers outside it are classified as floats
INT64_MIN: int = -(2 ** 63)
INT64_MAX: int = 2 ** 63 - 1


# ============================================================================
# Robust Statistics
# ============================================================================

# Maximum number of numeric values retained per column for median/MAD.
# Columns with more values are reservoir-sampled down to this size.
# Set it >= the expected row count for exact robust statistics.
DEFAULT_RESERVOIR_SIZE: int = 100_000

# Seed for reservoir sampling; each column derives its own stream from it
DEFAULT_RANDOM_SEED: int = 42

# Scale factor making the MAD a consistent estimator of the standard
# deviation under a normal distribution (1 / Phi^-1(3/4))
MAD_NORMAL_CONSISTENCY: float = 1.4826


# ============================================================================
# Diagnostic Thresholds
# ============================================================================

# Missing fraction at or above which the finding is critical
MISSING_CRITICAL_FRACTION: float = 0.5

# Missing fraction at or above which the finding is a warning
# (any non-zero fraction below this is reported as info)
MISSING_WARNING_FRACTION: float = 0.1

# Minimum non-missing values before a column can be called identifier-like
IDENTIFIER_MIN_COUNT: int = 20

# Distinct ratio at or above which a categorical column looks like an ID
IDENTIFIER_DISTINCT_RATIO: float = 0.95

# Modal fraction at or above which a categorical column is near-constant
NEAR_CONSTANT_MODAL_FRACTION: float = 0.99

# Coefficient of variation below which a numeric column is near-constant
NEAR_CONSTANT_CV: float = 1e-6

# Nonconforming fraction at or above which a mixed-type finding is critical
MIXED_TYPE_CRITICAL_FRACTION: float = 0.2

# Robust z-score (|x - median| / scaled MAD) at which a value is an outlier
OUTLIER_ROBUST_Z: float = 5.0


# ============================================================================
# Input Processing
# ============================================================================

# Delimiters considered when sniffing a delimited file
CANDIDATE_DELIMITERS: str = ",\t|;:"

# Bytes read from the head of a file for delimiter/encoding detection
SNIFF_SAMPLE_BYTES: int = 8192

# Encodings tried, in order, when none is given
CANDIDATE_ENCODINGS: list = ["utf-8", "utf-8-sig", "cp1252", "latin-1"]

# Supported input formats and their file extensions
SUPPORTED_FILE_FORMATS: list = ["csv", "json"]
FILE_EXTENSION_MAP: dict = {
    ".csv": "csv",
    ".tsv": "csv",
    ".txt": "csv",
    ".json": "json",
}

# Malformed rows logged individually before switching to a summary
MAX_MALFORMED_ROWS_LOGGED: int = 10


# ============================================================================
# Configuration Security Limits
# ============================================================================

# Maximum YAML configuration file size (1MB); a config is a handful of keys
MAX_YAML_FILE_SIZE: int = 1 * 1024 * 1024

# Maximum YAML nesting depth
MAX_YAML_NESTING_DEPTH: int = 10

# Maximum number of keys/items in a YAML document
MAX_YAML_KEY_COUNT: int = 1_000


# ============================================================================
# Severity Levels
# ============================================================================

VALID_SEVERITIES: list = ["info", "warning", "critical"]
