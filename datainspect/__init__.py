"""
datainspect - single-pass data-quality inspection for tabular files.

Streams a CSV or JSON file once, infers a type per column, accumulates
numeric and categorical statistics in bounded memory and reports
data-quality findings (missing values, identifier-like and near-constant
columns, mixed types, extreme outliers).
"""

__version__ = "0.1.0"

from datainspect.core.config import DiagnosticThresholds, InspectionConfig
from datainspect.profiler.engine import InspectionEngine, profile_rows, profile_shards
from datainspect.profiler.profile_result import InspectionReport

__all__ = [
    "__version__",
    "DiagnosticThresholds",
    "InspectionConfig",
    "InspectionEngine",
    "InspectionReport",
    "profile_rows",
    "profile_shards",
]
