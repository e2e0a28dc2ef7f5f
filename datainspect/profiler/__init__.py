"""Field classification, type resolution, accumulators, diagnostics and the engine."""

from datainspect.profiler.engine import EngineState, InspectionEngine, profile_rows, profile_shards
from datainspect.profiler.profile_result import (
    ColumnReport,
    Finding,
    FindingKind,
    FindingSeverity,
    InspectionReport,
)

__all__ = [
    "EngineState",
    "InspectionEngine",
    "profile_rows",
    "profile_shards",
    "ColumnReport",
    "Finding",
    "FindingKind",
    "FindingSeverity",
    "InspectionReport",
]
