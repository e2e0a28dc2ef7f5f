"""
Data structures for storing inspection results.

Contains the per-column report records, the findings produced by the
diagnostic rules, and the overall report handed to renderers.
"""

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Any, Optional


class FindingSeverity(Enum):
    """Severity of a data-quality finding."""
    INFO = "info"
    WARNING = "warning"
    CRITICAL = "critical"

    @property
    def rank(self) -> int:
        return {"info": 0, "warning": 1, "critical": 2}[self.value]


class FindingKind(Enum):
    """Diagnostic rule that produced a finding, in rule-table order."""
    MISSING_VALUES = "missing_values"
    IDENTIFIER_LIKE = "identifier_like"
    NEAR_CONSTANT = "near_constant"
    MIXED_TYPE = "mixed_type"
    EXTREME_OUTLIERS = "extreme_outliers"


def _clean_float(value: Optional[float], digits: int = 6) -> Optional[float]:
    """Round for output; NaN/inf become None."""
    if value is None:
        return None
    value = float(value)
    if math.isnan(value) or math.isinf(value):
        return None
    return round(value, digits)


def format_value(value: Any) -> Optional[str]:
    """Render a categorical value the way it would appear in a file."""
    if value is None:
        return None
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


@dataclass(frozen=True)
class Finding:
    """
    One data-quality finding for one column.

    Attributes:
        column: Column name
        position: 0-based column position
        severity: info, warning or critical
        kind: Rule that fired
        message: Human-readable description
        evidence: Numbers backing the finding (fraction, count, ...)
    """
    column: str
    position: int
    severity: FindingSeverity
    kind: FindingKind
    message: str
    evidence: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "column": self.column,
            "position": self.position,
            "severity": self.severity.value,
            "kind": self.kind.value,
            "message": self.message,
            "evidence": {
                key: _clean_float(value) if isinstance(value, float) else value
                for key, value in self.evidence.items()
            },
        }


@dataclass
class NumericSummary:
    """
    Statistics reported for a numeric column.

    Attributes:
        count: Numeric values folded in
        min_value / max_value: Extremes (None when count == 0)
        mean: Welford mean (None when count == 0)
        std_dev: Sample standard deviation (None when count < 2)
        median / mad / scaled_mad: Robust center and scale from the reservoir
        outlier_count: Values with robust z >= threshold
        outlier_count_exact: False when estimated from a sample
        sequential_identifier: Integral and strictly increasing values
    """
    count: int = 0
    min_value: Optional[float] = None
    max_value: Optional[float] = None
    mean: Optional[float] = None
    std_dev: Optional[float] = None
    median: Optional[float] = None
    mad: Optional[float] = None
    scaled_mad: Optional[float] = None
    outlier_count: int = 0
    outlier_count_exact: bool = True
    sequential_identifier: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "count": self.count,
            "min": _clean_float(self.min_value),
            "max": _clean_float(self.max_value),
            "mean": _clean_float(self.mean),
            "stddev": _clean_float(self.std_dev),
            "median": _clean_float(self.median),
            "mad": _clean_float(self.mad),
            "outlier_count": self.outlier_count,
            "outlier_count_exact": self.outlier_count_exact,
        }


@dataclass
class CategoricalSummary:
    """
    Statistics reported for a categorical (or boolean) column.

    Attributes:
        non_missing_count: Text/boolean values folded in
        distinct_count: Exact number of distinct values
        distinct_ratio: distinct_count / non_missing_count
        modal_value: Most frequent value (first seen wins ties)
        modal_frequency: Its frequency
        modal_fraction: modal_frequency / non_missing_count
    """
    non_missing_count: int = 0
    distinct_count: int = 0
    distinct_ratio: Optional[float] = None
    modal_value: Optional[str] = None
    modal_frequency: int = 0
    modal_fraction: Optional[float] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "non_missing_count": self.non_missing_count,
            "distinct_count": self.distinct_count,
            "distinct_ratio": _clean_float(self.distinct_ratio),
            "modal_value": self.modal_value,
            "modal_frequency": self.modal_frequency,
        }


@dataclass
class ColumnReport:
    """
    Finalized report for one column.

    Exactly one of ``numeric`` / ``categorical`` is set, chosen by the
    effective type.
    """
    name: str
    position: int
    inferred_type: str
    majority_type: str
    effective_type: str
    row_count: int
    missing_count: int
    nonconforming_count: int
    numeric: Optional[NumericSummary] = None
    categorical: Optional[CategoricalSummary] = None
    findings: List[Finding] = field(default_factory=list)

    @property
    def non_missing_count(self) -> int:
        return self.row_count - self.missing_count

    @property
    def missing_fraction(self) -> float:
        return self.missing_count / self.row_count if self.row_count > 0 else 0.0

    @property
    def status(self) -> str:
        """'ok' without findings, otherwise the highest finding severity."""
        if not self.findings:
            return "ok"
        return max(self.findings, key=lambda f: f.severity.rank).severity.value

    def to_dict(self) -> Dict[str, Any]:
        result = {
            "name": self.name,
            "position": self.position,
            "inferred_type": self.inferred_type,
            "majority_type": self.majority_type,
            "effective_type": self.effective_type,
            "row_count": self.row_count,
            "missing_count": self.missing_count,
            "nonconforming_count": self.nonconforming_count,
            "status": self.status,
        }
        if self.numeric is not None:
            result["numeric"] = self.numeric.to_dict()
        if self.categorical is not None:
            result["categorical"] = self.categorical.to_dict()
        result["findings"] = [f.to_dict() for f in self.findings]
        return result


@dataclass
class InspectionReport:
    """
    Complete result of one inspection pass.

    Attributes:
        source: Name of the inspected file or stream
        row_count: Data rows accepted (malformed rows excluded)
        malformed_row_count: Rows skipped for a wrong field count
        columns: Column reports in header order
        findings: All findings, column order then rule order
    """
    source: str
    row_count: int
    malformed_row_count: int
    columns: List[ColumnReport] = field(default_factory=list)

    @property
    def findings(self) -> List[Finding]:
        return [finding for column in self.columns for finding in column.findings]

    def findings_by_severity(self, severity: FindingSeverity) -> List[Finding]:
        return [f for f in self.findings if f.severity is severity]

    def has_critical(self) -> bool:
        return bool(self.findings_by_severity(FindingSeverity.CRITICAL))

    def has_warnings(self) -> bool:
        return bool(self.findings_by_severity(FindingSeverity.WARNING))

    def get_column(self, name: str) -> ColumnReport:
        for column in self.columns:
            if column.name == name:
                return column
        raise KeyError(name)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "source": self.source,
            "row_count": self.row_count,
            "malformed_row_count": self.malformed_row_count,
            "column_count": len(self.columns),
            "columns": [c.to_dict() for c in self.columns],
            "findings": [f.to_dict() for f in self.findings],
            "summary": {
                "critical": len(self.findings_by_severity(FindingSeverity.CRITICAL)),
                "warning": len(self.findings_by_severity(FindingSeverity.WARNING)),
                "info": len(self.findings_by_severity(FindingSeverity.INFO)),
                "ok_columns": sum(1 for c in self.columns if c.status == "ok"),
            },
        }
