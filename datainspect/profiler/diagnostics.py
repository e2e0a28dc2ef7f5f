"""
Diagnostic Engine - Deterministic Data-Quality Rules.

Turns finalized column reports into findings using a fixed rule table. The
engine holds no state besides its thresholds: the same column report always
yields the same findings in the same order.

Rule table (evaluated in this order, every applicable rule fires):

    | Rule             | Condition                                   | Severity                  |
    |------------------|---------------------------------------------|---------------------------|
    | Missing values   | missing / rows                              | critical >=0.5, warning   |
    |                  |                                             | >=0.1, info >0            |
    | Identifier-like  | categorical: >=20 values, distinct >=0.95   | warning                   |
    |                  | numeric: >=20 strictly increasing integers  |                           |
    | Near-constant    | categorical: modal fraction >=0.99          | warning                   |
    |                  | numeric: stddev/|mean| < 1e-6               |                           |
    | Mixed type       | nonconforming > 0                           | warning, critical >=0.2   |
    | Extreme outliers | numeric, robust outliers > 0                | critical                  |

Thresholds come from :class:`~datainspect.core.config.DiagnosticThresholds`.
"""

import logging
from typing import Callable, List, Optional, Sequence

from datainspect.core.config import DiagnosticThresholds
from datainspect.profiler.profile_result import (
    ColumnReport,
    Finding,
    FindingKind,
    FindingSeverity,
)

logger = logging.getLogger(__name__)


class DiagnosticEngine:
    """
    Evaluate the rule table against finalized column reports.

    Example:
        >>> engine = DiagnosticEngine()
        >>> findings = engine.diagnose(column_report)
        >>> [f.kind.value for f in findings]
        ['missing_values', 'extreme_outliers']
    """

    def __init__(self, thresholds: Optional[DiagnosticThresholds] = None):
        self.thresholds = thresholds or DiagnosticThresholds()
        self.rules: Sequence[Callable[[ColumnReport], Optional[Finding]]] = (
            self._check_missing,
            self._check_identifier_like,
            self._check_near_constant,
            self._check_mixed_type,
            self._check_extreme_outliers,
        )

    def diagnose(self, column: ColumnReport) -> List[Finding]:
        """Findings for one column, in rule-table order."""
        findings = []
        for rule in self.rules:
            finding = rule(column)
            if finding is not None:
                findings.append(finding)
        return findings

    def diagnose_all(self, columns: Sequence[ColumnReport]) -> List[Finding]:
        """
        Attach findings to every column (in column order) and return them all.
        """
        all_findings: List[Finding] = []
        for column in columns:
            column.findings = self.diagnose(column)
            all_findings.extend(column.findings)
            logger.debug(f"Diagnosed '{column.name}': {column.status} ({len(column.findings)} finding(s))")
        return all_findings

    @staticmethod
    def _finding(column: ColumnReport, severity: FindingSeverity, kind: FindingKind,
                 message: str, **evidence) -> Finding:
        return Finding(
            column=column.name,
            position=column.position,
            severity=severity,
            kind=kind,
            message=message,
            evidence=evidence
        )

    # =========================================================================
    # RULES
    # =========================================================================

    def _check_missing(self, column: ColumnReport) -> Optional[Finding]:
        if column.row_count == 0 or column.missing_count == 0:
            return None

        fraction = column.missing_fraction
        if fraction >= self.thresholds.missing_critical_fraction:
            severity = FindingSeverity.CRITICAL
        elif fraction >= self.thresholds.missing_warning_fraction:
            severity = FindingSeverity.WARNING
        else:
            severity = FindingSeverity.INFO

        return self._finding(
            column, severity, FindingKind.MISSING_VALUES,
            f"{column.missing_count:,} of {column.row_count:,} values missing ({fraction:.1%})",
            fraction=fraction,
            count=column.missing_count
        )

    def _check_identifier_like(self, column: ColumnReport) -> Optional[Finding]:
        min_count = self.thresholds.identifier_min_count

        if column.categorical is not None:
            stats = column.categorical
            if (stats.non_missing_count >= min_count
                    and stats.distinct_ratio is not None
                    and stats.distinct_ratio >= self.thresholds.identifier_distinct_ratio):
                return self._finding(
                    column, FindingSeverity.WARNING, FindingKind.IDENTIFIER_LIKE,
                    f"{stats.distinct_count:,} distinct values in {stats.non_missing_count:,} rows "
                    f"({stats.distinct_ratio:.1%}); looks like an identifier",
                    distinct_ratio=stats.distinct_ratio,
                    count=stats.distinct_count
                )
            return None

        if column.numeric is not None:
            stats = column.numeric
            if stats.count >= min_count and stats.sequential_identifier:
                return self._finding(
                    column, FindingSeverity.WARNING, FindingKind.IDENTIFIER_LIKE,
                    f"{stats.count:,} unique, strictly increasing integers; looks like a row identifier",
                    distinct_ratio=1.0,
                    count=stats.count
                )
        return None

    def _check_near_constant(self, column: ColumnReport) -> Optional[Finding]:
        if column.categorical is not None:
            stats = column.categorical
            if (stats.non_missing_count > 1
                    and stats.modal_fraction is not None
                    and stats.modal_fraction >= self.thresholds.near_constant_modal_fraction):
                return self._finding(
                    column, FindingSeverity.WARNING, FindingKind.NEAR_CONSTANT,
                    f"'{stats.modal_value}' makes up {stats.modal_fraction:.1%} of values",
                    fraction=stats.modal_fraction,
                    count=stats.modal_frequency
                )
            return None

        if column.numeric is not None:
            stats = column.numeric
            if stats.count <= 1 or stats.std_dev is None:
                return None
            if stats.std_dev == 0:
                cv = 0.0
            elif stats.mean == 0:
                return None
            else:
                cv = stats.std_dev / abs(stats.mean)
            if cv < self.thresholds.near_constant_cv:
                return self._finding(
                    column, FindingSeverity.WARNING, FindingKind.NEAR_CONSTANT,
                    f"Values barely vary (stddev/|mean| = {cv:.2e})",
                    coefficient_of_variation=cv,
                    count=stats.count
                )
        return None

    def _check_mixed_type(self, column: ColumnReport) -> Optional[Finding]:
        if column.nonconforming_count <= 0:
            return None

        non_missing = column.non_missing_count
        fraction = column.nonconforming_count / non_missing if non_missing > 0 else 0.0
        if fraction >= self.thresholds.mixed_type_critical_fraction:
            severity = FindingSeverity.CRITICAL
        else:
            severity = FindingSeverity.WARNING

        return self._finding(
            column, severity, FindingKind.MIXED_TYPE,
            f"{column.nonconforming_count:,} of {non_missing:,} values are not "
            f"{column.majority_type} ({fraction:.1%})",
            fraction=fraction,
            count=column.nonconforming_count
        )

    def _check_extreme_outliers(self, column: ColumnReport) -> Optional[Finding]:
        if column.numeric is None or column.numeric.outlier_count <= 0:
            return None

        stats = column.numeric
        qualifier = "" if stats.outlier_count_exact else "~"
        return self._finding(
            column, FindingSeverity.CRITICAL, FindingKind.EXTREME_OUTLIERS,
            f"{qualifier}{stats.outlier_count:,} extreme outlier(s) at robust z >= "
            f"{self.thresholds.outlier_robust_z:g} (median {stats.median:g}, MAD {stats.mad:g})",
            count=stats.outlier_count,
            exact=stats.outlier_count_exact,
            median=stats.median,
            mad=stats.mad
        )
