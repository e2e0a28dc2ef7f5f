"""
Console rendering of inspection reports.

Three sections can be shown independently: a per-column summary of the
statistics, the type resolution table, and the diagnosis (findings grouped by
column, worst first within the run totals).
"""

from typing import Optional

from colorama import Fore

from datainspect.core.pretty_output import PrettyOutput as po
from datainspect.profiler.profile_result import (
    ColumnReport,
    FindingSeverity,
    InspectionReport,
)


def _fmt(value: Optional[float]) -> str:
    if value is None:
        return "-"
    if float(value).is_integer() and abs(value) < 1e15:
        return f"{int(value):,}"
    return f"{value:,.4g}" if abs(value) >= 1e6 else f"{value:.4f}".rstrip("0").rstrip(".")


class ConsoleReporter:
    """Print an InspectionReport to the terminal with PrettyOutput."""

    STATUS_COLORS = {
        "ok": Fore.GREEN,
        "info": Fore.BLUE,
        "warning": Fore.YELLOW,
        "critical": Fore.RED,
    }

    def render(self, report: InspectionReport, summary: bool = True,
               types: bool = False, diagnose: bool = True) -> None:
        po.header("DATA INSPECTION")
        po.key_value("Source", report.source, indent=2)
        po.key_value("Rows", f"{report.row_count:,}", indent=2)
        po.key_value("Columns", f"{len(report.columns):,}", indent=2)
        if report.malformed_row_count:
            po.key_value("Malformed rows", f"{report.malformed_row_count:,} (skipped)",
                         indent=2, value_color=Fore.YELLOW)

        if summary:
            self.render_summary(report)
        if types:
            self.render_types(report)
        if diagnose:
            self.render_diagnosis(report)

    def render_summary(self, report: InspectionReport) -> None:
        po.section("COLUMN SUMMARY")
        for column in report.columns:
            color = self.STATUS_COLORS.get(column.status)
            po.subsection(f"{column.name} ({column.inferred_type})")
            po.key_value("Missing", f"{column.missing_count:,} ({column.missing_fraction:.1%})", indent=4)
            self._render_column_stats(column)
            po.key_value("Status", column.status.upper(), indent=4, value_color=color)

    def _render_column_stats(self, column: ColumnReport) -> None:
        if column.numeric is not None:
            stats = column.numeric
            po.key_value("Range", f"{_fmt(stats.min_value)} to {_fmt(stats.max_value)}", indent=4)
            po.key_value("Mean / Std dev", f"{_fmt(stats.mean)} / {_fmt(stats.std_dev)}", indent=4)
            po.key_value("Median / MAD", f"{_fmt(stats.median)} / {_fmt(stats.mad)}", indent=4)
            if stats.outlier_count:
                approx = "" if stats.outlier_count_exact else "~"
                po.key_value("Extreme outliers", f"{approx}{stats.outlier_count:,}", indent=4,
                             value_color=Fore.RED)
        elif column.categorical is not None:
            stats = column.categorical
            ratio = f" ({stats.distinct_ratio:.1%})" if stats.distinct_ratio is not None else ""
            po.key_value("Distinct", f"{stats.distinct_count:,}{ratio}", indent=4)
            if stats.modal_value is not None:
                po.key_value("Most common", f"'{stats.modal_value}' x {stats.modal_frequency:,}", indent=4)

    def render_types(self, report: InspectionReport) -> None:
        po.section("TYPE RESOLUTION")
        rows = [
            (
                column.name,
                column.inferred_type,
                column.majority_type,
                column.effective_type,
                f"{column.nonconforming_count:,}",
            )
            for column in report.columns
        ]
        po.compact_table(["Column", "Reported", "Majority", "Statistics", "Nonconforming"], rows)

    def render_diagnosis(self, report: InspectionReport) -> None:
        po.section("DIAGNOSIS")

        flagged = [column for column in report.columns if column.findings]
        if not flagged:
            po.success("No data-quality findings")
        for column in flagged:
            po.subsection(column.name)
            for finding in column.findings:
                po.finding(finding.message, severity=finding.severity.value)

        critical = len(report.findings_by_severity(FindingSeverity.CRITICAL))
        warnings = len(report.findings_by_severity(FindingSeverity.WARNING))
        info = len(report.findings_by_severity(FindingSeverity.INFO))
        ok_columns = sum(1 for column in report.columns if column.status == "ok")

        po.blank_line()
        po.divider()
        po.key_value("Critical", critical, indent=2, value_color=Fore.RED if critical else None)
        po.key_value("Warnings", warnings, indent=2, value_color=Fore.YELLOW if warnings else None)
        po.key_value("Info", info, indent=2)
        po.key_value("OK columns", f"{ok_columns}/{len(report.columns)}", indent=2)
        po.blank_line()
        if critical:
            print(f"  {po.status_badge('CRITICAL ISSUES FOUND', passed=False)}")
        elif warnings:
            po.warning("Inspection completed with warnings", indent=2)
        else:
            print(f"  {po.status_badge('CLEAN', passed=True)}")
