"""
Inspection engine: the single-pass orchestrator.

Drives one pass over a header and a sequence of rows: every field is
classified and routed to its column's accumulator, rows with the wrong field
count are counted and skipped, and after the last row every column is
finalized and handed to the diagnostic rules.

State machine::

    EMPTY --first row--> STREAMING --finalize()--> FINALIZED --report()--> REPORTED

Feeding rows after finalize, finalizing twice or reporting twice is a usage
error (:class:`~datainspect.core.exceptions.EngineUsageError`).
"""

import logging
import time
from concurrent.futures import ThreadPoolExecutor
from enum import Enum
from typing import Iterable, List, Optional, Sequence

from datainspect.core import constants
from datainspect.core.config import InspectionConfig
from datainspect.core.exceptions import EngineUsageError, StreamReadError
from datainspect.profiler.accumulators import ColumnAccumulator
from datainspect.profiler.diagnostics import DiagnosticEngine
from datainspect.profiler.field_classifier import FieldClassifier
from datainspect.profiler.profile_result import (
    CategoricalSummary,
    ColumnReport,
    InspectionReport,
    NumericSummary,
    format_value,
)
from datainspect.profiler.type_resolver import ColumnType

logger = logging.getLogger(__name__)


class EngineState(Enum):
    """Lifecycle state of an InspectionEngine."""
    EMPTY = "empty"
    STREAMING = "streaming"
    FINALIZED = "finalized"
    REPORTED = "reported"


class InspectionEngine:
    """
    Single-use, single-pass inspection of one tabular stream.

    Columns (and their accumulators) are created from the header when the
    engine is constructed, before any data row is seen.

    Attributes:
        header: Column names in file order
        config: Inspection configuration
        row_count: Data rows accepted so far
        malformed_row_count: Rows skipped because of a wrong field count
        state: Current EngineState

    Example:
        >>> engine = InspectionEngine(["salary", "department"])
        >>> engine.process_row(["52000", "eng"])
        >>> engine.finalize()
        >>> report = engine.report()
        >>> report.get_column("salary").inferred_type
        'numeric'
    """

    def __init__(
        self,
        header: Sequence[str],
        config: Optional[InspectionConfig] = None,
        source: str = "<stream>"
    ):
        self.config = config or InspectionConfig()
        self.header = [str(name) for name in header]
        self.source = source
        self.classifier = FieldClassifier.from_config(self.config)
        self.diagnostics = DiagnosticEngine(self.config.thresholds)

        self.columns: List[ColumnAccumulator] = [
            ColumnAccumulator(
                name=name,
                position=position,
                reservoir_size=self.config.reservoir_size,
                random_seed=self.config.random_seed,
                outlier_robust_z=self.config.thresholds.outlier_robust_z
            )
            for position, name in enumerate(self.header)
        ]

        self.state = EngineState.EMPTY
        self.row_count = 0
        self.malformed_row_count = 0
        self.rows_seen = 0
        self._report: Optional[InspectionReport] = None

    # =========================================================================
    # STREAMING
    # =========================================================================

    def _require(self, operation: str, *allowed: EngineState) -> None:
        if self.state not in allowed:
            raise EngineUsageError(
                f"Cannot {operation} an engine in state '{self.state.value}'",
                operation=operation,
                state=self.state.value
            )

    def process_row(self, row: Sequence[str]) -> bool:
        """
        Fold one data row into the column accumulators.

        Args:
            row: Raw field strings in header order

        Returns:
            True if the row was accepted, False if it was skipped as malformed
        """
        self._require("process a row in", EngineState.EMPTY, EngineState.STREAMING)
        self.state = EngineState.STREAMING

        row_index = self.rows_seen
        self.rows_seen += 1

        if len(row) != len(self.columns):
            self.malformed_row_count += 1
            if self.malformed_row_count <= constants.MAX_MALFORMED_ROWS_LOGGED:
                logger.warning(
                    f"Skipping malformed row {row_index}: expected {len(self.columns)} fields, got {len(row)}"
                )
            elif self.malformed_row_count == constants.MAX_MALFORMED_ROWS_LOGGED + 1:
                logger.warning("Further malformed rows will not be logged individually")
            return False

        classify = self.classifier.classify
        for column, raw in zip(self.columns, row):
            column.update(classify(raw))
        self.row_count += 1
        return True

    def process_rows(self, rows: Iterable[Sequence[str]]) -> None:
        """
        Consume an iterable of rows until it is exhausted.

        An early end of the iterable is simply end-of-stream. An OSError or
        StreamReadError raised by the iterable aborts the pass: the engine is
        left unfinalized and the error surfaces as StreamReadError carrying
        the index of the row that could not be read.
        """
        iterator = iter(rows)
        while True:
            try:
                row = next(iterator)
            except StopIteration:
                return
            except StreamReadError as e:
                if e.row_index is None:
                    e.row_index = self.rows_seen
                    e.details['row_index'] = self.rows_seen
                logger.error(f"Row source failed at row {e.row_index}: {e.message}")
                raise
            except OSError as e:
                logger.error(f"Row source failed at row {self.rows_seen}: {e}")
                raise StreamReadError(
                    f"Failed to read row {self.rows_seen}: {e}",
                    file_path=self.source,
                    row_index=self.rows_seen,
                    original_exception=e
                ) from e
            self.process_row(row)

    # =========================================================================
    # FINALIZATION AND REPORTING
    # =========================================================================

    def finalize(self) -> None:
        """Close every column's resolver and accumulators, in column order."""
        self._require("finalize", EngineState.EMPTY, EngineState.STREAMING)
        for column in self.columns:
            column.finalize()
        self.state = EngineState.FINALIZED
        logger.debug(
            f"Finalized {len(self.columns)} column(s) over {self.row_count:,} row(s) "
            f"({self.malformed_row_count:,} malformed)"
        )

    def report(self) -> InspectionReport:
        """Run the diagnostic rules once and return the report."""
        self._require("report", EngineState.FINALIZED)

        columns = [self._build_column_report(column) for column in self.columns]
        self.diagnostics.diagnose_all(columns)
        self._report = InspectionReport(
            source=self.source,
            row_count=self.row_count,
            malformed_row_count=self.malformed_row_count,
            columns=columns
        )
        self.state = EngineState.REPORTED
        return self._report

    def _build_column_report(self, column: ColumnAccumulator) -> ColumnReport:
        resolver = column.resolver
        report = ColumnReport(
            name=column.name,
            position=column.position,
            inferred_type=column.column_type.value,
            majority_type=resolver.majority_type.value,
            effective_type=column.effective_type.value,
            row_count=self.row_count,
            missing_count=column.missing_count,
            nonconforming_count=resolver.nonconforming_count
        )

        if column.effective_type is ColumnType.NUMERIC:
            numeric = column.numeric
            robust = numeric.robust
            has_values = numeric.count > 0
            report.numeric = NumericSummary(
                count=numeric.count,
                min_value=numeric.min_value if has_values else None,
                max_value=numeric.max_value if has_values else None,
                mean=numeric.mean if has_values else None,
                std_dev=numeric.std_dev,
                median=robust.median,
                mad=robust.mad,
                scaled_mad=robust.scaled_mad,
                outlier_count=robust.outlier_count,
                outlier_count_exact=robust.outlier_count_exact,
                sequential_identifier=numeric.is_sequential_identifier
            )
        else:
            categorical = column.categorical
            report.categorical = CategoricalSummary(
                non_missing_count=categorical.non_missing_count,
                distinct_count=categorical.distinct_count,
                distinct_ratio=categorical.distinct_ratio,
                modal_value=format_value(categorical.modal_value),
                modal_frequency=categorical.modal_frequency,
                modal_fraction=categorical.modal_fraction
            )
        return report

    # =========================================================================
    # SHARDED INGESTION
    # =========================================================================

    def merge(self, other: "InspectionEngine") -> None:
        """
        Fold an engine built over the rows that follow this engine's rows.

        Both engines must share the header and still be open. Merging in row
        order keeps first-seen ordering (modal ties) and sequence tracking
        identical to a single pass.
        """
        self._require("merge into", EngineState.EMPTY, EngineState.STREAMING)
        other._require("merge from", EngineState.EMPTY, EngineState.STREAMING)
        if other.header != self.header:
            raise EngineUsageError(
                "Cannot merge engines with different headers",
                operation="merge",
                state=self.state.value
            )

        for mine, theirs in zip(self.columns, other.columns):
            mine.merge(theirs)
        self.row_count += other.row_count
        self.malformed_row_count += other.malformed_row_count
        self.rows_seen += other.rows_seen
        if self.rows_seen:
            self.state = EngineState.STREAMING

    def profile(self, rows: Iterable[Sequence[str]]) -> InspectionReport:
        """Run the whole pass over ``rows`` and return the report."""
        start = time.time()
        logger.info(f"Inspecting {self.source}: {len(self.columns)} column(s)")
        self.process_rows(rows)
        self.finalize()
        report = self.report()
        logger.info(
            f"Inspected {report.row_count:,} row(s) in {time.time() - start:.2f}s: "
            f"{len(report.findings)} finding(s), {report.malformed_row_count:,} malformed row(s)"
        )
        return report


def profile_rows(
    header: Sequence[str],
    rows: Iterable[Sequence[str]],
    config: Optional[InspectionConfig] = None,
    source: str = "<stream>"
) -> InspectionReport:
    """Convenience wrapper: one engine, one pass, one report."""
    return InspectionEngine(header, config=config, source=source).profile(rows)


def profile_shards(
    header: Sequence[str],
    shards: Sequence[Iterable[Sequence[str]]],
    config: Optional[InspectionConfig] = None,
    source: str = "<stream>",
    max_workers: int = 1
) -> InspectionReport:
    """
    Inspect contiguous row shards independently and merge them.

    Each shard gets its own engine, so no accumulator state is shared
    between workers. Partial engines are merged in shard order after every
    shard has finished, which makes the result independent of thread
    scheduling.

    Args:
        header: Column names shared by all shards
        shards: Row iterables in file order
        config: Inspection configuration
        source: Name for the report
        max_workers: Threads used to process shards (1 = sequential)

    Raises:
        StreamReadError: From the first failing shard, with ``row_index``
            counted from the start of the first shard
    """
    config = config or InspectionConfig()

    def run_shard(shard: Iterable[Sequence[str]]):
        engine = InspectionEngine(header, config=config, source=source)
        try:
            engine.process_rows(shard)
        except StreamReadError as e:
            return engine, e
        return engine, None

    if max_workers > 1 and len(shards) > 1:
        with ThreadPoolExecutor(max_workers=max_workers) as pool:
            outcomes = list(pool.map(run_shard, shards))
    else:
        outcomes = []
        for shard in shards:
            outcomes.append(run_shard(shard))
            if outcomes[-1][1] is not None:
                break

    # Shard-local row indexes are rebased onto the whole stream
    offset = 0
    for partial, error in outcomes:
        if error is not None:
            error.row_index = offset + error.row_index
            error.details['row_index'] = error.row_index
            logger.error(f"Shard read failed at stream row {error.row_index}")
            raise error
        offset += partial.rows_seen

    merged = InspectionEngine(header, config=config, source=source)
    for partial, _ in outcomes:
        merged.merge(partial)
    merged.finalize()
    return merged.report()
