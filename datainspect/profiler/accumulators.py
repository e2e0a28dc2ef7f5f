"""
Streaming Accumulators - Single-Pass Column Statistics.

This module holds the per-column state that is updated once per field during
the pass and closed exactly once when the stream ends.

Architecture:
    NumericAccumulator:
        1. Welford's online mean/M2 (numerically stable, no sum of squares)
        2. Direct min/max comparison
        3. Reservoir sample of values for median and MAD at finalize
        4. O(1) tracking of integral / strictly increasing sequences
    CategoricalAccumulator:
        1. Insertion-ordered value -> frequency mapping (exact distinct count)
        2. Incrementally maintained modal value (first-seen wins ties)
    ColumnAccumulator:
        One per column. Feeds numeric fields to the numeric side and
        text/boolean fields to the categorical side, because the column's
        type is only known at the end of the pass. At finalize the resolved
        effective type selects which side is reported.

Notes:
    - Outliers are judged against median/MAD, never against the Welford
      mean/stddev.
    - When the scaled MAD is zero (more than half the values identical, e.g.
      0/1 flags) no outlier test is run: every non-modal value would have an
      infinite robust z-score.
    - Outlier counts are exact while the reservoir holds the whole column and
      scaled by seen/retained otherwise.
"""

import logging
import math
from dataclasses import dataclass
from typing import Any, Dict, Optional

import numpy as np

from datainspect.core import constants
from datainspect.profiler.field_classifier import FieldKind, FieldValue
from datainspect.profiler.sampling_utils import ReservoirSampler
from datainspect.profiler.type_resolver import ColumnType, ColumnTypeResolver

logger = logging.getLogger(__name__)


class AccumulatorClosedError(RuntimeError):
    """An accumulator was updated or finalized after it was closed."""


@dataclass
class RobustStatistics:
    """
    Median/MAD summary computed from the reservoir at finalize.

    Attributes:
        median: Median of the retained values
        mad: Median absolute deviation from the median (unscaled)
        scaled_mad: ``mad * 1.4826`` (normal-consistent scale)
        outlier_count: Outliers found, scaled to the column when sampled
        outlier_count_exact: True when the reservoir held every value
        retained: Number of values the estimate is based on
    """
    median: Optional[float] = None
    mad: Optional[float] = None
    scaled_mad: Optional[float] = None
    outlier_count: int = 0
    outlier_count_exact: bool = True
    retained: int = 0


class NumericAccumulator:
    """
    Online numeric statistics with a bounded robust-statistics buffer.

    Example:
        >>> acc = NumericAccumulator(reservoir_size=1000)
        >>> for x in (1.0, 2.0, 3.0, 4.0):
        ...     acc.update(x)
        >>> acc.finalize()
        >>> acc.mean, acc.variance
        (2.5, 1.6666666666666667)
    """

    def __init__(
        self,
        reservoir_size: int = constants.DEFAULT_RESERVOIR_SIZE,
        random_seed: Optional[int] = constants.DEFAULT_RANDOM_SEED,
        outlier_robust_z: float = constants.OUTLIER_ROBUST_Z
    ):
        self.count = 0
        self.mean = 0.0
        self.m2 = 0.0
        self.min_value = math.inf
        self.max_value = -math.inf
        self.missing_count = 0
        self.outlier_robust_z = outlier_robust_z
        self.sampler = ReservoirSampler(reservoir_size=reservoir_size, random_seed=random_seed)

        # Sequential identifier tracking
        self.all_integral = True
        self.strictly_increasing = True
        self._first_value: Optional[float] = None
        self._last_value: Optional[float] = None

        self.robust: Optional[RobustStatistics] = None
        self.closed = False

    def update(self, x: float, integral: bool = False) -> None:
        """
        Fold one numeric value into the running statistics.

        Args:
            x: The value
            integral: True when the field was classified as an integer
        """
        if self.closed:
            raise AccumulatorClosedError("NumericAccumulator updated after finalize()")

        self.count += 1
        delta = x - self.mean
        self.mean += delta / self.count
        delta2 = x - self.mean
        self.m2 += delta * delta2

        if x < self.min_value:
            self.min_value = x
        if x > self.max_value:
            self.max_value = x

        if not integral:
            self.all_integral = False
        if self._last_value is not None and x <= self._last_value:
            self.strictly_increasing = False
        if self._first_value is None:
            self._first_value = x
        self._last_value = x

        self.sampler.add(x)

    def update_missing(self) -> None:
        if self.closed:
            raise AccumulatorClosedError("NumericAccumulator updated after finalize()")
        self.missing_count += 1

    def merge(self, other: "NumericAccumulator") -> None:
        """
        Merge the partial state of ``other`` (later rows) into this one.

        Uses the parallel-variance combination of Chan et al.:
        ``delta = mean_b - mean_a``; ``mean = mean_a + delta * n_b / n``;
        ``M2 = M2_a + M2_b + delta**2 * n_a * n_b / n``.
        """
        if self.closed or other.closed:
            raise AccumulatorClosedError("Cannot merge a finalized NumericAccumulator")

        self.missing_count += other.missing_count
        if other.count == 0:
            return
        if self.count == 0:
            self.count = other.count
            self.mean = other.mean
            self.m2 = other.m2
        else:
            n_a, n_b = self.count, other.count
            n = n_a + n_b
            delta = other.mean - self.mean
            self.mean = self.mean + delta * n_b / n
            self.m2 = self.m2 + other.m2 + delta * delta * n_a * n_b / n
            self.count = n

        self.min_value = min(self.min_value, other.min_value)
        self.max_value = max(self.max_value, other.max_value)

        self.all_integral = self.all_integral and other.all_integral
        if (self._last_value is not None and other._first_value is not None
                and other._first_value <= self._last_value):
            self.strictly_increasing = False
        self.strictly_increasing = self.strictly_increasing and other.strictly_increasing
        if self._first_value is None:
            self._first_value = other._first_value
        if other._last_value is not None:
            self._last_value = other._last_value

        self.sampler.merge(other.sampler)

    @property
    def variance(self) -> Optional[float]:
        """Sample variance (n-1 denominator), defined when count > 1."""
        if self.count < 2:
            return None
        return self.m2 / (self.count - 1)

    @property
    def std_dev(self) -> Optional[float]:
        variance = self.variance
        return math.sqrt(variance) if variance is not None else None

    def finalize(self) -> None:
        """Compute median, MAD and the robust outlier count (once)."""
        if self.closed:
            raise AccumulatorClosedError("NumericAccumulator finalized twice")
        self.closed = True

        values = np.sort(np.asarray(self.sampler.reservoir, dtype=np.float64))
        if values.size == 0:
            self.robust = RobustStatistics()
            return

        median = float(np.median(values))
        mad = float(np.median(np.abs(values - median)))
        scaled_mad = mad * constants.MAD_NORMAL_CONSISTENCY
        exact = self.sampler.is_complete

        outliers_in_sample = 0
        if scaled_mad > 0:
            robust_z = np.abs(values - median) / scaled_mad
            outliers_in_sample = int(np.count_nonzero(robust_z >= self.outlier_robust_z))

        if exact:
            outlier_count = outliers_in_sample
        else:
            outlier_count = int(round(outliers_in_sample * self.sampler.items_seen / values.size))

        self.robust = RobustStatistics(
            median=median,
            mad=mad,
            scaled_mad=scaled_mad,
            outlier_count=outlier_count,
            outlier_count_exact=exact,
            retained=int(values.size)
        )

    @property
    def is_sequential_identifier(self) -> bool:
        """True for integer values that strictly increase row after row."""
        return self.count > 0 and self.all_integral and self.strictly_increasing


class CategoricalAccumulator:
    """
    Distinct values and modal frequency of text/boolean fields.

    Values are kept in an insertion-ordered dict, so iteration order only
    depends on arrival order, never on hashing.

    Example:
        >>> acc = CategoricalAccumulator()
        >>> for v in ("eng", "ops", "eng"):
        ...     acc.update(v)
        >>> acc.finalize()
        >>> acc.distinct_count, acc.modal_value, acc.modal_frequency
        (2, 'eng', 2)
    """

    def __init__(self):
        self.frequencies: Dict[Any, int] = {}
        self._first_seen: Dict[Any, int] = {}
        self.non_missing_count = 0
        self.missing_count = 0
        self.modal_value: Any = None
        self.modal_frequency = 0
        self.distinct_ratio: Optional[float] = None
        self.modal_fraction: Optional[float] = None
        self.closed = False

    def update(self, value: Any) -> None:
        if self.closed:
            raise AccumulatorClosedError("CategoricalAccumulator updated after finalize()")

        if value not in self._first_seen:
            self._first_seen[value] = len(self._first_seen)
        frequency = self.frequencies.get(value, 0) + 1
        self.frequencies[value] = frequency
        self.non_missing_count += 1

        # On a tie the value seen first keeps (or takes) the mode
        if (frequency > self.modal_frequency
                or (frequency == self.modal_frequency
                    and self._first_seen[value] < self._first_seen[self.modal_value])):
            self.modal_value = value
            self.modal_frequency = frequency

    def update_missing(self) -> None:
        if self.closed:
            raise AccumulatorClosedError("CategoricalAccumulator updated after finalize()")
        self.missing_count += 1

    def merge(self, other: "CategoricalAccumulator") -> None:
        """Add the frequencies of ``other`` (later rows), keeping first-seen order."""
        if self.closed or other.closed:
            raise AccumulatorClosedError("Cannot merge a finalized CategoricalAccumulator")

        for value, count in other.frequencies.items():
            if value not in self._first_seen:
                self._first_seen[value] = len(self._first_seen)
            self.frequencies[value] = self.frequencies.get(value, 0) + count
        self.non_missing_count += other.non_missing_count
        self.missing_count += other.missing_count

        # Recompute the mode; dict order is global first-seen order
        self.modal_value, self.modal_frequency = None, 0
        for value, count in self.frequencies.items():
            if count > self.modal_frequency:
                self.modal_value, self.modal_frequency = value, count

    @property
    def distinct_count(self) -> int:
        return len(self.frequencies)

    def finalize(self) -> None:
        if self.closed:
            raise AccumulatorClosedError("CategoricalAccumulator finalized twice")
        self.closed = True
        if self.non_missing_count > 0:
            self.distinct_ratio = self.distinct_count / self.non_missing_count
            self.modal_fraction = self.modal_frequency / self.non_missing_count


class ColumnAccumulator:
    """
    The single accumulator owned by one column.

    Holds both partial states for the duration of the pass plus the type
    resolver; :meth:`finalize` closes all three and records the effective
    type, which selects the summary reported for the column.
    """

    def __init__(
        self,
        name: str,
        position: int,
        reservoir_size: int = constants.DEFAULT_RESERVOIR_SIZE,
        random_seed: Optional[int] = constants.DEFAULT_RANDOM_SEED,
        outlier_robust_z: float = constants.OUTLIER_ROBUST_Z
    ):
        self.name = name
        self.position = position
        # Distinct but reproducible stream per column
        column_seed = None if random_seed is None else random_seed + position
        self.resolver = ColumnTypeResolver(name)
        self.numeric = NumericAccumulator(
            reservoir_size=reservoir_size,
            random_seed=column_seed,
            outlier_robust_z=outlier_robust_z
        )
        self.categorical = CategoricalAccumulator()
        self.closed = False

    def update(self, field_value: FieldValue) -> None:
        """Route one classified field to the resolver and the matching state."""
        if self.closed:
            raise AccumulatorClosedError(f"Column '{self.name}' updated after finalize()")

        kind = field_value.kind
        self.resolver.observe(kind)

        if kind is FieldKind.MISSING:
            self.numeric.update_missing()
            self.categorical.update_missing()
        elif kind.is_numeric:
            self.numeric.update(field_value.as_float(), integral=kind is FieldKind.INTEGER)
        else:
            self.categorical.update(field_value.value)

    def merge(self, other: "ColumnAccumulator") -> None:
        if self.closed or other.closed:
            raise AccumulatorClosedError(f"Cannot merge finalized column '{self.name}'")
        self.resolver.merge(other.resolver)
        self.numeric.merge(other.numeric)
        self.categorical.merge(other.categorical)

    def finalize(self) -> None:
        if self.closed:
            raise AccumulatorClosedError(f"Column '{self.name}' finalized twice")
        self.resolver.finalize()
        self.numeric.finalize()
        self.categorical.finalize()
        self.closed = True

    @property
    def missing_count(self) -> int:
        return self.resolver.missing_count

    @property
    def effective_type(self) -> ColumnType:
        return self.resolver.effective_type

    @property
    def column_type(self) -> ColumnType:
        return self.resolver.column_type
