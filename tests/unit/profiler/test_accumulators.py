"""
Unit tests for streaming accumulators.

Covers Welford mean/variance against the closed form, order and merge-path
invariance, robust median/MAD outlier detection (including resistance to
masking by the outlier itself), and categorical distinct/mode tracking.
"""

import math
import random
import statistics

import pytest

from datainspect.profiler.accumulators import (
    AccumulatorClosedError,
    CategoricalAccumulator,
    ColumnAccumulator,
    NumericAccumulator,
)
from datainspect.profiler.field_classifier import classify_field
from datainspect.profiler.type_resolver import ColumnType


def numeric_of(values, **kwargs):
    acc = NumericAccumulator(**kwargs)
    for value in values:
        acc.update(value)
    return acc


@pytest.fixture
def gaussian_values():
    """1000 draws from N(0, 1) with a fixed seed."""
    rng = random.Random(20240611)
    return [rng.gauss(0.0, 1.0) for _ in range(1000)]


class TestWelford:
    """Test online mean and variance."""

    def test_matches_closed_form(self):
        rng = random.Random(5)
        values = [rng.uniform(-1e3, 1e3) for _ in range(5_000)]
        acc = numeric_of(values)

        assert acc.count == 5_000
        assert acc.mean == pytest.approx(statistics.fmean(values), rel=1e-9)
        assert acc.variance == pytest.approx(statistics.variance(values), rel=1e-9)
        assert acc.std_dev == pytest.approx(statistics.stdev(values), rel=1e-9)
        assert acc.min_value == min(values)
        assert acc.max_value == max(values)

    def test_large_offset_is_stable(self):
        """Test no catastrophic cancellation around a large mean."""
        values = [1e9 + x for x in (4.0, 7.0, 13.0, 16.0)]
        acc = numeric_of(values)

        assert acc.variance == pytest.approx(30.0, rel=1e-9)

    def test_order_invariant(self):
        rng = random.Random(9)
        values = [rng.expovariate(0.1) for _ in range(2_000)]
        shuffled = values[:]
        rng.shuffle(shuffled)

        forward = numeric_of(values)
        backward = numeric_of(shuffled)

        assert forward.mean == pytest.approx(backward.mean, rel=1e-9)
        assert forward.variance == pytest.approx(backward.variance, rel=1e-9)

    def test_variance_undefined_below_two_values(self):
        acc = numeric_of([3.0])

        assert acc.variance is None
        assert acc.std_dev is None

    def test_merge_matches_single_pass(self):
        rng = random.Random(13)
        values = [rng.gauss(50.0, 12.0) for _ in range(3_000)]
        whole = numeric_of(values)

        left = numeric_of(values[:700])
        middle = numeric_of(values[700:701])
        right = numeric_of(values[701:])
        left.merge(middle)
        left.merge(right)

        assert left.count == whole.count
        assert left.mean == pytest.approx(whole.mean, rel=1e-9)
        assert left.variance == pytest.approx(whole.variance, rel=1e-9)
        assert left.min_value == whole.min_value
        assert left.max_value == whole.max_value

    def test_merge_into_empty(self):
        empty = NumericAccumulator()
        empty.merge(numeric_of([1.0, 2.0, 3.0]))

        assert empty.count == 3
        assert empty.mean == pytest.approx(2.0)
        assert empty.variance == pytest.approx(1.0)


class TestRobustStatistics:
    """Test median/MAD and the robust outlier count."""

    def test_median_and_mad(self):
        acc = numeric_of([1.0, 2.0, 3.0, 4.0, 100.0])
        acc.finalize()

        assert acc.robust.median == 3.0
        assert acc.robust.mad == 1.0
        assert acc.robust.scaled_mad == pytest.approx(1.4826)
        assert acc.robust.outlier_count == 1
        assert acc.robust.outlier_count_exact

    def test_single_extreme_value_not_masked(self, gaussian_values):
        """Test one value of 50 among N(0,1) draws is flagged alone."""
        clean = numeric_of(gaussian_values)
        clean.finalize()
        contaminated = numeric_of(gaussian_values + [50.0])
        contaminated.finalize()

        assert clean.robust.outlier_count == 0
        assert contaminated.robust.outlier_count == 1

        scale = clean.robust.scaled_mad
        assert abs(contaminated.robust.median - clean.robust.median) < 0.01 * scale
        assert abs(contaminated.robust.mad - clean.robust.mad) < 0.01 * clean.robust.mad

        # The naive statistics move measurably
        assert contaminated.mean - clean.mean > 0.04
        assert contaminated.std_dev > 1.5 * clean.std_dev

    def test_zero_mad_skips_outlier_test(self):
        """Test 0/1 flags with a dominant value produce no outliers."""
        acc = numeric_of([0.0] * 70 + [1.0] * 30)
        acc.finalize()

        assert acc.robust.mad == 0.0
        assert acc.robust.outlier_count == 0

    def test_sampled_count_is_estimated(self):
        values = [float(i % 100) for i in range(10_000)] + [1e6] * 100
        acc = numeric_of(values, reservoir_size=500, random_seed=1)
        acc.finalize()

        assert not acc.robust.outlier_count_exact
        assert acc.robust.retained == 500
        assert 0 <= acc.robust.outlier_count <= 1_000

    def test_empty_column(self):
        acc = NumericAccumulator()
        acc.update_missing()
        acc.finalize()

        assert acc.robust.median is None
        assert acc.robust.outlier_count == 0
        assert acc.missing_count == 1

    def test_closed_after_finalize(self):
        acc = numeric_of([1.0])
        acc.finalize()

        with pytest.raises(AccumulatorClosedError):
            acc.update(2.0)
        with pytest.raises(AccumulatorClosedError):
            acc.finalize()


class TestSequentialIdentifier:
    """Test detection of row-index style integer columns."""

    def test_increasing_integers(self):
        acc = NumericAccumulator()
        for i in range(1, 50):
            acc.update(float(i), integral=True)

        assert acc.is_sequential_identifier

    def test_repeat_breaks_sequence(self):
        acc = NumericAccumulator()
        for value in (1, 2, 2, 3):
            acc.update(float(value), integral=True)

        assert not acc.is_sequential_identifier

    def test_floats_are_not_identifiers(self):
        acc = NumericAccumulator()
        for i in range(10):
            acc.update(i + 0.5)

        assert not acc.is_sequential_identifier

    def test_merge_checks_shard_boundary(self):
        left = NumericAccumulator()
        right = NumericAccumulator()
        for i in range(10):
            left.update(float(i), integral=True)
        for i in range(5, 15):
            right.update(float(i), integral=True)

        left.merge(right)

        assert not left.is_sequential_identifier


class TestCategoricalAccumulator:
    """Test distinct values and mode."""

    def test_distinct_and_mode(self):
        acc = CategoricalAccumulator()
        for value in ("eng", "ops", "eng", "sales", "eng"):
            acc.update(value)
        acc.update_missing()
        acc.finalize()

        assert acc.distinct_count == 3
        assert acc.modal_value == "eng"
        assert acc.modal_frequency == 3
        assert acc.distinct_ratio == pytest.approx(0.6)
        assert acc.modal_fraction == pytest.approx(0.6)
        assert acc.missing_count == 1

    def test_first_seen_wins_tie(self):
        acc = CategoricalAccumulator()
        for value in ("b", "a", "a", "b"):
            acc.update(value)

        assert acc.modal_value == "b"

    def test_merge_keeps_first_seen_order(self):
        left = CategoricalAccumulator()
        right = CategoricalAccumulator()
        for value in ("x", "y"):
            left.update(value)
        for value in ("y", "x", "z"):
            right.update(value)

        left.merge(right)

        assert left.modal_value == "x"
        assert left.modal_frequency == 2
        assert list(left.frequencies) == ["x", "y", "z"]

    def test_empty_ratios_undefined(self):
        acc = CategoricalAccumulator()
        acc.finalize()

        assert acc.distinct_ratio is None
        assert acc.modal_fraction is None


class TestColumnAccumulator:
    """Test routing of classified fields."""

    def feed(self, *raws):
        column = ColumnAccumulator("col", position=0)
        for raw in raws:
            column.update(classify_field(raw))
        column.finalize()
        return column

    def test_numbers_go_to_numeric_side(self):
        column = self.feed("1", "2.5", "", "x")

        assert column.numeric.count == 2
        assert column.categorical.non_missing_count == 1
        assert column.missing_count == 1
        assert column.column_type is ColumnType.MIXED
        assert column.effective_type is ColumnType.NUMERIC

    def test_booleans_go_to_categorical_side(self):
        column = self.feed("yes", "no", "yes")

        assert column.column_type is ColumnType.BOOLEAN
        assert column.categorical.modal_value is True
        assert column.categorical.distinct_count == 2

    def test_columns_sample_independently(self):
        """Test columns with the same seed use distinct sampling streams."""
        first = ColumnAccumulator("a", position=0, reservoir_size=10, random_seed=42)
        second = ColumnAccumulator("b", position=1, reservoir_size=10, random_seed=42)
        for i in range(1_000):
            first.update(classify_field(str(i)))
            second.update(classify_field(str(i)))

        assert first.numeric.sampler.get_sample() != second.numeric.sampler.get_sample()

    def test_update_after_finalize(self):
        column = self.feed("1")
        with pytest.raises(AccumulatorClosedError):
            column.update(classify_field("2"))

    def test_all_missing_column(self):
        column = self.feed("", "NA", "null")

        assert column.missing_count == 3
        assert column.effective_type is ColumnType.NUMERIC
        assert column.numeric.count == 0
        assert math.isinf(column.numeric.min_value)
