"""
Unit tests for column type resolution.

Majority vote over the non-missing field tags, ties broken
numeric > boolean > categorical, MIXED whenever any field disagrees.
"""

import pytest

from datainspect.profiler.field_classifier import FieldKind
from datainspect.profiler.type_resolver import ColumnType, ColumnTypeResolver


def resolve(*kinds):
    resolver = ColumnTypeResolver("col")
    for kind in kinds:
        resolver.observe(kind)
    resolver.finalize()
    return resolver


class TestMajority:
    """Test majority selection."""

    def test_pure_numeric(self):
        resolver = resolve(FieldKind.INTEGER, FieldKind.FLOAT, FieldKind.MISSING)

        assert resolver.majority_type is ColumnType.NUMERIC
        assert resolver.column_type is ColumnType.NUMERIC
        assert resolver.effective_type is ColumnType.NUMERIC
        assert resolver.nonconforming_count == 0
        assert resolver.missing_count == 1

    def test_pure_text(self):
        resolver = resolve(FieldKind.TEXT, FieldKind.TEXT)

        assert resolver.column_type is ColumnType.CATEGORICAL
        assert resolver.effective_type is ColumnType.CATEGORICAL

    def test_pure_boolean_reported_as_boolean(self):
        """Test boolean columns keep their type but are summarized categorically."""
        resolver = resolve(FieldKind.BOOLEAN, FieldKind.BOOLEAN)

        assert resolver.column_type is ColumnType.BOOLEAN
        assert resolver.effective_type is ColumnType.CATEGORICAL

    def test_missing_fields_do_not_vote(self):
        resolver = resolve(FieldKind.TEXT, *[FieldKind.MISSING] * 10)

        assert resolver.column_type is ColumnType.CATEGORICAL
        assert resolver.non_missing_count == 1


class TestTieBreaks:
    """Test tie-breaking order."""

    @pytest.mark.parametrize("kinds, expected", [
        ((FieldKind.INTEGER, FieldKind.TEXT), ColumnType.NUMERIC),
        ((FieldKind.BOOLEAN, FieldKind.TEXT), ColumnType.BOOLEAN),
        ((FieldKind.FLOAT, FieldKind.BOOLEAN), ColumnType.NUMERIC),
        ((), ColumnType.NUMERIC),
    ])
    def test_tie_break(self, kinds, expected):
        assert resolve(*kinds).majority_type is expected


class TestMixed:
    """Test nonconforming counts and MIXED reporting."""

    def test_single_stray_value_makes_mixed(self):
        resolver = resolve(*[FieldKind.INTEGER] * 9, FieldKind.TEXT)

        assert resolver.column_type is ColumnType.MIXED
        assert resolver.majority_type is ColumnType.NUMERIC
        assert resolver.effective_type is ColumnType.NUMERIC
        assert resolver.nonconforming_count == 1

    def test_boolean_majority_with_numbers_summarized_categorically(self):
        resolver = resolve(*[FieldKind.BOOLEAN] * 5, FieldKind.INTEGER, FieldKind.INTEGER)

        assert resolver.column_type is ColumnType.MIXED
        assert resolver.majority_type is ColumnType.BOOLEAN
        assert resolver.effective_type is ColumnType.CATEGORICAL
        assert resolver.nonconforming_count == 2

    def test_boolean_majority_with_text_summarized_categorically(self):
        resolver = resolve(*[FieldKind.BOOLEAN] * 5, FieldKind.TEXT, FieldKind.TEXT, FieldKind.INTEGER)

        assert resolver.effective_type is ColumnType.CATEGORICAL
        assert resolver.nonconforming_count == 3

    def test_class_counts(self):
        resolver = resolve(FieldKind.INTEGER, FieldKind.FLOAT, FieldKind.BOOLEAN, FieldKind.TEXT)

        assert resolver.class_counts() == {
            ColumnType.NUMERIC: 2,
            ColumnType.BOOLEAN: 1,
            ColumnType.CATEGORICAL: 1,
        }


class TestLifecycle:
    """Test finalize and merge behaviour."""

    def test_column_type_before_finalize(self):
        with pytest.raises(RuntimeError):
            ColumnTypeResolver("col").column_type

    def test_merge_adds_counts(self):
        first = ColumnTypeResolver("col")
        second = ColumnTypeResolver("col")
        first.observe(FieldKind.INTEGER)
        second.observe(FieldKind.TEXT)
        second.observe(FieldKind.TEXT)

        first.merge(second)
        first.finalize()

        assert first.majority_type is ColumnType.CATEGORICAL
        assert first.nonconforming_count == 1
