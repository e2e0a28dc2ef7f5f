"""
Column Type Resolver - Majority-Vote Column Typing.

Aggregates the per-field tags of one column and, once the stream has ended,
resolves them into a single :class:`ColumnType`.

Architecture:
    - INTEGER and FLOAT tags both vote for NUMERIC
    - BOOLEAN votes for BOOLEAN, TEXT votes for CATEGORICAL
    - MISSING does not vote
    - The plurality class wins; ties prefer NUMERIC > BOOLEAN > CATEGORICAL
      so that ambiguous columns stay analyzable as numbers

A field whose class differs from the winner is *nonconforming*. Any
nonconforming field makes the reported type MIXED, while the *effective*
type (NUMERIC or CATEGORICAL) still decides which statistics are reported.
"""

import logging
from enum import Enum
from typing import Dict, Optional

from datainspect.profiler.field_classifier import FieldKind

logger = logging.getLogger(__name__)


class ColumnType(Enum):
    """Resolved type of a column."""
    NUMERIC = "numeric"
    CATEGORICAL = "categorical"
    BOOLEAN = "boolean"
    MIXED = "mixed"


_KIND_TO_CLASS = {
    FieldKind.INTEGER: ColumnType.NUMERIC,
    FieldKind.FLOAT: ColumnType.NUMERIC,
    FieldKind.BOOLEAN: ColumnType.BOOLEAN,
    FieldKind.TEXT: ColumnType.CATEGORICAL,
}

# Lower rank wins a tie
_TIE_BREAK_RANK = {
    ColumnType.NUMERIC: 0,
    ColumnType.BOOLEAN: 1,
    ColumnType.CATEGORICAL: 2,
}


class ColumnTypeResolver:
    """
    Count field tags for one column and resolve its type at finalize.

    Attributes:
        kind_counts: Count of fields per FieldKind (MISSING included)

    Example:
        >>> resolver = ColumnTypeResolver("price")
        >>> for kind in (FieldKind.INTEGER, FieldKind.FLOAT, FieldKind.TEXT):
        ...     resolver.observe(kind)
        >>> resolver.finalize()
        >>> resolver.majority_type, resolver.nonconforming_count
        (<ColumnType.NUMERIC: 'numeric'>, 1)
    """

    def __init__(self, column_name: str = ""):
        self.column_name = column_name
        self.kind_counts: Dict[FieldKind, int] = {kind: 0 for kind in FieldKind}
        self.majority_type: Optional[ColumnType] = None
        self.effective_type: Optional[ColumnType] = None
        self.nonconforming_count = 0
        self.closed = False

    def observe(self, kind: FieldKind) -> None:
        """Record the tag of one field."""
        self.kind_counts[kind] += 1

    def merge(self, other: "ColumnTypeResolver") -> None:
        """Fold the counts of another open resolver for the same column."""
        for kind, count in other.kind_counts.items():
            self.kind_counts[kind] += count

    @property
    def missing_count(self) -> int:
        return self.kind_counts[FieldKind.MISSING]

    @property
    def non_missing_count(self) -> int:
        return sum(count for kind, count in self.kind_counts.items() if kind is not FieldKind.MISSING)

    def class_counts(self) -> Dict[ColumnType, int]:
        """Votes per candidate class, in tie-break order."""
        votes = {ColumnType.NUMERIC: 0, ColumnType.BOOLEAN: 0, ColumnType.CATEGORICAL: 0}
        for kind, column_class in _KIND_TO_CLASS.items():
            votes[column_class] += self.kind_counts[kind]
        return votes

    def finalize(self) -> None:
        """Resolve majority, effective type and nonconforming count (once)."""
        votes = self.class_counts()
        majority = min(votes, key=lambda c: (-votes[c], _TIE_BREAK_RANK[c]))
        self.majority_type = majority
        self.nonconforming_count = self.non_missing_count - votes[majority]

        if majority is ColumnType.NUMERIC:
            self.effective_type = ColumnType.NUMERIC
        else:
            # Booleans are accumulated on the categorical side
            self.effective_type = ColumnType.CATEGORICAL

        self.closed = True

        if self.nonconforming_count:
            logger.debug(
                f"Type resolution for '{self.column_name}': majority={majority.value}, "
                f"effective={self.effective_type.value}, "
                f"nonconforming={self.nonconforming_count:,} of {self.non_missing_count:,}"
            )

    @property
    def column_type(self) -> ColumnType:
        """Reported type: MIXED when any field disagrees with the majority."""
        if self.majority_type is None:
            raise RuntimeError("Column type requested before finalize()")
        if self.nonconforming_count > 0:
            return ColumnType.MIXED
        return self.majority_type
