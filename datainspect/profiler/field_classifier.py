"""
Field Classifier - Per-Field Value Tagging.

Turns one raw field string into a tagged :class:`FieldValue`. The cascade is
ordered and the first match wins:

    1. Missing  - empty after strip, or a missing token ("NA", "null", ...)
    2. Integer  - optional sign + decimal digits, within signed 64-bit range
    3. Float    - decimal or scientific literal with a finite value
    4. Boolean  - true/false/yes/no
    5. Text     - everything else

Design Decisions:
    - Numbers are matched with regexes rather than ``int()``/``float()`` alone,
      because Python also accepts "1_000", "inf" and "nan" which are not
      portable numeric literals in delimited files.
    - "1"/"0" are integers, not booleans (integer test runs first).
    - Nothing raises: anything unparseable falls through to Text.

Usage:
    classifier = FieldClassifier()
    value = classifier.classify(" 42 ")   # FieldValue(kind=INTEGER, value=42)
"""

import math
import re
from dataclasses import dataclass
from enum import Enum
from typing import Union, Optional, Iterable

from datainspect.core import constants


class FieldKind(Enum):
    """Value tag assigned to a single field."""
    MISSING = "missing"
    INTEGER = "integer"
    FLOAT = "float"
    BOOLEAN = "boolean"
    TEXT = "text"

    @property
    def is_numeric(self) -> bool:
        return self in (FieldKind.INTEGER, FieldKind.FLOAT)


@dataclass(frozen=True)
class FieldValue:
    """
    Tagged value of one field.

    Attributes:
        kind: The classification tag
        value: Parsed value (None for MISSING, int, float, bool, or the
            stripped text)
    """
    kind: FieldKind
    value: Union[None, int, float, bool, str] = None

    @property
    def is_missing(self) -> bool:
        return self.kind is FieldKind.MISSING

    def as_float(self) -> float:
        """Numeric value as float (only valid for INTEGER/FLOAT)."""
        return float(self.value)


MISSING = FieldValue(FieldKind.MISSING)

_INTEGER_RE = re.compile(r"^[+-]?\d+$")
_FLOAT_RE = re.compile(r"^[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?$")


class FieldClassifier:
    """
    Classify raw field strings into tagged values.

    Token sets are compared against the stripped, lowercased field. The
    empty string is always missing.

    Attributes:
        missing_tokens: Tokens treated as missing
        true_tokens: Tokens parsed as True
        false_tokens: Tokens parsed as False

    Example:
        >>> classifier = FieldClassifier()
        >>> classifier.classify("NULL").kind
        <FieldKind.MISSING: 'missing'>
        >>> classifier.classify("-1.5e3").value
        -1500.0
        >>> classifier.classify("Yes").value
        True
    """

    def __init__(
        self,
        missing_tokens: Optional[Iterable[str]] = None,
        true_tokens: Optional[Iterable[str]] = None,
        false_tokens: Optional[Iterable[str]] = None
    ):
        self.missing_tokens = frozenset(
            t.lower() for t in (constants.MISSING_TOKENS if missing_tokens is None else missing_tokens)
        )
        self.true_tokens = frozenset(
            t.lower() for t in (constants.TRUE_TOKENS if true_tokens is None else true_tokens)
        )
        self.false_tokens = frozenset(
            t.lower() for t in (constants.FALSE_TOKENS if false_tokens is None else false_tokens)
        )

    @classmethod
    def from_config(cls, config) -> "FieldClassifier":
        """Build a classifier from an InspectionConfig."""
        return cls(
            missing_tokens=config.missing_tokens,
            true_tokens=config.true_tokens,
            false_tokens=config.false_tokens
        )

    def classify(self, raw: Optional[str]) -> FieldValue:
        """
        Classify one raw field.

        Args:
            raw: The field string as tokenized from the row (None is missing)

        Returns:
            A fresh FieldValue
        """
        if raw is None:
            return MISSING

        text = raw.strip()
        lowered = text.lower()
        if not text or lowered in self.missing_tokens:
            return MISSING

        # int64 needs at most 19 digits; longer strings skip int() entirely
        if _INTEGER_RE.match(text) and len(text.lstrip("+-")) <= 19:
            number = int(text)
            if constants.INT64_MIN <= number <= constants.INT64_MAX:
                return FieldValue(FieldKind.INTEGER, number)

        if _FLOAT_RE.match(text):
            number = float(text)
            if math.isfinite(number):
                return FieldValue(FieldKind.FLOAT, number)

        if lowered in self.true_tokens:
            return FieldValue(FieldKind.BOOLEAN, True)
        if lowered in self.false_tokens:
            return FieldValue(FieldKind.BOOLEAN, False)

        return FieldValue(FieldKind.TEXT, text)


_DEFAULT_CLASSIFIER = FieldClassifier()


def classify_field(raw: Optional[str]) -> FieldValue:
    """Classify with the default token sets."""
    return _DEFAULT_CLASSIFIER.classify(raw)
