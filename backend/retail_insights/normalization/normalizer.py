"""Pack size normalization for retail catalog labels."""

import enum
import math
import re
from dataclasses import dataclass
from typing import Iterable, List, Optional, Sequence, Tuple

_NUMBER_PATTERN = re.compile(r"\d+(?:\.\d+)?")


class PackSizeUnit(str, enum.Enum):
    """Canonical pack size units"""
    GRAM = "g"
    MILLIGRAM = "mg"
    MILLILITER = "ml"
    PIECE = "pcs"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class NormalizedSize:
    """Quantity and unit parsed from a pack size label.

    Both fields are set together or both are None.
    """
    quantity: Optional[float]
    unit: Optional[PackSizeUnit]

    @classmethod
    def absent(cls) -> "NormalizedSize":
        return cls(quantity=None, unit=None)

    @property
    def is_parsed(self) -> bool:
        return self.quantity is not None


@dataclass(frozen=True)
class UnitRule:
    """One entry of the keyword dispatch table."""
    name: str
    keywords: Tuple[str, ...]
    unit: PackSizeUnit
    factor: float = 1.0
    average_range: bool = False

    def matches(self, text: str) -> bool:
        """Check whether any keyword occurs as a substring of text."""
        return any(keyword in text for keyword in self.keywords)

    def apply(self, numbers: Sequence[float]) -> float:
        """Compute the quantity from the extracted numbers.

        Range averaging only looks at the first two numbers; rules without
        averaging use the first number and ignore the rest.
        """
        if self.average_range and len(numbers) > 1:
            return (numbers[0] + numbers[1]) / 2 * self.factor
        return numbers[0] * self.factor


# Priority order matters: "kg" must be tested before "g", "ml" before " l".
DEFAULT_RULES: Tuple[UnitRule, ...] = (
    UnitRule("piece", ("pc", "pcs", "piece", "pack"), PackSizeUnit.PIECE),
    UnitRule("kilogram", ("kg",), PackSizeUnit.GRAM, factor=1000.0),
    UnitRule("milligram", ("mg",), PackSizeUnit.MILLIGRAM),
    UnitRule("milliliter", ("ml",), PackSizeUnit.MILLILITER, average_range=True),
    UnitRule("liter", (" l",), PackSizeUnit.MILLILITER, factor=1000.0),
    UnitRule("gram", ("gm", "g"), PackSizeUnit.GRAM, average_range=True),
)


def extract_numbers(text: str) -> List[float]:
    """Extract decimal numbers from text in order of appearance.

    Signs are not part of a number, so "600-800" yields [600.0, 800.0].
    A trailing dot is not consumed: "1." yields [1.0] and "1.2.3" yields
    [1.2, 3.0].
    """
    return [float(token) for token in _NUMBER_PATTERN.findall(text)]


def _is_absent(label) -> bool:
    if label is None:
        return True
    return isinstance(label, float) and math.isnan(label)


class PackSizeNormalizer:
    """Parses free-form pack size labels into (quantity, unit) pairs.

    Rules are tried in order and the first rule whose keyword appears in the
    lowercased label decides the unit. Labels with numbers but no keyword get
    the UNKNOWN unit with the first number kept verbatim. Labels without any
    number, and missing labels, produce an absent result. The normalizer
    never raises.
    """

    def __init__(self, rules: Sequence[UnitRule] = DEFAULT_RULES):
        self.rules = tuple(rules)

    def normalize(self, label) -> NormalizedSize:
        """Normalize a single pack size label.

        Args:
            label: Raw label, or None/NaN when the catalog has no value

        Returns:
            NormalizedSize, absent when the label is missing or has no number
        """
        if _is_absent(label):
            return NormalizedSize.absent()

        text = str(label).lower()
        numbers = extract_numbers(text)
        if not numbers:
            return NormalizedSize.absent()

        rule = self._first_match(text)
        if rule is None:
            return NormalizedSize(quantity=numbers[0], unit=PackSizeUnit.UNKNOWN)

        return NormalizedSize(quantity=rule.apply(numbers), unit=rule.unit)

    def normalize_many(self, labels: Iterable) -> List[NormalizedSize]:
        """Normalize labels, preserving input order."""
        return [self.normalize(label) for label in labels]

    def match_rule(self, label) -> Optional[UnitRule]:
        """Return the rule that decides the unit for label, if any."""
        if _is_absent(label):
            return None
        text = str(label).lower()
        if not extract_numbers(text):
            return None
        return self._first_match(text)

    def _first_match(self, text: str) -> Optional[UnitRule]:
        for rule in self.rules:
            if rule.matches(text):
                return rule
        return None
