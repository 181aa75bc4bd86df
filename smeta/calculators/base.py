"""
Abstract base class for all estimate calculators.

Input: the "data" dict from the request body
Output: CalculationResult
"""

import math
from abc import ABC, abstractmethod
from typing import Iterable, List, Optional

from ..errors import InvalidInput
from ..models import CalculationResult, Coefficient, Justification


class BaseCalculator(ABC):
    """All calculators inherit from this."""

    VOLUME_PRECISION = 2

    @abstractmethod
    def calculate(self, fields: dict) -> CalculationResult:
        """
        Takes the raw request fields.
        Raises InvalidInput before computing anything if a required field is bad.
        """
        pass

    # --- Helper methods for all calculators ---

    def parse_number(self, value) -> Optional[float]:
        """
        Parse a numeric field from user input. Accepts numbers and numeric
        strings ("12.5", " 7 ", "12,5"). Returns None for anything else,
        including booleans, blanks, NaN and infinities.
        """
        if value is None or isinstance(value, bool):
            return None
        if isinstance(value, (int, float)):
            try:
                number = float(value)
            except OverflowError:
                return None
        else:
            text = str(value).strip().replace(",", ".")
            if not text:
                return None
            try:
                number = float(text)
            except (ValueError, TypeError, OverflowError):
                return None
        if not math.isfinite(number):
            return None
        return number

    def require_positive(self, fields: dict, names: Iterable[str], message: str) -> List[float]:
        """
        Parse every named field as a finite number > 0.
        All fields are checked before returning; one bad field fails the whole group.
        """
        names = tuple(names)
        values = [self.parse_number(fields.get(name)) for name in names]
        if any(v is None or v <= 0 for v in values):
            raise InvalidInput(message, fields=names)
        return values

    def area(self, a: float, b: float, names: Iterable[str], message: str) -> float:
        """Product of two validated dimensions. Raises InvalidInput if it overflows."""
        product = a * b
        if not math.isfinite(product):
            raise InvalidInput(message, fields=tuple(names))
        return product

    def fmt_number(self, value: float) -> str:
        """Format a value for a formula string: 20.0 → "20", 12.5 → "12.5"."""
        if float(value).is_integer():
            return str(int(value))
        return repr(float(value))

    def round_volume(self, value: float) -> float:
        return round(value, self.VOLUME_PRECISION)

    def make_result(self, volume: float, formula: str, breakdown: List[str],
                    justification: Justification,
                    coefficient: Optional[Coefficient] = None) -> CalculationResult:
        """Build a CalculationResult with the volume rounded to two decimals."""
        return CalculationResult(
            volume=self.round_volume(volume),
            formula=formula,
            formula_breakdown=list(breakdown),
            coefficient=coefficient,
            justification=justification,
        )
