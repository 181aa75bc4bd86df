"""
Scaffolding calculator.

Outside scaffolding is measured by the vertical projection on the facade
(length × height). Inside scaffolding is measured by the horizontal projection
on the floor (room length × room width) when it carries a full deck for ceiling
work, or by wall length × deck width when it only runs along the walls.

Above 16 m of facade height a coefficient K applies, one step for every
started 4 m: K = ceil((H - 16) / 4).
"""

import math
from typing import Optional

from ..errors import InvalidInput
from ..models import CalculationResult, Coefficient
from .base import BaseCalculator
from .justifications import justification_for

BASE_HEIGHT_M = 16.0
HEIGHT_STEP_M = 4.0

OUTSIDE = "outside"
INSIDE = "inside"
CEILING = "ceiling"
WALLS = "walls"


def height_coefficient(height: float) -> Optional[int]:
    """K for a facade height, or None at or below the base height."""
    if height <= BASE_HEIGHT_M:
        return None
    return math.ceil((height - BASE_HEIGHT_M) / HEIGHT_STEP_M)


class ScaffoldingCalculator(BaseCalculator):

    def __init__(self, strict: bool = True):
        # strict=False keeps the legacy zero-volume answer for unknown branches
        self.strict = strict

    def calculate(self, fields: dict) -> CalculationResult:
        location = fields.get("location")

        if location == OUTSIDE:
            return self._outside(fields)

        if location == INSIDE:
            inside_type = fields.get("insideType")
            if inside_type == CEILING:
                return self._ceiling(fields)
            if inside_type == WALLS:
                return self._walls(fields)
            return self._unknown_branch(
                "Неизвестный тип внутренних лесов: %r." % (inside_type,), ("insideType",))

        return self._unknown_branch(
            "Неизвестное расположение лесов: %r." % (location,), ("location",))

    # --- Branches ---

    def _outside(self, fields: dict) -> CalculationResult:
        names = ("length", "height")
        message = "Длина и высота должны быть положительными числами."
        length, height = self.require_positive(fields, names, message)
        volume = self.area(length, height, names, message)
        formula = "V = L × H = %s × %s" % (self.fmt_number(length), self.fmt_number(height))
        breakdown = [
            "V – искомый объем работ, м²",
            "L – длина фасада здания, м",
            "H – высота фасада здания, м",
        ]
        return self.make_result(
            volume=volume,
            formula=formula,
            breakdown=breakdown,
            coefficient=self._coefficient(height),
            justification=justification_for(OUTSIDE),
        )

    def _ceiling(self, fields: dict) -> CalculationResult:
        names = ("roomLength", "roomWidth")
        message = "Длина и ширина помещения должны быть положительными числами."
        room_length, room_width = self.require_positive(fields, names, message)
        volume = self.area(room_length, room_width, names, message)
        formula = "V = Lпом × Wпом = %s × %s" % (
            self.fmt_number(room_length), self.fmt_number(room_width))
        breakdown = [
            "V – искомый объем работ, м²",
            "Lпом – длина помещения, м",
            "Wпом – ширина помещения, м",
        ]
        return self.make_result(
            volume=volume,
            formula=formula,
            breakdown=breakdown,
            justification=justification_for(CEILING),
        )

    def _walls(self, fields: dict) -> CalculationResult:
        names = ("wallsLength", "scaffoldWidth")
        message = "Длина стен и ширина настила должны быть положительными числами."
        walls_length, deck_width = self.require_positive(fields, names, message)
        volume = self.area(walls_length, deck_width, names, message)
        formula = "V = Lстен × Wнастила = %s × %s" % (
            self.fmt_number(walls_length), self.fmt_number(deck_width))
        breakdown = [
            "V – искомый объем работ, м²",
            "Lстен – общая длина стен, м",
            "Wнастила – ширина настила лесов, м",
        ]
        return self.make_result(
            volume=volume,
            formula=formula,
            breakdown=breakdown,
            justification=justification_for(WALLS),
        )

    def _unknown_branch(self, message: str, field_names: tuple) -> CalculationResult:
        if self.strict:
            raise InvalidInput(message, fields=field_names)
        return self.make_result(
            volume=0.0,
            formula="",
            breakdown=[],
            justification=justification_for(""),
        )

    # --- Coefficient ---

    def _coefficient(self, height: float) -> Optional[Coefficient]:
        k = height_coefficient(height)
        if k is None:
            return None
        return Coefficient(
            value=k,
            formula="K = Округл.вверх((%s - 16) / 4) = %d" % (self.fmt_number(height), k),
            explanation="Так как высота лесов превышает 16 м, дополнительно применяется коэффициент К.",
        )
