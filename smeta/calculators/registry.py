"""
Calculator registry — maps calculator names to calculator classes.

Only scaffolding is sold today. New calculators register here and become
reachable at POST /api/calculate/{name}.
"""

from .base import BaseCalculator
from .scaffolding import ScaffoldingCalculator

CALCULATOR_REGISTRY: dict[str, type] = {
    "scaffolding": ScaffoldingCalculator,
}

DEFAULT_CALCULATOR = "scaffolding"


def get_calculator(name: str, strict: bool = True) -> BaseCalculator:
    """Returns an instance of the calculator for a name, or raises ValueError."""
    if name not in CALCULATOR_REGISTRY:
        raise ValueError(
            f"No calculator registered for: {name}. "
            f"Available: {list(CALCULATOR_REGISTRY.keys())}"
        )
    return CALCULATOR_REGISTRY[name](strict=strict)


def has_calculator(name: str) -> bool:
    """Check if a calculator exists for a name."""
    return name in CALCULATOR_REGISTRY


def list_calculators() -> list[str]:
    """List all registered calculator names."""
    return list(CALCULATOR_REGISTRY.keys())
