"""
Response payloads returned to the front end.
"""

from .models import CalculationResult


def format_volume(volume: float) -> str:
    """Volume is always sent with two decimals, whole numbers included."""
    return f"{volume:.2f}"


def compose_result(result: CalculationResult) -> dict:
    return {
        "success": True,
        "volume": format_volume(result.volume),
        "formula": result.formula,
        "formulaBreakdown": list(result.formula_breakdown),
        "coefficient": result.coefficient.to_dict() if result.coefficient else None,
        "justification": result.justification.to_dict(),
    }


def compose_error(message: str) -> dict:
    return {"success": False, "message": message}
