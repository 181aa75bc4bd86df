"""
In-memory domain records. Nothing here outlives the process.
"""

from dataclasses import asdict, dataclass, field
from datetime import datetime
from typing import List, Optional


# --- Access ---

@dataclass(frozen=True)
class AccessToken:
    token: str
    expires_at: datetime


@dataclass(frozen=True)
class PendingPayment:
    payment_id: str
    user_id: str


# --- Calculation output ---

@dataclass(frozen=True)
class Coefficient:
    value: int
    formula: str
    explanation: str

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass(frozen=True)
class Justification:
    title: str
    text: str

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass
class CalculationResult:
    volume: float
    formula: str
    justification: Justification
    formula_breakdown: List[str] = field(default_factory=list)
    coefficient: Optional[Coefficient] = None
