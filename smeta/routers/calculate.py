"""
Protected calculator endpoints.

POST /api/calculate              — body {token?, data}; token may also come in the Authorization header
POST /api/calculate/{calculator} — Authorization: <token>; body is the data itself or {data}

The access check runs before the body's calculation fields are read.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Body, Depends, Header, HTTPException

from .. import schemas
from ..auth import AccessGuard, extract_token, get_access_guard
from ..calculators.registry import DEFAULT_CALCULATOR, get_calculator, has_calculator, list_calculators
from ..composer import compose_result
from ..config import Settings, get_settings
from ..errors import InvalidInput

logger = logging.getLogger(__name__)

router = APIRouter(tags=["calculate"])

ERROR_RESPONSES = {
    400: {"model": schemas.ErrorResponse},
    403: {"model": schemas.ErrorResponse},
}


def _run_calculator(name: str, data, settings: Settings) -> dict:
    if not isinstance(data, dict):
        raise InvalidInput("Отсутствуют исходные данные для расчета.", fields=("data",))
    calculator = get_calculator(name, strict=settings.STRICT_BRANCHES)
    result = calculator.calculate(data)
    return compose_result(result)


@router.post("/calculate", response_model=schemas.CalculationResponse, responses=ERROR_RESPONSES)
def calculate(
    payload: dict = Body(default={}),
    authorization: Optional[str] = Header(default=None),
    guard: AccessGuard = Depends(get_access_guard),
    settings: Settings = Depends(get_settings),
):
    """Run the default calculator on payload["data"]."""
    guard.authorize(extract_token(authorization, payload))
    return _run_calculator(DEFAULT_CALCULATOR, payload.get("data"), settings)


@router.post("/calculate/{calculator}", response_model=schemas.CalculationResponse, responses=ERROR_RESPONSES)
def calculate_with(
    calculator: str,
    payload: dict = Body(default={}),
    authorization: Optional[str] = Header(default=None),
    guard: AccessGuard = Depends(get_access_guard),
    settings: Settings = Depends(get_settings),
):
    """Run a named calculator. The body may wrap fields in "data" or send them flat."""
    if not has_calculator(calculator):
        raise HTTPException(
            status_code=404,
            detail=f"Unknown calculator: {calculator}. Available: {list_calculators()}",
        )
    guard.authorize(extract_token(authorization, payload))
    data = payload.get("data") if isinstance(payload.get("data"), dict) else payload
    return _run_calculator(calculator, data, settings)
