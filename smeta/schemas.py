from pydantic import BaseModel, Field
from typing import Optional, List, Union


class Coefficient(BaseModel):
    value: int
    formula: str
    explanation: str


class Justification(BaseModel):
    title: str
    text: str


class CalculationResponse(BaseModel):
    success: bool = True
    volume: str
    formula: str
    formulaBreakdown: List[str] = []
    coefficient: Optional[Coefficient] = None
    justification: Justification


class ErrorResponse(BaseModel):
    success: bool = False
    message: str


class RegisterPaymentRequest(BaseModel):
    userId: Union[int, str] = Field(description="Messenger or front-end user id")


class RegisterPaymentResponse(BaseModel):
    success: bool = True
    paymentId: str
    confirmationUrl: str


class PaymentSuccessResponse(BaseModel):
    success: bool = True
    token: str
