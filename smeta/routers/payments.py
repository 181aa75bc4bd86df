"""
Payment endpoints — simulated purchase and its confirmation.

POST /api/payments          — register a pending payment for a user, returns the confirmation link
GET  /api/payment-success   — redeem a payment into an access token (JSON or redirect)
"""

import logging
from typing import Optional
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

from fastapi import APIRouter, Depends
from fastapi.responses import RedirectResponse

from .. import schemas
from ..config import Settings, get_settings
from ..errors import InvalidPayment
from ..stores import (
    PendingPaymentRegistry,
    TokenStore,
    get_payment_registry,
    get_token_store,
    short,
)

logger = logging.getLogger(__name__)

router = APIRouter(tags=["payments"])


def _origin(url: str) -> tuple:
    parts = urlsplit(url)
    return parts.scheme.lower(), parts.netloc.lower()


def redirect_target(requested: Optional[str], settings: Settings) -> str:
    """
    Where to send the browser after confirmation. A requested URL is honoured
    only on the front end's own origin so tokens never leave it.
    """
    default = settings.redirect_url
    if not requested:
        return default
    allowed = {_origin(settings.FRONTEND_URL), _origin(default)}
    if _origin(requested) in allowed:
        return requested
    logger.warning("Ignoring redirectUrl outside the front-end origin: %s", requested)
    return default


def with_token(url: str, token: str) -> str:
    """Append token as a query parameter, keeping any existing ones."""
    parts = urlsplit(url)
    query = [(k, v) for k, v in parse_qsl(parts.query, keep_blank_values=True) if k != "token"]
    query.append(("token", token))
    return urlunsplit((parts.scheme, parts.netloc, parts.path, urlencode(query), parts.fragment))


@router.post("/payments", response_model=schemas.RegisterPaymentResponse,
             responses={400: {"model": schemas.ErrorResponse}})
def register_payment(
    request: schemas.RegisterPaymentRequest,
    registry: PendingPaymentRegistry = Depends(get_payment_registry),
    settings: Settings = Depends(get_settings),
):
    """Start a simulated purchase. The returned link confirms it."""
    user_id = str(request.userId)
    payment_id = registry.register(user_id)
    return {
        "success": True,
        "paymentId": payment_id,
        "confirmationUrl": settings.confirmation_url(user_id, payment_id),
    }


@router.get("/payment-success", response_model=schemas.PaymentSuccessResponse,
            responses={307: {"description": "Redirect to the front end with ?token="},
                       400: {"model": schemas.ErrorResponse}})
def payment_success(
    userId: Optional[str] = None,
    paymentId: Optional[str] = None,
    redirectUrl: Optional[str] = None,
    registry: PendingPaymentRegistry = Depends(get_payment_registry),
    store: TokenStore = Depends(get_token_store),
    settings: Settings = Depends(get_settings),
):
    """
    Redeem a payment into an access token.

    registered mode: the payment must be pending and belong to userId; token lives ACCESS_TTL_REDEEMED_DAYS.
    first_sight mode: any unspent payment id is accepted; token lives ACCESS_TTL_DIRECT_HOURS.
    """
    if not userId or not paymentId:
        raise InvalidPayment()

    # Resolve the ttl before the payment is consumed
    ttl = settings.access_ttl
    registry.redeem(paymentId, userId, allow_unregistered=settings.redeems_first_sight)
    access = store.issue(ttl)

    logger.info(
        "Issued token %s for user %s (payment %s), valid until %s",
        short(access.token), userId, short(paymentId), access.expires_at.isoformat(),
    )

    if settings.redirects_on_confirmation:
        target = redirect_target(redirectUrl, settings)
        return RedirectResponse(url=with_token(target, access.token), status_code=307)

    return {"success": True, "token": access.token}
