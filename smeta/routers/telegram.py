"""
Telegram webhook.

POST /api/telegram/webhook — receives Bot API updates
"""

import hmac
import logging
from typing import Optional

from fastapi import APIRouter, Body, Depends, Header, HTTPException, status

from ..config import Settings, get_settings
from ..stores import PendingPaymentRegistry, get_payment_registry
from ..telegram_bot import TelegramBot, handle_update

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/telegram", tags=["telegram"])


def get_telegram_bot(settings: Settings = Depends(get_settings)) -> Optional[TelegramBot]:
    """Bot client, or None when TELEGRAM_BOT_TOKEN is not set."""
    if not settings.TELEGRAM_BOT_TOKEN:
        return None
    return TelegramBot(settings.TELEGRAM_BOT_TOKEN)


@router.post("/webhook")
def telegram_webhook(
    update: dict = Body(...),
    secret_token: Optional[str] = Header(default=None, alias="X-Telegram-Bot-Api-Secret-Token"),
    bot: Optional[TelegramBot] = Depends(get_telegram_bot),
    registry: PendingPaymentRegistry = Depends(get_payment_registry),
    settings: Settings = Depends(get_settings),
):
    expected = settings.TELEGRAM_WEBHOOK_SECRET
    if expected and not hmac.compare_digest(secret_token or "", expected):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Invalid webhook secret")

    if bot is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="TELEGRAM_BOT_TOKEN not configured",
        )

    try:
        action = handle_update(update, bot, registry, settings)
    except (KeyError, TypeError) as e:
        logger.warning("Malformed Telegram update %s: %s", update.get("update_id"), e)
        action = "ignored"

    return {"ok": True, "action": action}
