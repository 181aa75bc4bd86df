"""
Telegram channel — the "buy access" prompt.

/start sends a welcome message with a buy button. Pressing it registers a
pending payment for the Telegram user and replies with the confirmation link.
Updates arrive through the webhook route; replies go out over the Bot API.
"""

import http.client
import json
import logging
import urllib.request
from typing import Optional

from .config import Settings
from .stores import PendingPaymentRegistry

logger = logging.getLogger(__name__)

BUY_ACCESS = "buy_access"

WELCOME_TEXT = (
    "Добро пожаловать в сервис сметных калькуляторов! "
    "Здесь вы можете приобрести временный доступ к нашим инструментам."
)


class TelegramBot:
    """Minimal Bot API client. Only the calls the purchase flow needs."""

    API_BASE = "https://api.telegram.org"

    def __init__(self, token: str, timeout: int = 10):
        self.token = token
        self.timeout = timeout

    def _call(self, method: str, payload: dict) -> bool:
        url = f"{self.API_BASE}/bot{self.token}/{method}"
        req = urllib.request.Request(
            url,
            data=json.dumps(payload).encode("utf-8"),
            headers={"Content-Type": "application/json"},
            method="POST",
        )
        try:
            with urllib.request.urlopen(req, timeout=self.timeout) as response:
                result = json.loads(response.read())
                if not result.get("ok"):
                    logger.warning("Telegram %s rejected: %s", method, result.get("description"))
                    return False
                return True
        except (OSError, http.client.HTTPException, ValueError) as e:
            logger.warning("Telegram %s failed: %s", method, e)
            return False

    def send_message(self, chat_id, text: str, reply_markup: Optional[dict] = None) -> bool:
        payload = {"chat_id": chat_id, "text": text}
        if reply_markup:
            payload["reply_markup"] = reply_markup
        return self._call("sendMessage", payload)

    def answer_callback_query(self, callback_query_id: str) -> bool:
        return self._call("answerCallbackQuery", {"callback_query_id": callback_query_id})


def buy_keyboard(settings: Settings) -> dict:
    return {
        "inline_keyboard": [
            [{"text": settings.ACCESS_PRICE_LABEL, "callback_data": BUY_ACCESS}],
        ]
    }


def handle_update(update: dict, bot: TelegramBot, registry: PendingPaymentRegistry,
                  settings: Settings) -> str:
    """
    Dispatch one webhook update. Returns what was done: "start", "buy_access" or "ignored".
    """
    message = update.get("message") or {}
    text = (message.get("text") or "").strip()
    if text.startswith("/start"):
        chat_id = message["chat"]["id"]
        bot.send_message(chat_id, WELCOME_TEXT, reply_markup=buy_keyboard(settings))
        return "start"

    query = update.get("callback_query") or {}
    if query.get("data") == BUY_ACCESS:
        # Simulated payment: the confirmation link stands in for the provider's checkout
        user_id = str(query["from"]["id"])
        chat_id = query["message"]["chat"]["id"]
        payment_id = registry.register(user_id)
        url = settings.confirmation_url(user_id, payment_id)
        bot.answer_callback_query(query["id"])
        bot.send_message(chat_id, f"Для оплаты перейдите по ссылке: {url}")
        return BUY_ACCESS

    return "ignored"
