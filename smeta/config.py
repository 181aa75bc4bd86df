from datetime import timedelta
from typing import Literal
from urllib.parse import urlencode

from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    APP_NAME: str = "smeta-calculators"
    PORT: int = 3001
    FRONTEND_URL: str = "https://smetnoe-frontend.vercel.app"

    # Payment confirmation: "json" returns the token, "redirect" sends the browser back with it
    PAYMENT_CONFIRMATION_MODE: Literal["json", "redirect"] = "json"
    # "registered" requires a pending payment; "first_sight" accepts any unspent payment id
    PAYMENT_REDEMPTION_MODE: Literal["registered", "first_sight"] = "registered"
    PAYMENT_REDIRECT_URL: str = ""  # empty → {FRONTEND_URL}/calculator

    # Access token lifetimes, at most ten years
    ACCESS_TTL_DIRECT_HOURS: int = Field(default=24, gt=0, le=24 * 3650)
    ACCESS_TTL_REDEEMED_DAYS: int = Field(default=30, gt=0, le=3650)

    # Unknown location/insideType → 400 instead of an empty zero-volume result
    STRICT_BRANCHES: bool = True

    # Telegram, bot disabled when token is empty
    TELEGRAM_BOT_TOKEN: str = ""
    TELEGRAM_WEBHOOK_SECRET: str = ""
    ACCESS_PRICE_LABEL: str = "Купить доступ на 24 часа (100 руб)"

    class Config:
        env_file = ".env"

    @property
    def redeems_first_sight(self) -> bool:
        return self.PAYMENT_REDEMPTION_MODE == "first_sight"

    @property
    def redirects_on_confirmation(self) -> bool:
        return self.PAYMENT_CONFIRMATION_MODE == "redirect"

    @property
    def access_ttl(self) -> timedelta:
        """Lifetime of a token minted by payment confirmation, per redemption mode."""
        if self.redeems_first_sight:
            return timedelta(hours=self.ACCESS_TTL_DIRECT_HOURS)
        return timedelta(days=self.ACCESS_TTL_REDEEMED_DAYS)

    @property
    def redirect_url(self) -> str:
        return self.PAYMENT_REDIRECT_URL or f"{self.FRONTEND_URL.rstrip('/')}/calculator"

    def confirmation_url(self, user_id: str, payment_id: str) -> str:
        """Link the buyer follows to confirm a (simulated) payment."""
        query = urlencode({"userId": user_id, "paymentId": payment_id})
        return f"{self.FRONTEND_URL.rstrip('/')}/payment-success?{query}"


settings = Settings()


def get_settings() -> Settings:
    """FastAPI dependency. Tests override it with a customised Settings."""
    return settings
