"""
Token store and pending-payment registry.

Both are plain in-memory maps behind a lock. FastAPI runs sync endpoints in a
threadpool, so every lookup-then-mutate sequence happens inside one critical
section. Expired tokens are only evicted when someone reads them; abandoned
tokens and spent payment ids accumulate for the life of the process.

Route handlers get the stores through get_token_store / get_payment_registry,
so tests can swap in isolated instances via app.dependency_overrides.
"""

import hashlib
import logging
import threading
import uuid
from abc import ABC, abstractmethod
from datetime import datetime, timedelta, timezone
from typing import Callable, Dict, Optional, Set

from .errors import ExpiredToken, InvalidPayment, UnknownToken
from .models import AccessToken, PendingPayment

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def hash_token(token: str) -> str:
    """SHA-256 hash of a token for storage. Raw tokens are never kept."""
    return hashlib.sha256(token.encode("utf-8", errors="surrogatepass")).hexdigest()


def short(value: str) -> str:
    """Truncated identifier for log lines."""
    return f"{value[:8]}…" if value and len(value) > 8 else str(value)


def clean_id(value) -> str:
    """
    Normalise a user or payment id. Blank ids and ids that cannot be
    encoded as UTF-8 (lone surrogates) are rejected as InvalidPayment.
    """
    value = str(value if value is not None else "").strip()
    if not value:
        raise InvalidPayment()
    try:
        value.encode("utf-8")
    except UnicodeEncodeError:
        raise InvalidPayment()
    return value


# --- Token store ---

class TokenStore(ABC):
    """Issued access tokens mapped to their expiry instant."""

    @abstractmethod
    def init(self) -> None:
        """Prepare the store for use. Safe to call more than once."""

    @abstractmethod
    def clear(self) -> None:
        """Forget every issued token."""

    @abstractmethod
    def issue(self, ttl: timedelta) -> AccessToken:
        """Mint a new token valid for ttl from now."""

    @abstractmethod
    def validate(self, token: str) -> timedelta:
        """
        Return the remaining lifetime of a token.

        Raises UnknownToken if it was never issued (or already evicted), and
        ExpiredToken if it is past expiry, evicting the entry.
        """

    @abstractmethod
    def __len__(self) -> int:
        pass


class InMemoryTokenStore(TokenStore):

    def __init__(self, clock: Clock = utc_now):
        self.clock = clock
        self._lock = threading.Lock()
        self._expiry: Dict[str, datetime] = {}

    def init(self) -> None:
        with self._lock:
            self._expiry = {}

    def clear(self) -> None:
        with self._lock:
            self._expiry.clear()

    def issue(self, ttl: timedelta) -> AccessToken:
        if ttl <= timedelta(0):
            raise ValueError(f"Token ttl must be positive, got {ttl}")
        token = str(uuid.uuid4())
        expires_at = self.clock() + ttl
        with self._lock:
            self._expiry[hash_token(token)] = expires_at
        return AccessToken(token=token, expires_at=expires_at)

    def validate(self, token: str) -> timedelta:
        key = hash_token(token)
        with self._lock:
            expires_at = self._expiry.get(key)
            if expires_at is None:
                raise UnknownToken()
            now = self.clock()
            if now >= expires_at:
                del self._expiry[key]
                logger.info("Evicted expired token %s (expired %s)", short(token), expires_at.isoformat())
                raise ExpiredToken()
            return expires_at - now

    def __len__(self) -> int:
        with self._lock:
            return len(self._expiry)


# --- Pending payments ---

class PendingPaymentRegistry(ABC):
    """Outstanding simulated payments, each redeemable at most once."""

    @abstractmethod
    def init(self) -> None:
        pass

    @abstractmethod
    def clear(self) -> None:
        pass

    @abstractmethod
    def register(self, user_id: str) -> str:
        """Create a pending payment for a user and return its id."""

    @abstractmethod
    def redeem(self, payment_id: str, claimed_user_id: str, allow_unregistered: bool = False) -> PendingPayment:
        """
        Consume a pending payment.

        Succeeds only if the payment exists and belongs to claimed_user_id;
        otherwise raises InvalidPayment and changes nothing. With
        allow_unregistered, an id never seen before is accepted once.
        """

    @abstractmethod
    def __len__(self) -> int:
        pass


class InMemoryPaymentRegistry(PendingPaymentRegistry):

    def __init__(self):
        self._lock = threading.Lock()
        self._pending: Dict[str, str] = {}
        self._spent: Set[str] = set()

    def init(self) -> None:
        with self._lock:
            self._pending = {}
            self._spent = set()

    def clear(self) -> None:
        with self._lock:
            self._pending.clear()
            self._spent.clear()

    def register(self, user_id: str) -> str:
        user_id = clean_id(user_id)
        payment_id = str(uuid.uuid4())
        with self._lock:
            self._pending[payment_id] = user_id
        logger.info("Registered pending payment %s for user %s", short(payment_id), user_id)
        return payment_id

    def redeem(self, payment_id: str, claimed_user_id: str, allow_unregistered: bool = False) -> PendingPayment:
        payment_id = clean_id(payment_id)
        claimed_user_id = clean_id(claimed_user_id)

        with self._lock:
            if payment_id in self._spent:
                logger.warning("Payment %s already redeemed", short(payment_id))
                raise InvalidPayment()

            owner: Optional[str] = self._pending.get(payment_id)
            if owner is None and not allow_unregistered:
                logger.warning("Unknown payment %s for user %s", short(payment_id), claimed_user_id)
                raise InvalidPayment()
            if owner is not None and owner != claimed_user_id:
                logger.warning(
                    "Payment %s belongs to user %s, claimed by %s",
                    short(payment_id), owner, claimed_user_id,
                )
                raise InvalidPayment()

            self._pending.pop(payment_id, None)
            self._spent.add(payment_id)

        return PendingPayment(payment_id=payment_id, user_id=claimed_user_id)

    def __len__(self) -> int:
        with self._lock:
            return len(self._pending)


# --- Process-wide instances (FastAPI dependencies) ---

token_store = InMemoryTokenStore()
payment_registry = InMemoryPaymentRegistry()


def get_token_store() -> TokenStore:
    return token_store


def get_payment_registry() -> PendingPaymentRegistry:
    return payment_registry
