"""
Access guard. Checks a presented access token against the token store.

Tokens arrive either in the Authorization header (raw, or as "Bearer <token>")
or as a "token" field in the JSON body. The guard runs before any calculation
input is looked at.
"""

import logging
from dataclasses import dataclass
from datetime import timedelta
from typing import Optional

from fastapi import Depends

from .errors import ExpiredToken, MissingToken
from .stores import TokenStore, get_token_store, short

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AccessGrant:
    token: str
    remaining: timedelta


def extract_token(authorization: Optional[str] = None, body: Optional[dict] = None) -> Optional[str]:
    """Pick the presented token: header first, then the body's "token" field."""
    if authorization and authorization.strip():
        value = authorization.strip()
        if value.lower().startswith("bearer "):
            value = value[7:].strip()
        return value or None
    if isinstance(body, dict):
        token = body.get("token")
        if isinstance(token, str) and token.strip():
            return token.strip()
    return None


class AccessGuard:
    """Authorizes requests holding a live access token."""

    def __init__(self, store: TokenStore):
        self.store = store

    def authorize(self, token: Optional[str]) -> AccessGrant:
        """
        Raises MissingToken, UnknownToken or ExpiredToken. An expired token is
        evicted by the store as part of the check.
        """
        if not token:
            raise MissingToken()
        try:
            remaining = self.store.validate(token)
        except ExpiredToken:
            logger.info("Rejected expired token %s", short(token))
            raise
        return AccessGrant(token=token, remaining=remaining)


def get_access_guard(store: TokenStore = Depends(get_token_store)) -> AccessGuard:
    """FastAPI dependency. Guard bound to the current token store."""
    return AccessGuard(store)
