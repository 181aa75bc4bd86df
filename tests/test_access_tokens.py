"""
Access lifecycle tests: token store, pending payments, access guard.

Tests:
1-6.   Token store (issue, validate, expiry boundary, eviction, lifecycle)
7-12.  Pending payment registry (register, redeem once, wrong user, first sight)
13-17. Access guard (missing, unknown, expired, authorized) + token extraction
18-22. Unencodable ids, concurrent redemption and expiry
"""

import threading
from concurrent.futures import ThreadPoolExecutor
from datetime import timedelta

import pytest

from smeta.auth import AccessGuard, extract_token
from smeta.errors import ExpiredToken, InvalidPayment, MissingToken, UnknownToken
from smeta.stores import InMemoryTokenStore, hash_token


# ============================================================
# Token store
# ============================================================

def test_issue_returns_unique_tokens_with_expiry(token_store, clock):
    """Each issue mints a fresh token expiring now + ttl."""
    first = token_store.issue(timedelta(hours=24))
    second = token_store.issue(timedelta(hours=24))
    assert first.token != second.token
    assert first.expires_at == clock.now + timedelta(hours=24)
    assert len(token_store) == 2


def test_validate_returns_remaining_lifetime(token_store, clock):
    access = token_store.issue(timedelta(days=30))
    clock.advance(days=1)
    assert token_store.validate(access.token) == timedelta(days=29)


def test_validate_unknown_token(token_store):
    with pytest.raises(UnknownToken):
        token_store.validate("never-issued")


def test_token_valid_just_before_expiry_and_expired_at_boundary(token_store, clock):
    """Valid at issue+T-ε, expired at exactly issue+T, and gone afterwards."""
    access = token_store.issue(timedelta(hours=24))

    clock.advance(hours=23, minutes=59, seconds=59)
    assert token_store.validate(access.token) == timedelta(seconds=1)

    clock.advance(seconds=1)
    with pytest.raises(ExpiredToken):
        token_store.validate(access.token)
    assert len(token_store) == 0

    # Second look: the entry was evicted, so it is simply unknown now
    with pytest.raises(UnknownToken):
        token_store.validate(access.token)


def test_store_keeps_only_token_hashes(token_store):
    access = token_store.issue(timedelta(hours=1))
    assert access.token not in token_store._expiry
    assert hash_token(access.token) in token_store._expiry


def test_clear_and_non_positive_ttl(clock):
    store = InMemoryTokenStore(clock=clock)
    store.init()
    access = store.issue(timedelta(minutes=5))
    store.clear()
    with pytest.raises(UnknownToken):
        store.validate(access.token)
    with pytest.raises(ValueError):
        store.issue(timedelta(0))


# ============================================================
# Pending payment registry
# ============================================================

def test_register_creates_pending_payment(registry):
    payment_id = registry.register("42")
    other_id = registry.register("42")
    assert payment_id != other_id
    assert len(registry) == 2


def test_redeem_once(registry):
    """A payment id redeems once; the second attempt fails even with the right user."""
    payment_id = registry.register("42")
    payment = registry.redeem(payment_id, "42")
    assert payment.user_id == "42"
    assert len(registry) == 0

    with pytest.raises(InvalidPayment):
        registry.redeem(payment_id, "42")


def test_redeem_wrong_user_leaves_payment_pending(registry):
    payment_id = registry.register("42")
    with pytest.raises(InvalidPayment):
        registry.redeem(payment_id, "43")
    assert len(registry) == 1
    # Rightful owner can still redeem
    assert registry.redeem(payment_id, "42").payment_id == payment_id


def test_redeem_unknown_or_blank(registry):
    with pytest.raises(InvalidPayment):
        registry.redeem("no-such-payment", "42")
    with pytest.raises(InvalidPayment):
        registry.redeem("", "42")
    with pytest.raises(InvalidPayment):
        registry.redeem("abc", None)
    with pytest.raises(InvalidPayment):
        registry.register("   ")


def test_first_sight_accepts_unregistered_once(registry):
    payment = registry.redeem("external-payment-1", "7", allow_unregistered=True)
    assert payment.user_id == "7"
    with pytest.raises(InvalidPayment):
        registry.redeem("external-payment-1", "7", allow_unregistered=True)


def test_first_sight_still_checks_owner_of_registered_payment(registry):
    payment_id = registry.register("42")
    with pytest.raises(InvalidPayment):
        registry.redeem(payment_id, "99", allow_unregistered=True)
    assert registry.redeem(payment_id, "42", allow_unregistered=True).user_id == "42"


# ============================================================
# Access guard
# ============================================================

def test_guard_missing_token(token_store):
    guard = AccessGuard(token_store)
    with pytest.raises(MissingToken):
        guard.authorize(None)
    with pytest.raises(MissingToken):
        guard.authorize("")


def test_guard_unknown_token(token_store):
    with pytest.raises(UnknownToken):
        AccessGuard(token_store).authorize("forged")


def test_guard_expired_token_is_evicted(token_store, clock):
    guard = AccessGuard(token_store)
    access = token_store.issue(timedelta(hours=24))
    clock.advance(hours=25)
    with pytest.raises(ExpiredToken):
        guard.authorize(access.token)
    assert len(token_store) == 0


def test_guard_authorizes_live_token(token_store, clock):
    access = token_store.issue(timedelta(days=30))
    clock.advance(days=1)
    grant = AccessGuard(token_store).authorize(access.token)
    assert grant.token == access.token
    assert grant.remaining == timedelta(days=29)


def test_extract_token_sources():
    """Header wins over body; "Bearer " prefix is optional."""
    assert extract_token("abc") == "abc"
    assert extract_token("Bearer abc") == "abc"
    assert extract_token("  bearer   abc ") == "abc"
    assert extract_token(None, {"token": "xyz"}) == "xyz"
    assert extract_token("abc", {"token": "xyz"}) == "abc"
    assert extract_token("", {"token": "  "}) is None
    assert extract_token(None, {"token": 123}) is None
    assert extract_token(None, None) is None


# ============================================================
# Opaque ids and concurrent access
# ============================================================

def test_unencodable_token_is_unknown(token_store):
    """A token with a lone surrogate is just a token nobody issued."""
    with pytest.raises(UnknownToken):
        AccessGuard(token_store).authorize("\ud800")


def test_unencodable_ids_are_invalid_payments(registry):
    with pytest.raises(InvalidPayment):
        registry.register("\ud800")
    payment_id = registry.register("42")
    with pytest.raises(InvalidPayment):
        registry.redeem(payment_id, "\udfff")
    with pytest.raises(InvalidPayment):
        registry.redeem("\ud800", "42", allow_unregistered=True)
    assert len(registry) == 1


def _run_concurrently(fn, workers=16):
    """Call fn from many threads at once; return ("ok", value) or ("error", exc) per call."""
    barrier = threading.Barrier(workers)

    def _call(_):
        barrier.wait()
        try:
            return ("ok", fn())
        except Exception as e:
            return ("error", e)

    with ThreadPoolExecutor(max_workers=workers) as pool:
        return list(pool.map(_call, range(workers)))


def test_concurrent_redeem_succeeds_once(registry):
    payment_id = registry.register("42")
    outcomes = _run_concurrently(lambda: registry.redeem(payment_id, "42"))

    successes = [value for kind, value in outcomes if kind == "ok"]
    failures = [value for kind, value in outcomes if kind == "error"]
    assert len(successes) == 1
    assert len(failures) == len(outcomes) - 1
    assert all(isinstance(e, InvalidPayment) for e in failures)


def test_concurrent_first_sight_redeem_succeeds_once(registry):
    outcomes = _run_concurrently(
        lambda: registry.redeem("provider-payment-9", "7", allow_unregistered=True))
    assert sum(1 for kind, _ in outcomes if kind == "ok") == 1


def test_concurrent_validate_evicts_expired_token_once(token_store, clock):
    access = token_store.issue(timedelta(hours=1))
    clock.advance(hours=2)
    outcomes = _run_concurrently(lambda: token_store.validate(access.token))

    errors = [value for kind, value in outcomes if kind == "error"]
    assert len(errors) == len(outcomes)
    assert sum(1 for e in errors if isinstance(e, ExpiredToken)) == 1
    assert sum(1 for e in errors if isinstance(e, UnknownToken)) == len(outcomes) - 1
    assert len(token_store) == 0
