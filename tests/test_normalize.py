"""
Unit tests for ledger-ready transaction building.
"""
from datetime import datetime, timezone

import pytest

from core.normalize import (
    build_notes,
    build_transaction,
    idempotency_key,
    resolve_date,
    to_minor_units,
    today_iso,
)
from core.schema import Account, Category, validate_extraction


ACCOUNT = Account(id="a1", name="HSBC ****0001")
# 2024-05-31 20:00 UTC is already 2024-06-01 in Asia/Kolkata
LATE_UTC = datetime(2024, 5, 31, 20, 0, tzinfo=timezone.utc)


def extraction(**overrides):
    payload = {
        "amount": -500,
        "description": "Amazon",
        "date": "2024-05-01",
        "account": "HSBC ****0001",
        "category": "Shopping",
    }
    payload.update(overrides)
    return validate_extraction(payload)


@pytest.mark.parametrize("amount,expected", [
    (-500, -50000),
    (100, 10000),
    (12.34, 1234),
    (19.995, 2000),
    (-19.995, -2000),
    (0.1, 10),
    (1.005, 101),
])
def test_to_minor_units(amount, expected):
    """Test rounding to integer minor units, ties away from zero."""
    assert to_minor_units(amount) == expected


def test_today_iso_uses_timezone():
    """Test the date is taken in the configured zone."""
    assert today_iso("Asia/Kolkata", LATE_UTC) == "2024-06-01"
    assert today_iso("UTC", LATE_UTC) == "2024-05-31"


def test_resolve_date_keeps_full_date():
    """Test a full extracted date is used as-is."""
    assert resolve_date("2024-05-01", "UTC", LATE_UTC) == "2024-05-01"


@pytest.mark.parametrize("value", [None, "", "01-05", "2024-5-1"])
def test_resolve_date_falls_back_to_today(value):
    """Test short or missing dates fall back to today."""
    assert resolve_date(value, "Asia/Kolkata", LATE_UTC) == "2024-06-01"


def test_build_notes():
    """Test notes prefix and trimming."""
    assert build_notes("SMS", "Amazon") == "SMS: Amazon"
    assert build_notes("SMS", None) == "SMS:"


def test_idempotency_key_deterministic():
    """Test identical inputs always give the identical key."""
    first = idempotency_key("sms text", "2024-05-01", -50000, "Amazon")
    second = idempotency_key("sms text", "2024-05-01", -50000, "Amazon")
    assert first == second
    assert len(first) == 32
    assert all(c in "0123456789abcdef" for c in first)


@pytest.mark.parametrize("changed", [
    ("other sms", "2024-05-01", -50000, "Amazon"),
    ("sms text", "2024-05-02", -50000, "Amazon"),
    ("sms text", "2024-05-01", -50001, "Amazon"),
    ("sms text", "2024-05-01", -50000, "Flipkart"),
])
def test_idempotency_key_changes_with_any_input(changed):
    """Test every input participates in the key."""
    assert idempotency_key(*changed) != idempotency_key("sms text", "2024-05-01", -50000, "Amazon")


def test_idempotency_key_null_description_is_empty():
    """Test None description hashes like an empty string."""
    assert idempotency_key("s", "2024-05-01", 1, None) == idempotency_key("s", "2024-05-01", 1, "")


def test_build_transaction():
    """Test the full ledger-ready transaction."""
    tx = build_transaction(
        "Rs.500 spent on Card 0001 at Amazon",
        extraction(),
        ACCOUNT,
        Category(id="c1", name="Shopping"),
        notes_prefix="SMS",
        tz="Asia/Kolkata",
        now=LATE_UTC,
    )
    assert tx.account_id == "a1"
    assert tx.date == "2024-05-01"
    assert tx.amount_minor_units == -50000
    assert tx.payee_name == "Amazon"
    assert tx.category_id == "c1"
    assert tx.notes == "SMS: Amazon"
    assert tx.cleared is False
    assert tx.idempotency_key == idempotency_key(
        "Rs.500 spent on Card 0001 at Amazon", "2024-05-01", -50000, "Amazon"
    )


def test_build_transaction_without_category_or_date():
    """Test null category and missing date."""
    tx = build_transaction(
        "Rs.500 spent",
        extraction(date=None, description=None, category=None),
        ACCOUNT,
        None,
        notes_prefix="SMS",
        tz="Asia/Kolkata",
        now=LATE_UTC,
    )
    assert tx.category_id is None
    assert tx.payee_name is None
    assert tx.date == "2024-06-01"
    assert tx.notes == "SMS:"


def test_build_transaction_requires_amount():
    """Test the builder refuses a non-transaction."""
    with pytest.raises(ValueError):
        build_transaction(
            "OTP 1234", extraction(amount=None), ACCOUNT, None, notes_prefix="SMS", tz="UTC"
        )
