"""
Normalization of extracted values into a ledger-ready transaction.
Handles date fallback, minor-unit amounts, notes and idempotency keys.
"""
import hashlib
from datetime import datetime
from decimal import Decimal, ROUND_HALF_UP
from typing import Optional, Union
from zoneinfo import ZoneInfo

from core.logger import setup_logger
from core.schema import Account, Category, ExtractedTransaction, ResolvedTransaction

logger = setup_logger(__name__)

IDEMPOTENCY_KEY_LENGTH = 32


def today_iso(tz: str, now: Optional[datetime] = None) -> str:
    """
    Current calendar date in the given time zone.

    Args:
        tz: IANA time zone name
        now: Optional aware datetime to use instead of the clock

    Returns:
        Date as YYYY-MM-DD
    """
    moment = now or datetime.now(ZoneInfo(tz))
    return moment.astimezone(ZoneInfo(tz)).date().isoformat()


def resolve_date(extracted_date: Optional[str], tz: str, now: Optional[datetime] = None) -> str:
    """Use the extracted date when it looks like a full calendar date, else today."""
    if extracted_date and len(extracted_date) >= 10:
        return extracted_date
    return today_iso(tz, now)


def to_minor_units(amount: Union[int, float]) -> int:
    """
    Convert a currency amount to integer minor units.
    Ties round half away from zero (19.995 -> 2000, -19.995 -> -2000).

    Args:
        amount: Amount in major units

    Returns:
        Amount in minor units
    """
    # repr() keeps the shortest decimal form, so 19.995 is not seen as 19.99499...
    scaled = Decimal(repr(amount)) * 100
    return int(scaled.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def build_notes(prefix: str, description: Optional[str]) -> str:
    return f"{prefix}: {description or ''}".strip()


def idempotency_key(sms: str, final_date: str, amount_minor_units: int, description: Optional[str]) -> str:
    """
    Deterministic deduplication key for a logical transaction.

    Args:
        sms: Raw SMS text
        final_date: Resolved calendar date
        amount_minor_units: Amount in minor units
        description: Extracted description (None treated as empty)

    Returns:
        32-character lowercase hex digest
    """
    material = f"{sms}||{final_date}||{amount_minor_units}||{description or ''}"
    return hashlib.sha256(material.encode("utf-8")).hexdigest()[:IDEMPOTENCY_KEY_LENGTH]


def build_transaction(
    sms: str,
    extracted: ExtractedTransaction,
    account: Account,
    category: Optional[Category],
    notes_prefix: str,
    tz: str,
    now: Optional[datetime] = None,
) -> ResolvedTransaction:
    """
    Build the ledger-ready transaction for a validated extraction.

    Args:
        sms: Raw SMS text
        extracted: Validated model output with a non-null amount
        account: Resolved catalog account
        category: Resolved catalog category or None
        notes_prefix: Prefix for the notes field
        tz: Time zone for the date fallback
        now: Optional clock override

    Returns:
        ResolvedTransaction
    """
    if extracted.amount is None:
        raise ValueError("Cannot build a transaction without an amount")

    final_date = resolve_date(extracted.date, tz, now)
    amount_minor = to_minor_units(extracted.amount)
    key = idempotency_key(sms, final_date, amount_minor, extracted.description)

    tx = ResolvedTransaction(
        account_id=account.id,
        date=final_date,
        amount_minor_units=amount_minor,
        payee_name=extracted.description or None,
        category_id=category.id if category else None,
        notes=build_notes(notes_prefix, extracted.description),
        idempotency_key=key,
        cleared=False,
    )
    logger.debug(f"Built transaction {key} on {final_date} for {amount_minor} minor units")
    return tx
