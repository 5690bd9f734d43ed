"""
Monthly budget summary.
Pure arithmetic over the ledger's month aggregate.
"""
import asyncio
import calendar
from datetime import date, datetime
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Callable, Dict, Optional
from zoneinfo import ZoneInfo

from core.config import Settings, get_settings
from core.logger import setup_logger
from ledger.catalog import CatalogRepository
from ledger.store import LedgerStore

logger = setup_logger(__name__)


def _round_half_up(value: Decimal) -> int:
    return int(value.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def summarize_month(data: Dict[str, Any], today: date) -> Dict[str, Any]:
    """
    Summarize a month aggregate (minor units) as of the given day.

    Args:
        data: Ledger month aggregate with totalIncome, totalSpent, totalBalance
        today: Current local date

    Returns:
        Summary dictionary in major units
    """
    total_budgeted = data.get("totalIncome") or 0
    total_spent = data.get("totalSpent") or 0
    remaining = data.get("totalBalance") or 0

    total_days = calendar.monthrange(today.year, today.month)[1]
    days_left = total_days - today.day
    days_passed = total_days - days_left

    per_day_spent = _round_half_up(Decimal(abs(total_spent)) / days_passed) if days_passed > 0 else 0

    return {
        "month": f"{today.year:04d}-{today.month:02d}",
        "monthName": calendar.month_name[today.month],
        "totalBudgeted": total_budgeted / 100,
        "totalSpent": abs(total_spent) / 100,
        "remaining": abs(remaining) / 100,
        "isOverspent": remaining < 0,
        "daysLeft": days_left,
        "daysPassed": days_passed,
        "perDaySpent": per_day_spent / 100,
    }


class BudgetService:
    """Service for the current month's budget summary."""

    def __init__(
        self,
        catalog: CatalogRepository,
        store: LedgerStore,
        settings: Optional[Settings] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self.settings = settings or get_settings()
        self.catalog = catalog
        self.store = store
        self.clock = clock

    def today(self) -> date:
        tz = ZoneInfo(self.settings.timezone)
        now = self.clock() if self.clock else datetime.now(tz)
        return now.astimezone(tz).date()

    async def current_month(self) -> Dict[str, Any]:
        """Summary for the current month in the configured time zone."""
        # Loading the catalog also guarantees the store is initialized
        await self.catalog.get()

        today = self.today()
        month = f"{today.year:04d}-{today.month:02d}"
        loop = asyncio.get_event_loop()
        data = await loop.run_in_executor(None, self.store.get_budget_month, month)
        logger.debug(f"Fetched budget month {month}")
        return summarize_month(data or {}, today)
