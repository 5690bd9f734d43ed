"""
Unit tests for the monthly budget summary.
"""
import asyncio
from datetime import date, datetime, timezone

from conftest import FakeLedgerStore
from core.config import get_settings
from ledger.catalog import CatalogRepository
from services.budget_service import BudgetService, summarize_month


def test_summarize_month():
    """Test conversion to major units and day arithmetic."""
    summary = summarize_month(
        {"totalIncome": 5000000, "totalSpent": -1234500, "totalBalance": 3765500},
        date(2024, 5, 10),
    )
    assert summary == {
        "month": "2024-05",
        "monthName": "May",
        "totalBudgeted": 50000.0,
        "totalSpent": 12345.0,
        "remaining": 37655.0,
        "isOverspent": False,
        "daysLeft": 21,
        "daysPassed": 10,
        "perDaySpent": 1234.5,
    }


def test_summarize_month_overspent_and_missing_fields():
    """Test negative balance and absent totals."""
    summary = summarize_month({"totalBalance": -2500}, date(2024, 2, 29))
    assert summary["isOverspent"] is True
    assert summary["remaining"] == 25.0
    assert summary["totalBudgeted"] == 0
    assert summary["totalSpent"] == 0
    assert summary["daysLeft"] == 0
    assert summary["daysPassed"] == 29
    assert summary["perDaySpent"] == 0


def test_per_day_rounding():
    """Test per-day spend rounds to whole minor units."""
    summary = summarize_month({"totalSpent": -1000}, date(2024, 5, 3))
    assert summary["perDaySpent"] == 3.33


def test_current_month_uses_timezone():
    """Test the month is taken in the configured time zone."""
    store = FakeLedgerStore()
    store.months["2024-06"] = {"totalIncome": 100, "totalSpent": 0, "totalBalance": 100}
    settings = get_settings()
    catalog = CatalogRepository(
        store,
        data_dir=settings.actual_data_dir,
        server_url=settings.actual_server_url,
        password=settings.actual_password,
        budget_id=settings.actual_budget_id,
    )
    service = BudgetService(
        catalog, store, settings=settings,
        clock=lambda: datetime(2024, 5, 31, 20, 0, tzinfo=timezone.utc),
    )

    summary = asyncio.run(service.current_month())

    assert summary["month"] == "2024-06"
    assert summary["totalBudgeted"] == 1.0
    assert store.init_calls == 1
