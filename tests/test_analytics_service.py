from datetime import date

import pytest

from analytics.analytics_service import AnalyticsService
from transactions.transaction_model import Transaction


def txn(id, type, amount, category, day, description="t"):
    return Transaction(id=id, user_id="u1", type=type, amount=amount, description=description, category=category, date=day)


@pytest.fixture
def service():
    return AnalyticsService(savings_goal=5000.0)


@pytest.mark.asyncio
async def test_dashboard_stats_for_january(service):
    transactions = [
        txn("1", "expense", "50", "Food", "2024-01-05"),
        txn("2", "income", "2000", "Salary", "2024-01-10"),
    ]

    stats = await service.dashboard_stats(transactions, today=date(2024, 1, 20))

    assert stats.monthly_income == 2000.0
    assert stats.monthly_expenses == 50.0
    assert stats.total_balance == 1950.0
    assert stats.savings == 1950.0
    assert stats.savings_goal == 5000.0
    assert stats.savings_percentage == pytest.approx(39.0)


@pytest.mark.asyncio
async def test_monthly_sums_ignore_other_months_but_balance_does_not(service):
    transactions = [
        txn("1", "income", "1000", "Salary", "2023-12-31"),
        txn("2", "expense", "200", "Rent", "2024-01-01"),
        txn("3", "expense", "300", "Rent", "2024-02-01"),
        txn("4", "income", "100", "Gift", "2023-01-15"),
    ]

    stats = await service.dashboard_stats(transactions, today=date(2024, 1, 15))

    assert stats.monthly_income == 0.0
    assert stats.monthly_expenses == 200.0
    assert stats.total_balance == 600.0
    assert stats.savings == 0.0
    assert stats.savings_percentage == 0.0


@pytest.mark.asyncio
async def test_savings_percentage_is_clamped_to_100(service):
    transactions = [txn("1", "income", "12000", "Salary", "2024-05-02")]

    stats = await service.dashboard_stats(transactions, today=date(2024, 5, 30))

    assert stats.savings == 12000.0
    assert stats.savings_percentage == 100.0


@pytest.mark.asyncio
async def test_dashboard_stats_with_no_transactions(service):
    stats = await service.dashboard_stats([], today=date(2024, 5, 30))

    assert stats.total_balance == 0.0
    assert stats.monthly_income == 0.0
    assert stats.monthly_expenses == 0.0
    assert stats.savings_percentage == 0.0


@pytest.mark.asyncio
async def test_zero_goal_reports_zero_percent():
    service = AnalyticsService(savings_goal=0.0)
    stats = await service.dashboard_stats([txn("1", "income", "10", "Salary", "2024-05-02")], today=date(2024, 5, 3))
    assert stats.savings_percentage == 0.0


@pytest.mark.asyncio
async def test_datetime_strings_count_toward_their_calendar_day(service):
    transactions = [txn("1", "expense", "20", "Food", "2024-01-31T23:30:00")]

    stats = await service.dashboard_stats(transactions, today=date(2024, 1, 1))
    assert stats.monthly_expenses == 20.0

    grouped = await service.expenses_by_category(transactions, "2024-01-31", "2024-01-31")
    assert [(g.category, g.count) for g in grouped] == [("Food", 1)]


@pytest.mark.asyncio
async def test_expenses_by_category_window_is_inclusive(service):
    transactions = [
        txn("1", "expense", "10", "Food", "2024-03-01"),
        txn("2", "expense", "15", "Food", "2024-03-31"),
        txn("3", "expense", "99", "Food", "2024-02-29"),
        txn("4", "expense", "99", "Food", "2024-04-01"),
        txn("5", "income", "500", "Food", "2024-03-10"),
    ]

    grouped = await service.expenses_by_category(transactions, "2024-03-01", "2024-03-31")

    assert len(grouped) == 1
    assert grouped[0].category == "Food"
    assert grouped[0].total == pytest.approx(25.0)
    assert grouped[0].count == 2


@pytest.mark.asyncio
async def test_expenses_by_category_orders_by_total(service):
    transactions = [
        txn("1", "expense", "5", "Coffee", "2024-03-02"),
        txn("2", "expense", "300", "Rent", "2024-03-01"),
        txn("3", "expense", "5", "Coffee", "2024-03-03"),
    ]

    grouped = await service.expenses_by_category(transactions, "2024-03-01", "2024-03-31")

    assert [(g.category, g.total, g.count) for g in grouped] == [("Rent", 300.0, 1), ("Coffee", 10.0, 2)]


@pytest.mark.asyncio
async def test_expenses_by_category_rejects_bad_dates(service):
    with pytest.raises(ValueError):
        await service.expenses_by_category([], "March", "2024-03-31")


@pytest.mark.asyncio
async def test_dashboard_stats_serializes_with_camel_case_keys(service):
    stats = await service.dashboard_stats([], today=date(2024, 1, 1))
    assert set(stats.model_dump(by_alias=True)) == {
        "totalBalance", "monthlyIncome", "monthlyExpenses", "savings", "savingsGoal", "savingsPercentage",
    }


@pytest.mark.asyncio
async def test_dates_outside_nanosecond_range_are_supported(service):
    transactions = [
        txn("1", "expense", "40", "Food", "2300-01-01"),
        txn("2", "income", "100", "Salary", "1600-06-01"),
        txn("3", "expense", "10", "Food", "2024-01-05"),
    ]

    stats = await service.dashboard_stats(transactions, today=date(2300, 1, 15))
    assert stats.monthly_expenses == 40.0
    assert stats.total_balance == 50.0

    grouped = await service.expenses_by_category(transactions, "2300-01-01", "2300-01-31")
    assert [(g.category, g.total) for g in grouped] == [("Food", 40.0)]

    monthly = await service.monthly_expenses(transactions, 2300, 1)
    assert [t.id for t in monthly] == ["1"]


@pytest.mark.asyncio
async def test_savings_percentage_is_rounded():
    transactions = [txn("1", "income", "1000", "Salary", "2024-01-02")]

    stats = await AnalyticsService(savings_goal=3000.0).dashboard_stats(transactions, today=date(2024, 1, 20))
    assert stats.savings_percentage == 33.33


@pytest.mark.asyncio
@pytest.mark.parametrize("day", ["20240105", "2024-W01-1"])
async def test_non_calendar_iso_forms_are_rejected(service, day):
    with pytest.raises(ValueError):
        await service.expenses_by_category([], day, "2024-03-31")
