from datetime import date
from decimal import Decimal
from types import SimpleNamespace

import pytest

from finanza.models.dashboard import BudgetState
from finanza.services import budget_tracker
from finanza.services.errors import InvalidInputError

RATE = Decimal("40")


def budget(id, category, month, limit, currency="USD"):
    return SimpleNamespace(id=id, category=category, month=month, limit=Decimal(limit), currency=currency)


def expense(amount, category="Food", day=date(2024, 3, 5), currency="USD", kind="EXPENSE"):
    return SimpleNamespace(
        id=None,
        transaction_type=kind,
        amount=Decimal(amount),
        currency=currency,
        transaction_date=day,
        category=category,
    )


def test_exact_month_wins():
    budgets = [budget(1, "Food", "2024-01", "100"), budget(2, "Food", "2024-03", "300")]
    assert budget_tracker.resolve_effective_budget(budgets, "Food", "2024-03").id == 2


def test_latest_past_month_carries_forward():
    budgets = [budget(1, "Food", "2023-11", "100"), budget(2, "Food", "2024-01", "200")]
    assert budget_tracker.resolve_effective_budget(budgets, "Food", "2024-04").id == 2


def test_future_months_are_never_used():
    budgets = [budget(1, "Food", "2024-05", "100")]
    assert budget_tracker.resolve_effective_budget(budgets, "Food", "2024-04") is None


def test_category_without_history_has_no_budget():
    budgets = [budget(1, "Food", "2024-01", "100")]
    assert budget_tracker.resolve_effective_budget(budgets, "Rent", "2024-04") is None


def test_duplicate_rows_collapse_to_highest_id():
    budgets = [budget(9, "Food", "2024-02", "900"), budget(3, "Food", "2024-02", "300")]
    assert budget_tracker.resolve_effective_budget(budgets, "Food", "2024-02").id == 9
    assert [b.id for b in budget_tracker.effective_budgets(budgets, "2024-02")] == [9]


def test_effective_budgets_sorted_by_category():
    budgets = [budget(1, "Rent", "2024-01", "1"), budget(2, "Food", "2024-01", "1"), budget(3, "Auto", "2024-02", "1")]
    assert [b.category for b in budget_tracker.effective_budgets(budgets, "2024-02")] == ["Auto", "Food", "Rent"]


def test_resolution_rejects_bad_month():
    with pytest.raises(InvalidInputError):
        budget_tracker.resolve_effective_budget([], "Food", "March")


@pytest.mark.parametrize("spent, percentage, state", [
    ("0", "0", BudgetState.OK),
    ("79.99", "79.99", BudgetState.OK),
    ("80", "80", BudgetState.WARNING),
    ("100", "100", BudgetState.WARNING),
    ("100.01", "100", BudgetState.EXCEEDED),
    ("250", "100", BudgetState.EXCEEDED),
])
def test_status_thresholds(spent, percentage, state):
    status = budget_tracker.budget_status(budget(1, "Food", "2024-01", "100"), Decimal(spent))
    assert status.percentage == Decimal(percentage)
    assert status.state == state


def test_zero_limit_status():
    zero = budget(1, "Food", "2024-01", "0")
    assert budget_tracker.budget_status(zero, Decimal("0")).percentage == 0
    assert budget_tracker.budget_status(zero, Decimal("0")).state == BudgetState.OK
    spent = budget_tracker.budget_status(zero, Decimal("1"))
    assert spent.percentage == 100
    assert spent.state == BudgetState.EXCEEDED


def test_negative_limit_is_rejected():
    with pytest.raises(InvalidInputError):
        budget_tracker.budget_status(budget(1, "Food", "2024-01", "-1"), Decimal("0"))


def test_spent_converts_into_budget_currency():
    ves_budget = budget(1, "Food", "2024-03", "1000", currency="VES")
    transactions = [expense("10"), expense("200", currency="VES")]
    assert budget_tracker.spent_against(ves_budget, transactions, "2024-03", RATE) == Decimal("600")


def test_spent_only_counts_matching_expenses_in_month():
    food = budget(1, "Food", "2024-03", "100")
    transactions = [
        expense("10"),
        expense("20", category="Rent"),
        expense("30", day=date(2024, 2, 28)),
        expense("40", kind="income"),
        expense("50", kind="transferencia"),
        expense("5", kind="gasto"),
    ]
    assert budget_tracker.spent_against(food, transactions, "2024-03", RATE) == Decimal("15")


def test_track_budgets_rows():
    budgets = [budget(1, "Food", "2024-01", "100"), budget(2, "Rent", "2024-03", "500")]
    transactions = [expense("90"), expense("600", category="Rent")]

    rows = budget_tracker.track_budgets(budgets, transactions, "2024-03", RATE)

    food, rent = rows
    assert food.budget_id == 1
    assert food.carried_forward is True
    assert food.source_month == "2024-01"
    assert food.month == "2024-03"
    assert food.remaining == Decimal("10")
    assert food.state == BudgetState.WARNING
    assert rent.carried_forward is False
    assert rent.remaining == 0
    assert rent.percentage == 100
    assert rent.state == BudgetState.EXCEEDED


def test_summary_groups_by_currency():
    budgets = [
        budget(1, "Food", "2024-03", "100"),
        budget(2, "Rent", "2024-03", "300"),
        budget(3, "Market", "2024-03", "4000", currency="VES"),
    ]
    transactions = [expense("50"), expense("10", category="Rent"), expense("1000", category="Market", currency="VES")]

    rows = budget_tracker.track_budgets(budgets, transactions, "2024-03", RATE)
    summary = {item.currency.value: item for item in budget_tracker.budget_summary(rows)}

    assert summary["USD"].total_limit == Decimal("400")
    assert summary["USD"].total_spent == Decimal("60")
    assert summary["USD"].percentage == Decimal("15")
    assert summary["VES"].total_limit == Decimal("4000")
    assert summary["VES"].percentage == Decimal("25")


def test_summary_of_nothing_is_empty():
    assert budget_tracker.budget_summary([]) == []
