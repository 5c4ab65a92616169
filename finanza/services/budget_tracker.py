"""
Budget Tracking Service

Resolves the limit that applies to each category in a month and measures
spending against it. A month without its own budget row reuses the most
recent earlier row for that category (carry-forward); rows for later months
are never consulted.
"""
from decimal import Decimal
from typing import Dict, Iterable, List, Optional, Tuple

from finanza.db.core import TransactionType
from finanza.models.dashboard import BudgetRow, BudgetState, BudgetStatus, CurrencyBudgetTotal
from finanza.services.currency import convert, parse_currency, to_decimal, validate_rate
from finanza.services.errors import InvalidInputError
from finanza.services.ledger import transaction_amount, transaction_kind
from finanza.services.temporal import in_month, validate_month

ZERO = Decimal('0')
HUNDRED = Decimal('100')
WARNING_THRESHOLD = Decimal('80')


def _category_key(category: Optional[str]) -> str:
    return (category or "").strip()


def _recency_key(budget):
    # Latest month first; among duplicate rows for one month the newest id wins
    return budget.month, getattr(budget, "id", None) or 0


def resolve_effective_budget(budgets: Iterable, category: str, target_month: str):
    """
    Return the budget row that governs `category` in `target_month`, or None.

    The exact month wins; otherwise the nearest earlier month is carried
    forward. Future months are ignored even when closer.
    """
    validate_month(target_month)
    key = _category_key(category)
    candidates = [
        budget for budget in budgets
        if _category_key(budget.category) == key and budget.month <= target_month
    ]
    if not candidates:
        return None
    return max(candidates, key=_recency_key)


def effective_budgets(budgets: Iterable, target_month: str) -> List:
    """Effective budget per category for the month, ordered by category."""
    validate_month(target_month)
    resolved: Dict[str, object] = {}
    for budget in budgets:
        if budget.month > target_month:
            continue
        key = _category_key(budget.category)
        current = resolved.get(key)
        if current is None or _recency_key(budget) > _recency_key(current):
            resolved[key] = budget
    return [resolved[key] for key in sorted(resolved)]


def spent_against(budget, transactions: Iterable, target_month: str, rate) -> Decimal:
    """Expenses in the month for the budget's category, in the budget's own currency."""
    validate_month(target_month)
    rate = validate_rate(rate)
    budget_currency = parse_currency(budget.currency)
    key = _category_key(budget.category)

    spent = ZERO
    for transaction in transactions:
        if _category_key(transaction.category) != key:
            continue
        if not in_month(transaction, target_month):
            continue
        if transaction_kind(transaction) != TransactionType.EXPENSE:
            continue
        spent += convert(transaction_amount(transaction), transaction.currency, budget_currency, rate)
    return spent


def capped_percentage(spent: Decimal, limit: Decimal) -> Decimal:
    """A zero limit reads 100 once anything is spent, 0 otherwise."""
    if limit > 0:
        return min(spent / limit * HUNDRED, HUNDRED)
    return HUNDRED if spent > 0 else ZERO


def budget_status(budget, spent) -> BudgetStatus:
    """
    Percentage consumed (capped at 100) and the resulting state.

    `exceeded` compares spent to the limit directly so that spending exactly
    the limit stays a `warning`.
    """
    limit = to_decimal(budget.limit, field="limit")
    spent = to_decimal(spent, field="spent")
    if limit < 0:
        raise InvalidInputError(f"Budget limit cannot be negative, got {limit}")

    percentage = capped_percentage(spent, limit)
    if spent > limit:
        state = BudgetState.EXCEEDED
    elif percentage >= WARNING_THRESHOLD:
        state = BudgetState.WARNING
    else:
        state = BudgetState.OK

    return BudgetStatus(percentage=percentage, state=state)


def track_budgets(budgets: Iterable, transactions: Iterable, target_month: str, rate) -> List[BudgetRow]:
    """One row per category with an effective budget in the month."""
    validate_month(target_month)
    rate = validate_rate(rate)
    transactions = list(transactions)

    rows = []
    for budget in effective_budgets(budgets, target_month):
        limit = to_decimal(budget.limit, field="limit")
        spent = spent_against(budget, transactions, target_month, rate)
        status = budget_status(budget, spent)
        rows.append(BudgetRow(
            budget_id=getattr(budget, "id", None),
            category=_category_key(budget.category),
            month=target_month,
            source_month=budget.month,
            carried_forward=budget.month != target_month,
            currency=parse_currency(budget.currency),
            limit=limit,
            spent=spent,
            remaining=max(ZERO, limit - spent),
            percentage=status.percentage,
            state=status.state,
        ))
    return rows


def budget_summary(rows: Iterable[BudgetRow]) -> List[CurrencyBudgetTotal]:
    """Limit and spending totals per declared currency."""
    totals: Dict[str, Tuple[Decimal, Decimal]] = {}
    for row in rows:
        limit_total, spent_total = totals.get(row.currency, (ZERO, ZERO))
        totals[row.currency] = (limit_total + row.limit, spent_total + row.spent)

    summary = []
    for currency in sorted(totals):
        total_limit, total_spent = totals[currency]
        summary.append(CurrencyBudgetTotal(
            currency=currency,
            total_limit=total_limit,
            total_spent=total_spent,
            percentage=capped_percentage(total_spent, total_limit),
        ))
    return summary
