"""
Dashboard Service

Loads a user's accounts, transactions, investments and budgets from the
store and hands the snapshots to the ledger and budget engines. Every call
reloads everything, so the latest committed state always wins.
"""
from typing import Optional

from sqlalchemy.orm import Session

from finanza.config import get_exchange_rate
from finanza.crud import crud_account, crud_budget, crud_investment, crud_transaction
from finanza.db.core import PRIMARY_CURRENCY
from finanza.logging_config import get_logger
from finanza.models.dashboard import BudgetTracking, DashboardResponse
from finanza.services import budget_tracker, ledger
from finanza.services.currency import validate_rate
from finanza.services.temporal import current_month, shift_month, validate_month

logger = get_logger(__name__)


def _resolve(month: Optional[str], rate):
    month = validate_month(month) if month else current_month()
    rate = validate_rate(rate) if rate is not None else get_exchange_rate()
    return month, rate


def build_budget_tracking(db: Session, user_id: int, month: Optional[str] = None, rate=None) -> BudgetTracking:
    month, rate = _resolve(month, rate)

    budgets = crud_budget.read_db_budgets(db, user_id)
    transactions = crud_transaction.read_db_transactions(db, user_id, month=month)

    rows = budget_tracker.track_budgets(budgets, transactions, month, rate)
    return BudgetTracking(
        month=month,
        exchange_rate=rate,
        rows=rows,
        summary=budget_tracker.budget_summary(rows),
    )


def build_dashboard(db: Session, user_id: int, month: Optional[str] = None, rate=None) -> DashboardResponse:
    """Assemble the full dashboard view-model for one month."""
    month, rate = _resolve(month, rate)

    accounts = crud_account.read_db_accounts(db, user_id)
    investments = crud_investment.read_db_investments(db, user_id)
    budgets = crud_budget.read_db_budgets(db, user_id)
    transactions = crud_transaction.read_db_transactions(db, user_id, month=month)

    logger.debug(
        f"Building dashboard for user {user_id} in {month}: {len(accounts)} accounts, "
        f"{len(transactions)} transactions, {len(investments)} investments, {len(budgets)} budgets"
    )

    mix = ledger.composition(accounts, investments, rate)
    return DashboardResponse(
        month=month,
        previous_month=shift_month(month, -1),
        next_month=shift_month(month, 1),
        exchange_rate=rate,
        primary_currency=PRIMARY_CURRENCY,
        total_account_value=mix.cash,
        total_investment_value=mix.invested,
        net_worth=mix.total,
        monthly_flow=ledger.monthly_flow(transactions, month, rate),
        composition=mix,
        portfolio=ledger.portfolio_summary(investments),
        budgets=budget_tracker.track_budgets(budgets, transactions, month, rate),
    )
