"""
Ledger Aggregation Service

Pure aggregations over account, transaction and investment snapshots:
account totals, invested value, net worth, monthly income/expense and the
cash vs invested composition. All totals are expressed in the primary
currency; nothing here rounds or mutates its inputs.
"""
from decimal import Decimal
from typing import Iterable, Optional

from finanza.db.core import TransactionType
from finanza.logging_config import get_logger
from finanza.models.dashboard import Composition, MonthlyFlow, PortfolioSummary
from finanza.services.currency import to_decimal, to_primary, validate_rate
from finanza.services.errors import InvalidInputError
from finanza.services.temporal import in_month, validate_month

logger = get_logger(__name__)

ZERO = Decimal('0')
HUNDRED = Decimal('100')


def transaction_amount(transaction) -> Decimal:
    amount = to_decimal(transaction.amount)
    if amount < 0:
        raise InvalidInputError(
            f"Transaction {getattr(transaction, 'id', None)} has a negative amount; "
            "direction is carried by its type"
        )
    return amount


def transaction_kind(transaction) -> TransactionType:
    try:
        return TransactionType.normalize(transaction.transaction_type)
    except ValueError as e:
        raise InvalidInputError(str(e)) from None


def total_account_value(accounts: Iterable, rate) -> Decimal:
    """Sum of every account balance converted to the primary currency."""
    rate = validate_rate(rate)
    total = ZERO
    for account in accounts:
        total += to_primary(to_decimal(account.balance, field="balance"), account.currency, rate)
    return total


def effective_price(investment) -> Optional[Decimal]:
    """Current price when present and positive, otherwise the buy price."""
    current = investment.current_price
    if current is not None and to_decimal(current, field="current_price") > 0:
        return to_decimal(current, field="current_price")
    if investment.buy_price is not None and to_decimal(investment.buy_price, field="buy_price") > 0:
        return to_decimal(investment.buy_price, field="buy_price")
    return None


def investment_value(investment) -> Decimal:
    quantity = to_decimal(investment.quantity, field="quantity")
    if quantity < 0:
        raise InvalidInputError(f"Investment {getattr(investment, 'id', None)} has a negative quantity")
    if quantity == 0:
        return ZERO

    price = effective_price(investment)
    if price is None:
        logger.warning(
            f"Investment {getattr(investment, 'id', None)} "
            f"({getattr(investment, 'symbol', None) or 'unnamed'}) has quantity {quantity} "
            "but no usable price; counting it as zero"
        )
        return ZERO
    return quantity * price


def total_investment_value(investments: Iterable) -> Decimal:
    return sum((investment_value(investment) for investment in investments), ZERO)


def net_worth(accounts: Iterable, investments: Iterable, rate) -> Decimal:
    return total_account_value(accounts, rate) + total_investment_value(investments)


def monthly_flow(transactions: Iterable, target_month: str, rate) -> MonthlyFlow:
    """
    Income and expense totals for one month, in the primary currency.

    Transfers and adjustments move money between or within accounts and are
    left out of both totals.
    """
    validate_month(target_month)
    rate = validate_rate(rate)

    income = ZERO
    expense = ZERO
    for transaction in transactions:
        if not in_month(transaction, target_month):
            continue
        kind = transaction_kind(transaction)
        if kind == TransactionType.INCOME:
            income += to_primary(transaction_amount(transaction), transaction.currency, rate)
        elif kind == TransactionType.EXPENSE:
            expense += to_primary(transaction_amount(transaction), transaction.currency, rate)

    return MonthlyFlow(income=income, expense=expense)


def _share(part: Decimal, total: Decimal) -> Decimal:
    if total == 0:
        return ZERO
    return part / total * HUNDRED


def composition(accounts: Iterable, investments: Iterable, rate) -> Composition:
    cash = total_account_value(accounts, rate)
    invested = total_investment_value(investments)
    total = cash + invested
    return Composition(
        cash=cash,
        invested=invested,
        total=total,
        cash_share=_share(cash, total),
        invested_share=_share(invested, total),
    )


def portfolio_summary(investments: Iterable) -> PortfolioSummary:
    investments = list(investments)

    total_value = ZERO
    total_cost = ZERO
    for investment in investments:
        total_value += investment_value(investment)
        quantity = to_decimal(investment.quantity, field="quantity")
        buy_price = to_decimal(investment.buy_price or 0, field="buy_price")
        commission = to_decimal(investment.buy_commission or 0, field="buy_commission")
        total_cost += quantity * buy_price + commission

    return PortfolioSummary(
        position_count=len(investments),
        total_value=total_value,
        total_cost=total_cost,
        unrealized_gain=total_value - total_cost,
    )
