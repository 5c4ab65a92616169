from pydantic import BaseModel
from typing import Optional, List
from decimal import Decimal
from enum import Enum

from finanza.db.core import Currency


# ===== ENGINE VIEW MODELS =====
# Immutable snapshots handed to the presentation layer.

class BudgetState(str, Enum):
    OK = "ok"
    WARNING = "warning"
    EXCEEDED = "exceeded"


class MonthlyFlow(BaseModel):
    income: Decimal
    expense: Decimal

    class Config:
        frozen = True


class BudgetStatus(BaseModel):
    percentage: Decimal
    state: BudgetState

    class Config:
        frozen = True


class BudgetRow(BaseModel):
    budget_id: Optional[int]
    category: str
    month: str
    source_month: str  # month of the row the limit was taken from
    carried_forward: bool
    currency: Currency
    limit: Decimal
    spent: Decimal
    remaining: Decimal
    percentage: Decimal
    state: BudgetState

    class Config:
        frozen = True


class CurrencyBudgetTotal(BaseModel):
    currency: Currency
    total_limit: Decimal
    total_spent: Decimal
    percentage: Decimal

    class Config:
        frozen = True


class Composition(BaseModel):
    """Cash vs invested breakdown, in the primary currency"""
    cash: Decimal
    invested: Decimal
    total: Decimal
    cash_share: Decimal
    invested_share: Decimal

    class Config:
        frozen = True


class PortfolioSummary(BaseModel):
    position_count: int
    total_value: Decimal
    total_cost: Decimal
    unrealized_gain: Decimal

    class Config:
        frozen = True


class BudgetTracking(BaseModel):
    month: str
    exchange_rate: Decimal
    rows: List[BudgetRow]
    summary: List[CurrencyBudgetTotal]

    class Config:
        frozen = True


class DashboardResponse(BaseModel):
    month: str
    previous_month: str
    next_month: str
    exchange_rate: Decimal
    primary_currency: Currency
    total_account_value: Decimal
    total_investment_value: Decimal
    net_worth: Decimal
    monthly_flow: MonthlyFlow
    composition: Composition
    portfolio: PortfolioSummary
    budgets: List[BudgetRow]

    class Config:
        frozen = True
