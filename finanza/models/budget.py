from pydantic import BaseModel, Field, field_validator
from typing import Optional
from datetime import datetime
from decimal import Decimal

from finanza.db.core import Currency
from finanza.services.currency import parse_currency
from finanza.services.temporal import validate_month

# ===== BUDGET PYDANTIC MODELS =====


class BudgetCreate(BaseModel):
    category: str = Field(..., min_length=1, max_length=100, description="Expense category")
    month: str = Field(..., description="Month the limit applies to, YYYY-MM")
    currency: Currency = Field(default=Currency.USD, description="Currency the limit is declared in")
    limit: Decimal = Field(..., ge=0, description="Monthly spending limit")

    @field_validator('category', mode='before')
    @classmethod
    def validate_category(cls, v):
        return v.strip() if isinstance(v, str) else v

    @field_validator('month')
    @classmethod
    def validate_month_token(cls, v: str) -> str:
        return validate_month(v)

    @field_validator('currency', mode='before')
    @classmethod
    def validate_currency(cls, v) -> Currency:
        return parse_currency(v)

    @field_validator('limit')
    @classmethod
    def validate_limit(cls, v: Decimal) -> Decimal:
        return round(v, 2)


class BudgetUpdate(BaseModel):
    category: Optional[str] = Field(None, min_length=1, max_length=100)
    month: Optional[str] = None
    currency: Optional[Currency] = None
    limit: Optional[Decimal] = Field(None, ge=0)

    @field_validator('category', mode='before')
    @classmethod
    def validate_category(cls, v):
        return v.strip() if isinstance(v, str) else v

    @field_validator('month')
    @classmethod
    def validate_month_token(cls, v: Optional[str]) -> Optional[str]:
        return validate_month(v) if v is not None else v

    @field_validator('currency', mode='before')
    @classmethod
    def validate_currency(cls, v):
        return parse_currency(v) if v is not None else v

    @field_validator('limit')
    @classmethod
    def validate_limit(cls, v: Optional[Decimal]) -> Optional[Decimal]:
        return round(v, 2) if v is not None else v


class BudgetResponse(BaseModel):
    id: int
    user_id: int
    category: str
    month: str
    currency: Currency
    limit: Decimal
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True
