from pydantic import BaseModel, Field, field_validator
from typing import Optional
from datetime import datetime
from decimal import Decimal

from finanza.db.core import AccountType, Currency
from finanza.services.currency import parse_currency


# ===== ACCOUNT PYDANTIC MODELS =====

class AccountCreate(BaseModel):
    account_name: str = Field(..., min_length=1, max_length=255, description="Account name")
    account_type: AccountType = Field(default=AccountType.OTHER, description="Type of account")
    currency: Currency = Field(..., description="Currency the balance is held in")
    institution_name: Optional[str] = Field(None, max_length=255, description="Financial institution name")
    balance: Decimal = Field(default=Decimal('0.00'), description="Opening balance")
    comments: Optional[str] = Field(None, max_length=1000, description="Optional comments about the account")

    @field_validator('account_name', mode='before')
    @classmethod
    def validate_account_name(cls, v):
        return v.strip() if isinstance(v, str) else v

    @field_validator('currency', mode='before')
    @classmethod
    def validate_currency(cls, v) -> Currency:
        return parse_currency(v)

    @field_validator('balance')
    @classmethod
    def validate_balance(cls, v: Decimal) -> Decimal:
        return round(v, 2)


class AccountUpdate(BaseModel):
    """Update account - balance moves only through transactions"""
    account_name: Optional[str] = Field(None, min_length=1, max_length=255)
    account_type: Optional[AccountType] = None
    institution_name: Optional[str] = Field(None, max_length=255)
    comments: Optional[str] = Field(None, max_length=1000)

    @field_validator('account_name', mode='before')
    @classmethod
    def validate_account_name(cls, v):
        return v.strip() if isinstance(v, str) else v


class AccountResponse(BaseModel):
    id: int
    user_id: int
    account_name: str
    account_type: AccountType
    currency: Currency
    institution_name: Optional[str]
    balance: Decimal
    balance_last_updated: Optional[datetime]
    comments: Optional[str]
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True
