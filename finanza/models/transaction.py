from pydantic import BaseModel, Field, field_validator, model_validator
from typing import Optional
from datetime import datetime, date
from decimal import Decimal

from finanza.db.core import AdjustmentDirection, Currency, TransactionType
from finanza.services.currency import parse_currency

# ===== TRANSACTION PYDANTIC MODELS =====


class TransactionCreate(BaseModel):
    account_id: int = Field(..., description="Account this transaction belongs to")
    destination_account_id: Optional[int] = Field(None, description="Receiving account, transfers only")
    transaction_date: date = Field(..., description="Date of the transaction")
    transaction_type: TransactionType = Field(..., description="income, expense, transfer or adjustment")
    amount: Decimal = Field(..., ge=0, description="Transaction amount, never negative")
    currency: Currency = Field(..., description="Currency of the amount")
    category: Optional[str] = Field(None, max_length=100, description="Category name")
    adjustment_direction: Optional[AdjustmentDirection] = Field(None, description="UP or DOWN, adjustments only")
    description: Optional[str] = Field(None, max_length=500, description="Transaction description")

    @field_validator('transaction_type', mode='before')
    @classmethod
    def validate_transaction_type(cls, v) -> TransactionType:
        return TransactionType.normalize(v)

    @field_validator('currency', mode='before')
    @classmethod
    def validate_currency(cls, v) -> Currency:
        return parse_currency(v)

    @field_validator('adjustment_direction', mode='before')
    @classmethod
    def validate_adjustment_direction(cls, v):
        return v.strip().upper() if isinstance(v, str) else v

    @field_validator('amount')
    @classmethod
    def validate_amount(cls, v: Decimal) -> Decimal:
        return round(v, 2)

    @field_validator('category', 'description')
    @classmethod
    def strip_text(cls, v: Optional[str]) -> Optional[str]:
        return v.strip() if v else v

    @model_validator(mode='after')
    def validate_type_fields(self) -> 'TransactionCreate':
        check_type_fields(self.transaction_type, self.adjustment_direction,
                          self.account_id, self.destination_account_id)
        return self


class TransactionUpdate(BaseModel):
    """Update transaction - all fields optional"""
    destination_account_id: Optional[int] = None
    transaction_date: Optional[date] = None
    transaction_type: Optional[TransactionType] = None
    amount: Optional[Decimal] = Field(None, ge=0)
    currency: Optional[Currency] = None
    category: Optional[str] = Field(None, max_length=100)
    adjustment_direction: Optional[AdjustmentDirection] = None
    description: Optional[str] = Field(None, max_length=500)

    @field_validator('transaction_type', mode='before')
    @classmethod
    def validate_transaction_type(cls, v):
        return TransactionType.normalize(v) if v is not None else v

    @field_validator('currency', mode='before')
    @classmethod
    def validate_currency(cls, v):
        return parse_currency(v) if v is not None else v

    @field_validator('adjustment_direction', mode='before')
    @classmethod
    def validate_adjustment_direction(cls, v):
        return v.strip().upper() if isinstance(v, str) else v

    @field_validator('amount')
    @classmethod
    def validate_amount(cls, v: Optional[Decimal]) -> Optional[Decimal]:
        return round(v, 2) if v is not None else v

    @field_validator('category', 'description')
    @classmethod
    def strip_text(cls, v: Optional[str]) -> Optional[str]:
        return v.strip() if v else v


class TransactionResponse(BaseModel):
    id: int
    user_id: int
    account_id: int
    destination_account_id: Optional[int]
    transaction_date: date
    transaction_type: TransactionType
    amount: Decimal
    currency: Currency
    category: Optional[str]
    adjustment_direction: Optional[AdjustmentDirection]
    description: Optional[str]
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


def check_type_fields(transaction_type: TransactionType,
                      adjustment_direction: Optional[AdjustmentDirection],
                      account_id: Optional[int],
                      destination_account_id: Optional[int]) -> None:
    """Direction belongs to adjustments and a destination to transfers, nothing else."""
    if transaction_type == TransactionType.ADJUSTMENT and adjustment_direction is None:
        raise ValueError('adjustment_direction is required for adjustments')
    if transaction_type != TransactionType.ADJUSTMENT and adjustment_direction is not None:
        raise ValueError('adjustment_direction is only allowed for adjustments')
    if destination_account_id is not None:
        if transaction_type != TransactionType.TRANSFER:
            raise ValueError('destination_account_id is only allowed for transfers')
        if destination_account_id == account_id:
            raise ValueError('A transfer cannot target its own account')
