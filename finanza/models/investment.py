from pydantic import BaseModel, Field, field_validator
from typing import Optional
from datetime import datetime
from decimal import Decimal


# ===== INVESTMENT PYDANTIC MODELS =====

class InvestmentBase(BaseModel):
    symbol: Optional[str] = Field(None, max_length=20, description="Ticker symbol")
    name: Optional[str] = Field(None, max_length=255, description="Display name of the position")
    quantity: Decimal = Field(..., ge=0, description="Number of shares/units owned")
    buy_price: Decimal = Field(..., ge=0, description="Price paid per unit")
    buy_commission: Decimal = Field(default=Decimal('0.00'), ge=0, description="Commission paid on purchase")
    current_price: Optional[Decimal] = Field(None, ge=0, description="Latest market price per unit")

    @field_validator('symbol')
    @classmethod
    def validate_symbol(cls, v: Optional[str]) -> Optional[str]:
        return v.strip().upper() if v else v

    @field_validator('quantity')
    @classmethod
    def round_quantity(cls, v: Decimal) -> Decimal:
        return round(v, 6)


class InvestmentCreate(InvestmentBase):
    pass


class InvestmentUpdate(BaseModel):
    symbol: Optional[str] = Field(None, max_length=20)
    name: Optional[str] = Field(None, max_length=255)
    quantity: Optional[Decimal] = Field(None, ge=0)
    buy_price: Optional[Decimal] = Field(None, ge=0)
    buy_commission: Optional[Decimal] = Field(None, ge=0)
    current_price: Optional[Decimal] = Field(None, ge=0)

    @field_validator('symbol')
    @classmethod
    def validate_symbol(cls, v: Optional[str]) -> Optional[str]:
        return v.strip().upper() if v else v


class InvestmentResponse(InvestmentBase):
    id: int
    user_id: int
    last_price_update: Optional[datetime]
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True
