from fastapi import HTTPException, Query, status
from decimal import Decimal
from typing import Optional

from finanza.config import DEFAULT_USER_ID, get_exchange_rate
from finanza.services.currency import validate_rate
from finanza.services.errors import InvalidInputError


# This is a placeholder for a proper authentication dependency.
def get_current_user_id() -> int:
    return DEFAULT_USER_ID


def get_rate(rate: Optional[Decimal] = Query(None, description="VES per 1 USD; defaults to EXCHANGE_RATE")) -> Decimal:
    """Per-request exchange rate override."""
    if rate is None:
        return get_exchange_rate()
    try:
        return validate_rate(rate)
    except InvalidInputError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
