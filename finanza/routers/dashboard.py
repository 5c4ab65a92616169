from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session
from typing import Optional
from decimal import Decimal

from finanza.db.core import get_db
from finanza.models.dashboard import DashboardResponse
from finanza.routers.deps import get_current_user_id, get_rate
from finanza.services.dashboard import build_dashboard

router = APIRouter(
    prefix="/dashboard",
    tags=["dashboard"],
)


@router.get("/", response_model=DashboardResponse)
def read_dashboard(
    month: Optional[str] = Query(None, description="YYYY-MM, defaults to the current month"),
    db: Session = Depends(get_db),
    user_id: int = Depends(get_current_user_id),
    rate: Decimal = Depends(get_rate)
):
    """
    Net worth, monthly flow, composition, portfolio and budget status for
    one month, with the neighbouring month tokens for navigation.
    """
    try:
        return build_dashboard(db=db, user_id=user_id, month=month, rate=rate)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
