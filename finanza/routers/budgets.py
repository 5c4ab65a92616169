from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session
from typing import List, Optional
from decimal import Decimal

from finanza.crud import crud_budget
from finanza.models import budget as budget_models
from finanza.models.dashboard import BudgetTracking
from finanza.db.core import get_db, NotFoundError
from finanza.routers.deps import get_current_user_id, get_rate
from finanza.services.dashboard import build_budget_tracking

router = APIRouter(
    prefix="/budgets",
    tags=["budgets"],
)


@router.put("/", response_model=budget_models.BudgetResponse)
@router.post("/", response_model=budget_models.BudgetResponse)
def upsert_budget(
    budget: budget_models.BudgetCreate,
    db: Session = Depends(get_db),
    user_id: int = Depends(get_current_user_id)
):
    """
    Set the limit for a category in a month, replacing any existing one.
    """
    try:
        return crud_budget.upsert_db_budget(db=db, user_id=user_id, budget_data=budget)
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


@router.get("/", response_model=List[budget_models.BudgetResponse])
def read_budgets(
    month: Optional[str] = Query(None, description="Only rows declared for this YYYY-MM"),
    db: Session = Depends(get_db),
    user_id: int = Depends(get_current_user_id)
):
    try:
        return crud_budget.read_db_budgets(db=db, user_id=user_id, month=month)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


@router.get("/tracking", response_model=BudgetTracking)
def read_budget_tracking(
    month: Optional[str] = Query(None, description="YYYY-MM, defaults to the current month"),
    db: Session = Depends(get_db),
    user_id: int = Depends(get_current_user_id),
    rate: Decimal = Depends(get_rate)
):
    """
    Effective budget per category for the month, with spending, status and
    per-currency totals. Months without their own rows carry the latest
    earlier limit forward.
    """
    try:
        return build_budget_tracking(db=db, user_id=user_id, month=month, rate=rate)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


@router.get("/{budget_id}", response_model=budget_models.BudgetResponse)
def read_budget(
    budget_id: int,
    db: Session = Depends(get_db),
    user_id: int = Depends(get_current_user_id)
):
    db_budget = crud_budget.read_db_budget(db=db, budget_id=budget_id, user_id=user_id)
    if db_budget is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Budget not found")
    return db_budget


@router.put("/{budget_id}", response_model=budget_models.BudgetResponse)
def update_budget(
    budget_id: int,
    budget: budget_models.BudgetUpdate,
    db: Session = Depends(get_db),
    user_id: int = Depends(get_current_user_id)
):
    """
    Update a budget. Moving it onto a category and month that already has a
    budget overwrites that one instead.
    """
    try:
        return crud_budget.update_db_budget(db=db, budget_id=budget_id, user_id=user_id, budget_updates=budget)
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


@router.delete("/{budget_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_budget(
    budget_id: int,
    db: Session = Depends(get_db),
    user_id: int = Depends(get_current_user_id)
):
    try:
        crud_budget.delete_db_budget(db=db, budget_id=budget_id, user_id=user_id)
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
