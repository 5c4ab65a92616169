from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session
from typing import List, Optional
from decimal import Decimal

from finanza.crud import crud_transaction
from finanza.models import transaction as transaction_models
from finanza.db.core import get_db, NotFoundError
from finanza.routers.deps import get_current_user_id, get_rate

router = APIRouter(
    prefix="/transactions",
    tags=["transactions"],
)


@router.post("/", response_model=transaction_models.TransactionResponse, status_code=status.HTTP_201_CREATED)
def create_transaction(
    transaction: transaction_models.TransactionCreate,
    db: Session = Depends(get_db),
    user_id: int = Depends(get_current_user_id),
    rate: Decimal = Depends(get_rate)
):
    """
    Record a transaction and apply it to the account balance.
    """
    try:
        return crud_transaction.create_db_transaction(db=db, user_id=user_id, transaction_data=transaction, rate=rate)
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


@router.get("/", response_model=List[transaction_models.TransactionResponse])
def read_transactions(
    month: Optional[str] = Query(None, description="YYYY-MM"),
    account_id: Optional[int] = None,
    category: Optional[str] = None,
    skip: int = 0,
    limit: Optional[int] = None,
    db: Session = Depends(get_db),
    user_id: int = Depends(get_current_user_id)
):
    """
    List transactions, newest first.
    """
    try:
        return crud_transaction.read_db_transactions(
            db=db, user_id=user_id, month=month, account_id=account_id,
            category=category, skip=skip, limit=limit
        )
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


@router.get("/{transaction_id}", response_model=transaction_models.TransactionResponse)
def read_transaction(
    transaction_id: int,
    db: Session = Depends(get_db),
    user_id: int = Depends(get_current_user_id)
):
    db_transaction = crud_transaction.read_db_transaction(db=db, transaction_id=transaction_id, user_id=user_id)
    if db_transaction is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Transaction not found")
    return db_transaction


@router.put("/{transaction_id}", response_model=transaction_models.TransactionResponse)
def update_transaction(
    transaction_id: int,
    transaction: transaction_models.TransactionUpdate,
    db: Session = Depends(get_db),
    user_id: int = Depends(get_current_user_id),
    rate: Decimal = Depends(get_rate)
):
    """
    Edit a transaction. The old balance effect is reversed before the new
    one is applied.
    """
    try:
        return crud_transaction.update_db_transaction(
            db=db, transaction_id=transaction_id, user_id=user_id,
            transaction_updates=transaction, rate=rate
        )
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


@router.delete("/{transaction_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_transaction(
    transaction_id: int,
    db: Session = Depends(get_db),
    user_id: int = Depends(get_current_user_id),
    rate: Decimal = Depends(get_rate)
):
    try:
        crud_transaction.delete_db_transaction(db=db, transaction_id=transaction_id, user_id=user_id, rate=rate)
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
