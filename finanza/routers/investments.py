from fastapi import APIRouter, HTTPException, Depends, status
from sqlalchemy.orm import Session
from typing import List

from finanza.crud import crud_investment
from finanza.db.core import get_db, NotFoundError
from finanza.models.investment import InvestmentCreate, InvestmentResponse, InvestmentUpdate
from finanza.routers.deps import get_current_user_id

router = APIRouter(
    prefix="/investments",
    tags=["investments"],
)


@router.post("/", response_model=InvestmentResponse, status_code=status.HTTP_201_CREATED)
def create_investment(investment: InvestmentCreate, db: Session = Depends(get_db),
                      user_id: int = Depends(get_current_user_id)):
    try:
        return crud_investment.create_db_investment(db=db, user_id=user_id, investment_data=investment)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.get("/", response_model=List[InvestmentResponse])
def read_investments(db: Session = Depends(get_db), user_id: int = Depends(get_current_user_id)):
    return crud_investment.read_db_investments(db=db, user_id=user_id)


@router.get("/{investment_id}", response_model=InvestmentResponse)
def read_investment(investment_id: int, db: Session = Depends(get_db),
                    user_id: int = Depends(get_current_user_id)):
    db_investment = crud_investment.read_db_investment(db=db, investment_id=investment_id, user_id=user_id)
    if db_investment is None:
        raise HTTPException(status_code=404, detail="Investment not found")
    return db_investment


@router.put("/{investment_id}", response_model=InvestmentResponse)
def update_investment(investment_id: int, investment: InvestmentUpdate, db: Session = Depends(get_db),
                      user_id: int = Depends(get_current_user_id)):
    try:
        return crud_investment.update_db_investment(
            db=db, investment_id=investment_id, user_id=user_id, investment_updates=investment
        )
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail="Investment not found") from e
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.delete("/{investment_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_investment(investment_id: int, db: Session = Depends(get_db),
                      user_id: int = Depends(get_current_user_id)):
    try:
        crud_investment.delete_db_investment(db=db, investment_id=investment_id, user_id=user_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail="Investment not found") from e
