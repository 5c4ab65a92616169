from sqlalchemy.orm import Session
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from typing import Optional, List
from datetime import datetime

from finanza.db.core import InvestmentDB, UserDB, NotFoundError, PersistenceError
from finanza.models.investment import InvestmentCreate, InvestmentUpdate
from finanza.logging_config import get_logger

logger = get_logger(__name__)


# ===== DATABASE OPERATIONS =====

def create_db_investment(db: Session, user_id: int, investment_data: InvestmentCreate) -> InvestmentDB:
    """Create a new investment position"""

    user = db.query(UserDB).filter(UserDB.id == user_id).first()
    if not user:
        raise NotFoundError(f"User with id {user_id} not found")

    db_investment = InvestmentDB(
        user_id=user_id,
        symbol=investment_data.symbol,
        name=investment_data.name,
        quantity=investment_data.quantity,
        buy_price=investment_data.buy_price,
        buy_commission=investment_data.buy_commission,
        current_price=investment_data.current_price,
        last_price_update=datetime.utcnow() if investment_data.current_price is not None else None,
        created_at=datetime.utcnow(),
        updated_at=datetime.utcnow()
    )

    try:
        db.add(db_investment)
        db.commit()
        db.refresh(db_investment)
    except IntegrityError:
        db.rollback()
        raise ValueError("Investment creation failed due to database constraint")
    except SQLAlchemyError as e:
        db.rollback()
        raise PersistenceError(f"Failed to create investment: {str(e)}") from e

    logger.info(f"Created investment {db_investment.id} ({db_investment.symbol or db_investment.name}) for user {user_id}")
    return db_investment


def read_db_investment(db: Session, investment_id: int, user_id: Optional[int] = None) -> Optional[InvestmentDB]:
    query = db.query(InvestmentDB).filter(InvestmentDB.id == investment_id)
    if user_id:
        query = query.filter(InvestmentDB.user_id == user_id)
    return query.first()


def read_db_investments(db: Session, user_id: int, skip: int = 0, limit: Optional[int] = None) -> List[InvestmentDB]:
    query = db.query(InvestmentDB).filter(InvestmentDB.user_id == user_id).order_by(InvestmentDB.id)
    if skip:
        query = query.offset(skip)
    if limit:
        query = query.limit(limit)
    return query.all()


def update_db_investment(db: Session, investment_id: int, user_id: int,
                         investment_updates: InvestmentUpdate) -> InvestmentDB:
    """Update a position; a new current price stamps last_price_update"""

    db_investment = read_db_investment(db, investment_id, user_id)
    if not db_investment:
        raise NotFoundError(f"Investment with id {investment_id} not found")

    update_data = investment_updates.model_dump(exclude_unset=True)
    for required in ('quantity', 'buy_price', 'buy_commission'):
        if required in update_data and update_data[required] is None:
            raise ValueError(f"{required} cannot be cleared")
    if 'quantity' in update_data:
        update_data['quantity'] = round(update_data['quantity'], 6)

    if 'current_price' in update_data and update_data['current_price'] != db_investment.current_price:
        db_investment.last_price_update = datetime.utcnow()

    for field, value in update_data.items():
        setattr(db_investment, field, value)

    db_investment.updated_at = datetime.utcnow()

    try:
        db.commit()
        db.refresh(db_investment)
        return db_investment
    except IntegrityError:
        db.rollback()
        raise ValueError("Investment update failed due to database constraint")
    except SQLAlchemyError as e:
        db.rollback()
        raise PersistenceError(f"Failed to update investment: {str(e)}") from e


def delete_db_investment(db: Session, investment_id: int, user_id: int) -> bool:
    db_investment = read_db_investment(db, investment_id, user_id)
    if not db_investment:
        raise NotFoundError(f"Investment with id {investment_id} not found")

    try:
        db.delete(db_investment)
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        raise PersistenceError(f"Failed to delete investment: {str(e)}") from e

    logger.info(f"Deleted investment {investment_id} for user {user_id}")
    return True
