from sqlalchemy.orm import Session
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from typing import Optional, List
from datetime import datetime

from finanza.db.core import BudgetDB, UserDB, NotFoundError, PersistenceError
from finanza.models.budget import BudgetCreate, BudgetUpdate
from finanza.logging_config import get_logger
from finanza.services.temporal import validate_month

logger = get_logger(__name__)


def _find_budget(db: Session, user_id: int, category: str, month: str) -> Optional[BudgetDB]:
    return db.query(BudgetDB).filter(
        BudgetDB.user_id == user_id,
        BudgetDB.category == category,
        BudgetDB.month == month
    ).first()


def _overwrite(db_budget: BudgetDB, budget_data: BudgetCreate) -> BudgetDB:
    db_budget.currency = budget_data.currency
    db_budget.limit = budget_data.limit
    db_budget.updated_at = datetime.utcnow()
    return db_budget


# ===== DATABASE OPERATIONS =====

def upsert_db_budget(db: Session, user_id: int, budget_data: BudgetCreate) -> BudgetDB:
    """
    Set the limit for a (category, month) pair.

    An existing row for the pair is overwritten in place, so there is never
    more than one budget per category and month.
    """

    user = db.query(UserDB).filter(UserDB.id == user_id).first()
    if not user:
        raise NotFoundError(f"User with id {user_id} not found")

    db_budget = _find_budget(db, user_id, budget_data.category, budget_data.month)
    if db_budget:
        _overwrite(db_budget, budget_data)
    else:
        db_budget = BudgetDB(
            user_id=user_id,
            category=budget_data.category,
            month=budget_data.month,
            currency=budget_data.currency,
            limit=budget_data.limit,
            created_at=datetime.utcnow(),
            updated_at=datetime.utcnow()
        )
        db.add(db_budget)

    try:
        db.commit()
    except IntegrityError:
        # Another writer inserted the pair first; fall back to overwriting it
        db.rollback()
        db_budget = _find_budget(db, user_id, budget_data.category, budget_data.month)
        if not db_budget:
            raise ValueError("Budget upsert failed due to database constraint")
        _overwrite(db_budget, budget_data)
        try:
            db.commit()
        except SQLAlchemyError as e:
            db.rollback()
            raise PersistenceError(f"Failed to save budget: {str(e)}") from e
    except SQLAlchemyError as e:
        db.rollback()
        raise PersistenceError(f"Failed to save budget: {str(e)}") from e

    db.refresh(db_budget)
    logger.info(
        f"Saved budget {db_budget.id} for '{db_budget.category}' in {db_budget.month}: "
        f"{db_budget.limit} {db_budget.currency.value}"
    )
    return db_budget


def read_db_budget(db: Session, budget_id: int, user_id: Optional[int] = None) -> Optional[BudgetDB]:
    query = db.query(BudgetDB).filter(BudgetDB.id == budget_id)
    if user_id:
        query = query.filter(BudgetDB.user_id == user_id)
    return query.first()


def read_db_budgets(db: Session, user_id: int, month: Optional[str] = None) -> List[BudgetDB]:
    """Budgets for a user, optionally only the rows declared for one month"""

    query = db.query(BudgetDB).filter(BudgetDB.user_id == user_id)
    if month:
        query = query.filter(BudgetDB.month == validate_month(month))
    return query.order_by(BudgetDB.month.desc(), BudgetDB.category, BudgetDB.id).all()


def update_db_budget(db: Session, budget_id: int, user_id: int, budget_updates: BudgetUpdate) -> BudgetDB:
    """
    Edit a budget row by id.

    Moving the row onto a (category, month) that already has a budget
    overwrites that budget and removes the edited row; the surviving row is
    returned.
    """

    db_budget = read_db_budget(db, budget_id, user_id)
    if not db_budget:
        raise NotFoundError(f"Budget with id {budget_id} not found")

    update_data = budget_updates.model_dump(exclude_unset=True)
    for required in ('category', 'month', 'currency', 'limit'):
        if required in update_data and update_data[required] is None:
            raise ValueError(f"{required} cannot be cleared")

    category = update_data.get('category', db_budget.category)
    month = update_data.get('month', db_budget.month)

    existing = db.query(BudgetDB).filter(
        BudgetDB.user_id == user_id,
        BudgetDB.category == category,
        BudgetDB.month == month,
        BudgetDB.id != budget_id
    ).first()

    try:
        if existing:
            existing.currency = update_data.get('currency', db_budget.currency)
            existing.limit = update_data.get('limit', db_budget.limit)
            existing.updated_at = datetime.utcnow()
            db.delete(db_budget)
            db.commit()
            db.refresh(existing)
            logger.info(f"Merged budget {budget_id} into {existing.id} for '{category}' in {month}")
            return existing

        for field, value in update_data.items():
            setattr(db_budget, field, value)
        db_budget.updated_at = datetime.utcnow()
        db.commit()
        db.refresh(db_budget)
        return db_budget
    except IntegrityError:
        db.rollback()
        raise ValueError("Budget update failed due to database constraint")
    except SQLAlchemyError as e:
        db.rollback()
        raise PersistenceError(f"Failed to update budget: {str(e)}") from e


def delete_db_budget(db: Session, budget_id: int, user_id: int) -> bool:
    db_budget = read_db_budget(db, budget_id, user_id)
    if not db_budget:
        raise NotFoundError(f"Budget with id {budget_id} not found")

    try:
        db.delete(db_budget)
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        raise PersistenceError(f"Failed to delete budget: {str(e)}") from e

    logger.info(f"Deleted budget {budget_id} for user {user_id}")
    return True
