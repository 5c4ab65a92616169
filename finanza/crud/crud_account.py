from sqlalchemy.orm import Session
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from typing import Optional, List
from datetime import datetime
from decimal import Decimal

from finanza.db.core import AccountDB, UserDB, TransactionDB, NotFoundError, PersistenceError
from finanza.models.account import AccountCreate, AccountUpdate
from finanza.logging_config import get_logger

logger = get_logger(__name__)


# ===== DATABASE OPERATIONS =====

def create_db_account(db: Session, user_id: int, account_data: AccountCreate) -> AccountDB:
    """Create a new account for a user"""

    user = db.query(UserDB).filter(UserDB.id == user_id).first()
    if not user:
        raise NotFoundError(f"User with id {user_id} not found")

    existing_account = get_account_by_name(db, user_id, account_data.account_name)
    if existing_account:
        raise ValueError(f"Account name '{account_data.account_name}' already exists")

    db_account = AccountDB(
        user_id=user_id,
        account_name=account_data.account_name,
        account_type=account_data.account_type,
        currency=account_data.currency,
        institution_name=account_data.institution_name,
        balance=account_data.balance,
        balance_last_updated=datetime.utcnow() if account_data.balance != 0 else None,
        comments=account_data.comments,
        created_at=datetime.utcnow(),
        updated_at=datetime.utcnow()
    )

    try:
        db.add(db_account)
        db.commit()
        db.refresh(db_account)
    except IntegrityError:
        db.rollback()
        raise ValueError("Account creation failed due to database constraint")
    except SQLAlchemyError as e:
        db.rollback()
        raise PersistenceError(f"Failed to create account: {str(e)}") from e

    logger.info(f"Created account {db_account.id} ({db_account.currency.value}) for user {user_id}")
    return db_account


def read_db_account(db: Session, account_id: int, user_id: Optional[int] = None) -> Optional[AccountDB]:
    """Read an account by ID, optionally filtering by user"""

    query = db.query(AccountDB).filter(AccountDB.id == account_id)

    if user_id:
        query = query.filter(AccountDB.user_id == user_id)

    return query.first()


def read_db_accounts(db: Session, user_id: int, skip: int = 0, limit: Optional[int] = None) -> List[AccountDB]:
    """Read accounts for a user; no limit returns all of them"""

    query = db.query(AccountDB).filter(AccountDB.user_id == user_id).order_by(AccountDB.id)
    if skip:
        query = query.offset(skip)
    if limit:
        query = query.limit(limit)
    return query.all()


def update_db_account(db: Session, account_id: int, user_id: int, account_updates: AccountUpdate) -> AccountDB:
    """Update account metadata; the balance is owned by transaction application"""

    db_account = read_db_account(db, account_id, user_id)
    if not db_account:
        raise NotFoundError(f"Account with id {account_id} not found")

    if account_updates.account_name and account_updates.account_name != db_account.account_name:
        existing_name = db.query(AccountDB).filter(
            AccountDB.user_id == user_id,
            AccountDB.account_name == account_updates.account_name,
            AccountDB.id != account_id
        ).first()
        if existing_name:
            raise ValueError(f"Account name '{account_updates.account_name}' already exists")

    update_data = account_updates.model_dump(exclude_unset=True)
    for field, value in update_data.items():
        setattr(db_account, field, value)

    db_account.updated_at = datetime.utcnow()

    try:
        db.commit()
        db.refresh(db_account)
        return db_account
    except IntegrityError:
        db.rollback()
        raise ValueError("Account update failed due to database constraint")
    except SQLAlchemyError as e:
        db.rollback()
        raise PersistenceError(f"Failed to update account: {str(e)}") from e


def delete_db_account(db: Session, account_id: int, user_id: int, rate=None) -> bool:
    """Delete an account together with its transactions"""
    # crud_transaction imports this module
    from finanza.crud.crud_transaction import apply_balance_effect

    db_account = read_db_account(db, account_id, user_id)
    if not db_account:
        raise NotFoundError(f"Account with id {account_id} not found")

    owned = db.query(TransactionDB).filter(TransactionDB.account_id == account_id).all()

    try:
        for transaction in owned:
            # Outgoing transfers credited another account; take that credit back
            if transaction.destination_account_id is not None:
                apply_balance_effect(db, transaction, reverse=True, rate=rate, only_account_id=transaction.destination_account_id)
            db.delete(transaction)

        # Incoming transfers stay with their source account
        db.query(TransactionDB).filter(
            TransactionDB.destination_account_id == account_id
        ).update({TransactionDB.destination_account_id: None}, synchronize_session=False)

        db.delete(db_account)
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        raise PersistenceError(f"Failed to delete account: {str(e)}") from e

    logger.info(f"Deleted account {account_id} and {len(owned)} transactions for user {user_id}")
    return True


def adjust_account_balance(db: Session, db_account: AccountDB, delta: Decimal) -> AccountDB:
    """Move an account's balance by delta; caller commits"""

    db_account.balance = round((db_account.balance or Decimal('0.00')) + delta, 2)
    db_account.balance_last_updated = datetime.utcnow()
    db_account.updated_at = datetime.utcnow()
    return db_account


def get_account_by_name(db: Session, user_id: int, account_name: str) -> Optional[AccountDB]:
    """Get account by name for a specific user"""
    return db.query(AccountDB).filter(
        AccountDB.user_id == user_id,
        AccountDB.account_name == account_name
    ).first()
