from sqlalchemy.orm import Session
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from typing import Optional, List, Tuple
from datetime import datetime, date
from decimal import Decimal

from finanza.config import get_exchange_rate
from finanza.db.core import (
    TransactionDB, AccountDB, UserDB, NotFoundError, PersistenceError, TransactionType, AdjustmentDirection
)
from finanza.models.transaction import TransactionCreate, TransactionUpdate, check_type_fields
from finanza.crud.crud_account import adjust_account_balance, read_db_account
from finanza.services.currency import convert, validate_rate
from finanza.services.temporal import parse_month, shift_month
from finanza.logging_config import get_logger

logger = get_logger(__name__)


# ===== BALANCE APPLICATION =====

def balance_effects(transaction: TransactionDB) -> List[Tuple[int, Decimal]]:
    """Signed balance movements, in the transaction's currency, keyed by account id"""

    kind = TransactionType.normalize(transaction.transaction_type)
    amount = transaction.amount

    if kind == TransactionType.INCOME:
        return [(transaction.account_id, amount)]
    if kind == TransactionType.EXPENSE:
        return [(transaction.account_id, -amount)]
    if kind == TransactionType.ADJUSTMENT:
        if transaction.adjustment_direction == AdjustmentDirection.DOWN:
            return [(transaction.account_id, -amount)]
        return [(transaction.account_id, amount)]

    # TRANSFER
    effects = [(transaction.account_id, -amount)]
    if transaction.destination_account_id is not None:
        effects.append((transaction.destination_account_id, amount))
    return effects


def apply_balance_effect(db: Session, transaction: TransactionDB, reverse: bool = False,
                         rate=None, only_account_id: Optional[int] = None) -> None:
    """Move account balances for a transaction; caller commits"""

    rate = validate_rate(rate) if rate is not None else get_exchange_rate()

    for account_id, delta in balance_effects(transaction):
        if only_account_id is not None and account_id != only_account_id:
            continue
        account = db.query(AccountDB).filter(AccountDB.id == account_id).first()
        if not account:
            logger.warning(f"Transaction {transaction.id} references missing account {account_id}; balance not moved")
            continue
        converted = convert(delta, transaction.currency, account.currency, rate)
        adjust_account_balance(db, account, -converted if reverse else converted)


def _verify_destination(db: Session, user_id: int, destination_account_id: Optional[int]) -> None:
    if destination_account_id is None:
        return
    if not read_db_account(db, destination_account_id, user_id):
        raise NotFoundError(f"Destination account with id {destination_account_id} not found")


# ===== DATABASE OPERATIONS =====

def create_db_transaction(db: Session, user_id: int, transaction_data: TransactionCreate, rate=None) -> TransactionDB:
    """Create a transaction and apply it to the account balance(s)"""

    user = db.query(UserDB).filter(UserDB.id == user_id).first()
    if not user:
        raise NotFoundError(f"User with id {user_id} not found")

    if not read_db_account(db, transaction_data.account_id, user_id):
        raise NotFoundError(f"Account with id {transaction_data.account_id} not found")
    _verify_destination(db, user_id, transaction_data.destination_account_id)

    db_transaction = TransactionDB(
        user_id=user_id,
        account_id=transaction_data.account_id,
        destination_account_id=transaction_data.destination_account_id,
        transaction_date=transaction_data.transaction_date,
        transaction_type=transaction_data.transaction_type,
        amount=transaction_data.amount,
        currency=transaction_data.currency,
        category=transaction_data.category,
        adjustment_direction=transaction_data.adjustment_direction,
        description=transaction_data.description,
        created_at=datetime.utcnow(),
        updated_at=datetime.utcnow()
    )

    try:
        db.add(db_transaction)
        db.flush()
        apply_balance_effect(db, db_transaction, rate=rate)
        db.commit()
        db.refresh(db_transaction)
    except IntegrityError:
        db.rollback()
        raise ValueError("Transaction creation failed due to database constraint")
    except SQLAlchemyError as e:
        db.rollback()
        raise PersistenceError(f"Failed to create transaction: {str(e)}") from e

    logger.info(
        f"Created {db_transaction.transaction_type.value} transaction {db_transaction.id} "
        f"of {db_transaction.amount} {db_transaction.currency.value} on account {db_transaction.account_id}"
    )
    return db_transaction


def read_db_transaction(db: Session, transaction_id: int, user_id: Optional[int] = None) -> Optional[TransactionDB]:
    query = db.query(TransactionDB).filter(TransactionDB.id == transaction_id)
    if user_id:
        query = query.filter(TransactionDB.user_id == user_id)
    return query.first()


def read_db_transactions(db: Session, user_id: int, month: Optional[str] = None,
                         account_id: Optional[int] = None, category: Optional[str] = None,
                         skip: int = 0, limit: Optional[int] = None) -> List[TransactionDB]:
    """Read transactions newest first, optionally scoped to a month, account or category"""

    query = db.query(TransactionDB).filter(TransactionDB.user_id == user_id)

    if month:
        year, month_number = parse_month(month)
        next_year, next_month_number = parse_month(shift_month(month, 1))
        query = query.filter(
            TransactionDB.transaction_date >= date(year, month_number, 1),
            TransactionDB.transaction_date < date(next_year, next_month_number, 1)
        )
    if account_id:
        query = query.filter(
            (TransactionDB.account_id == account_id) | (TransactionDB.destination_account_id == account_id)
        )
    if category:
        query = query.filter(TransactionDB.category == category.strip())

    query = query.order_by(TransactionDB.transaction_date.desc(), TransactionDB.id.desc())
    if skip:
        query = query.offset(skip)
    if limit:
        query = query.limit(limit)
    return query.all()


def update_db_transaction(db: Session, transaction_id: int, user_id: int,
                          transaction_updates: TransactionUpdate, rate=None) -> TransactionDB:
    """Edit a transaction: its old balance effect is reversed and the new one applied"""

    db_transaction = read_db_transaction(db, transaction_id, user_id)
    if not db_transaction:
        raise NotFoundError(f"Transaction with id {transaction_id} not found")

    update_data = transaction_updates.model_dump(exclude_unset=True)

    new_type = update_data.get('transaction_type', db_transaction.transaction_type)
    if new_type != TransactionType.ADJUSTMENT and 'adjustment_direction' not in update_data:
        update_data['adjustment_direction'] = None
    if new_type != TransactionType.TRANSFER and 'destination_account_id' not in update_data:
        update_data['destination_account_id'] = None

    check_type_fields(
        new_type,
        update_data.get('adjustment_direction', db_transaction.adjustment_direction),
        db_transaction.account_id,
        update_data.get('destination_account_id', db_transaction.destination_account_id),
    )
    if 'destination_account_id' in update_data:
        _verify_destination(db, user_id, update_data['destination_account_id'])

    try:
        apply_balance_effect(db, db_transaction, reverse=True, rate=rate)
        for field, value in update_data.items():
            setattr(db_transaction, field, value)
        db_transaction.updated_at = datetime.utcnow()
        apply_balance_effect(db, db_transaction, rate=rate)

        db.commit()
        db.refresh(db_transaction)
        return db_transaction
    except IntegrityError:
        db.rollback()
        raise ValueError("Transaction update failed due to database constraint")
    except SQLAlchemyError as e:
        db.rollback()
        raise PersistenceError(f"Failed to update transaction: {str(e)}") from e


def delete_db_transaction(db: Session, transaction_id: int, user_id: int, rate=None) -> bool:
    """Delete a transaction and reverse its balance effect"""

    db_transaction = read_db_transaction(db, transaction_id, user_id)
    if not db_transaction:
        raise NotFoundError(f"Transaction with id {transaction_id} not found")

    try:
        apply_balance_effect(db, db_transaction, reverse=True, rate=rate)
        db.delete(db_transaction)
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        raise PersistenceError(f"Failed to delete transaction: {str(e)}") from e

    logger.info(f"Deleted transaction {transaction_id} for user {user_id}")
    return True
