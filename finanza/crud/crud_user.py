from sqlalchemy.orm import Session
from sqlalchemy.exc import SQLAlchemyError
from typing import Optional
from datetime import datetime

from finanza.db.core import UserDB, PersistenceError
from finanza.logging_config import get_logger

logger = get_logger(__name__)


def read_db_user(db: Session, user_id: int) -> Optional[UserDB]:
    return db.query(UserDB).filter(UserDB.id == user_id).first()


def get_or_create_user(db: Session, user_id: int, username: str) -> UserDB:
    """Make sure the single session user exists; auth is handled elsewhere."""
    user = read_db_user(db, user_id)
    if user:
        return user

    user = UserDB(id=user_id, username=username, created_at=datetime.utcnow())
    try:
        db.add(user)
        db.commit()
        db.refresh(user)
    except SQLAlchemyError as e:
        db.rollback()
        raise PersistenceError(f"Failed to create user {user_id}: {str(e)}") from e

    logger.info(f"Created user {user_id} ({username})")
    return user
