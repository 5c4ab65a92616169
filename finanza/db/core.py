from typing import Optional
from sqlalchemy import create_engine, ForeignKey, Index, UniqueConstraint, String, Text, DECIMAL, DateTime, Date
from sqlalchemy.types import Enum
from sqlalchemy.orm import sessionmaker, DeclarativeBase, Mapped, relationship, mapped_column
from datetime import datetime, date
from decimal import Decimal
import enum

from finanza.config import DATABASE_URL, SQL_ECHO


class NotFoundError(Exception):
    pass


class PersistenceError(Exception):
    """Raised when the record store rejects or cannot complete a write."""
    pass


class Base(DeclarativeBase):
    pass


class Currency(str, enum.Enum):
    USD = "USD"  # primary
    VES = "VES"  # secondary


PRIMARY_CURRENCY = Currency.USD
SECONDARY_CURRENCY = Currency.VES


class AccountType(str, enum.Enum):
    CHECKING = "CHECKING"
    SAVINGS = "SAVINGS"
    CASH = "CASH"
    CREDIT_CARD = "CREDIT_CARD"
    WALLET = "WALLET"
    OTHER = "OTHER"


class TransactionType(str, enum.Enum):
    INCOME = "INCOME"
    EXPENSE = "EXPENSE"
    TRANSFER = "TRANSFER"
    ADJUSTMENT = "ADJUSTMENT"

    @classmethod
    def normalize(cls, value) -> "TransactionType":
        """Map canonical or legacy type tokens onto a single variant.

        Older records carry human-language tokens ("Gasto", "ingreso", ...)
        alongside the canonical ones; both spellings resolve here.
        """
        if isinstance(value, cls):
            return value
        if value is None:
            raise ValueError("Transaction type is required")
        token = str(value).strip().casefold()
        try:
            return TRANSACTION_TYPE_ALIASES[token]
        except KeyError:
            raise ValueError(f"Unknown transaction type '{value}'") from None


TRANSACTION_TYPE_ALIASES = {
    "income": TransactionType.INCOME,
    "ingreso": TransactionType.INCOME,
    "expense": TransactionType.EXPENSE,
    "gasto": TransactionType.EXPENSE,
    "transfer": TransactionType.TRANSFER,
    "transferencia": TransactionType.TRANSFER,
    "adjustment": TransactionType.ADJUSTMENT,
    "ajuste": TransactionType.ADJUSTMENT,
}


class AdjustmentDirection(str, enum.Enum):
    UP = "UP"
    DOWN = "DOWN"


class UserDB(Base):
    __tablename__ = "users"

    __table_args__ = (
        UniqueConstraint("username", name="uq_user_username"),
    )

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    username: Mapped[str] = mapped_column(String(100), nullable=False)
    display_name: Mapped[Optional[str]] = mapped_column(String(255))

    # Audit Trail
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)

    # Relationships
    accounts = relationship("AccountDB", back_populates="user")
    investments = relationship("InvestmentDB", back_populates="user")
    budgets = relationship("BudgetDB", back_populates="user")


class AccountDB(Base):
    __tablename__ = "accounts"

    __table_args__ = (
        # Prevent duplicate account names per user
        UniqueConstraint("user_id", "account_name", name="uq_user_account_name"),
    )

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id"))

    # Account Details
    account_name: Mapped[str] = mapped_column(String(255), nullable=False)  # "Banesco", "Zelle", "Cash"
    account_type: Mapped[AccountType] = mapped_column(Enum(AccountType), default=AccountType.OTHER)
    currency: Mapped[Currency] = mapped_column(Enum(Currency), nullable=False)
    institution_name: Mapped[Optional[str]] = mapped_column(String(255))

    # Balance Tracking, only moved by transaction application
    balance: Mapped[Decimal] = mapped_column(DECIMAL(18, 2), default=Decimal("0.00"))
    balance_last_updated: Mapped[Optional[datetime]] = mapped_column(DateTime)

    comments: Mapped[Optional[str]] = mapped_column(Text)

    # Audit Trail
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    user = relationship("UserDB", back_populates="accounts")
    transactions = relationship("TransactionDB", foreign_keys="TransactionDB.account_id", back_populates="account")


class TransactionDB(Base):
    __tablename__ = "transactions"

    __table_args__ = (
        Index("idx_transactions_user_date", "user_id", "transaction_date"),
        Index("idx_transactions_user_account", "user_id", "account_id"),
        Index("idx_transactions_user_category", "user_id", "category"),
    )

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id"))
    account_id: Mapped[int] = mapped_column(ForeignKey("accounts.id"), nullable=False)
    destination_account_id: Mapped[Optional[int]] = mapped_column(ForeignKey("accounts.id"))  # transfers only

    transaction_date: Mapped[date] = mapped_column(Date, nullable=False)
    transaction_type: Mapped[TransactionType] = mapped_column(Enum(TransactionType), nullable=False)
    amount: Mapped[Decimal] = mapped_column(DECIMAL(18, 2), nullable=False)  # never negative
    currency: Mapped[Currency] = mapped_column(Enum(Currency), nullable=False)
    category: Mapped[Optional[str]] = mapped_column(String(100))
    adjustment_direction: Mapped[Optional[AdjustmentDirection]] = mapped_column(Enum(AdjustmentDirection))

    description: Mapped[Optional[str]] = mapped_column(String(500))

    # Audit Trail
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    account = relationship("AccountDB", foreign_keys=[account_id], back_populates="transactions")
    destination_account = relationship("AccountDB", foreign_keys=[destination_account_id])


class InvestmentDB(Base):
    __tablename__ = "investments"

    __table_args__ = (
        Index("idx_investments_user", "user_id"),
    )

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id"))

    symbol: Mapped[Optional[str]] = mapped_column(String(20))
    name: Mapped[Optional[str]] = mapped_column(String(255))
    quantity: Mapped[Decimal] = mapped_column(DECIMAL(18, 6), nullable=False)
    buy_price: Mapped[Decimal] = mapped_column(DECIMAL(18, 4), nullable=False)
    buy_commission: Mapped[Decimal] = mapped_column(DECIMAL(18, 2), default=Decimal("0.00"))
    current_price: Mapped[Optional[Decimal]] = mapped_column(DECIMAL(18, 4))  # falls back to buy_price
    last_price_update: Mapped[Optional[datetime]] = mapped_column(DateTime)

    # Audit Trail
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    user = relationship("UserDB", back_populates="investments")


class BudgetDB(Base):
    __tablename__ = "budgets"

    __table_args__ = (
        # One limit per category per month
        UniqueConstraint("user_id", "category", "month", name="uq_user_category_month"),
        Index("idx_budgets_user_month", "user_id", "month"),
    )

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id"))

    category: Mapped[str] = mapped_column(String(100), nullable=False)
    month: Mapped[str] = mapped_column(String(7), nullable=False)  # "YYYY-MM"
    currency: Mapped[Currency] = mapped_column(Enum(Currency), nullable=False)
    limit: Mapped[Decimal] = mapped_column("limit_amount", DECIMAL(18, 2), nullable=False)

    # Audit Trail
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    user = relationship("UserDB", back_populates="budgets")


connect_args = {"check_same_thread": False} if DATABASE_URL.startswith("sqlite") else {}
engine = create_engine(DATABASE_URL, echo=SQL_ECHO, connect_args=connect_args)
session_local = sessionmaker(autocommit=False, autoflush=False, bind=engine)


# Dependency to get the database session
def get_db():
    database = session_local()
    try:
        yield database
    finally:
        database.close()
