import sys
import os
import random
from sqlalchemy.orm import Session
from datetime import date
from decimal import Decimal
from faker import Faker

# Add the project root to the Python path
sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from finanza.config import DEFAULT_USER_ID, DEFAULT_USERNAME, get_expense_categories, get_income_categories
from finanza.crud import crud_account, crud_budget, crud_investment, crud_transaction
from finanza.crud.crud_user import get_or_create_user
from finanza.db.core import Base, engine, session_local, AccountDB, AccountType, Currency, TransactionType
from finanza.models.account import AccountCreate
from finanza.models.budget import BudgetCreate
from finanza.models.investment import InvestmentCreate
from finanza.models.transaction import TransactionCreate
from finanza.services.temporal import current_month, month_of, shift_month

fake = Faker()

ACCOUNT_SEEDS = [
    ("Banesco", AccountType.CHECKING, Currency.VES),
    ("Zelle", AccountType.WALLET, Currency.USD),
    ("Cash USD", AccountType.CASH, Currency.USD),
    ("Savings", AccountType.SAVINGS, Currency.USD),
]

SYMBOLS = ["AAPL", "MSFT", "VOO", "BTC", "KO"]


def _random_day(months_back: int) -> date:
    return fake.date_between(start_date=f"-{months_back * 30}d", end_date="today")


def seed_database(months: int = 6):
    """
    Fills the database with sample accounts, transactions, investments and
    budgets for the default user.
    """
    Base.metadata.create_all(bind=engine)
    db: Session = session_local()

    try:
        # Check if data exists to prevent duplicate seeding
        if db.query(AccountDB).count() > 0:
            print("Database appears to be already seeded. Exiting.")
            return

        print("Seeding database with sample data...")
        user = get_or_create_user(db, DEFAULT_USER_ID, DEFAULT_USERNAME)

        print("Creating accounts...")
        accounts = []
        for name, account_type, currency in ACCOUNT_SEEDS:
            opening = Decimal(random.randint(5_000, 50_000)) if currency == Currency.VES else Decimal(random.randint(200, 3_000))
            accounts.append(crud_account.create_db_account(db, user.id, AccountCreate(
                account_name=name,
                account_type=account_type,
                currency=currency,
                institution_name=fake.company(),
                balance=opening,
            )))

        print("Creating transactions...")
        expense_categories = get_expense_categories()
        income_categories = get_income_categories()
        for _ in range(months * 25):
            account = random.choice(accounts)
            is_income = random.random() < 0.2
            amount = Decimal(str(round(random.uniform(2.0, 400.0), 2)))
            if account.currency == Currency.VES:
                amount = amount * 10
            crud_transaction.create_db_transaction(db, user.id, TransactionCreate(
                account_id=account.id,
                transaction_date=_random_day(months),
                transaction_type=TransactionType.INCOME if is_income else TransactionType.EXPENSE,
                amount=amount,
                currency=account.currency,
                category=random.choice(income_categories if is_income else expense_categories),
                description=fake.catch_phrase(),
            ))

        source, destination = accounts[1], accounts[3]
        crud_transaction.create_db_transaction(db, user.id, TransactionCreate(
            account_id=source.id,
            destination_account_id=destination.id,
            transaction_date=_random_day(1),
            transaction_type=TransactionType.TRANSFER,
            amount=Decimal("100.00"),
            currency=source.currency,
            category="Savings",
        ))

        print("Creating investments...")
        for symbol in random.sample(SYMBOLS, k=3):
            buy_price = Decimal(str(round(random.uniform(20.0, 500.0), 2)))
            crud_investment.create_db_investment(db, user.id, InvestmentCreate(
                symbol=symbol,
                name=fake.company(),
                quantity=Decimal(random.randint(1, 30)),
                buy_price=buy_price,
                buy_commission=Decimal("1.50"),
                current_price=buy_price * Decimal(str(round(random.uniform(0.8, 1.4), 2))),
            ))

        print("Creating budgets...")
        start_month = shift_month(current_month(), -(months - 1))
        for category in random.sample(expense_categories, k=min(5, len(expense_categories))):
            crud_budget.upsert_db_budget(db, user.id, BudgetCreate(
                category=category,
                month=start_month,
                currency=random.choice([Currency.USD, Currency.VES]),
                limit=Decimal(random.randint(100, 800)),
            ))
        # A raised limit later in the period; months in between carry the first one forward
        crud_budget.upsert_db_budget(db, user.id, BudgetCreate(
            category=expense_categories[0],
            month=month_of(date.today()),
            currency=Currency.USD,
            limit=Decimal("900"),
        ))

        print("Successfully seeded database.")

    except Exception as e:
        print(f"An error occurred: {e}")
        db.rollback()
        raise
    finally:
        db.close()


if __name__ == "__main__":
    seed_database()
