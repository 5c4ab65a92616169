import os
from decimal import Decimal
from typing import List

from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///finanza.db")
SQL_ECHO = os.getenv("SQL_ECHO", "false").lower() == "true"
AUTO_CREATE_TABLES = os.getenv("AUTO_CREATE_TABLES", "true").lower() == "true"

# Units of the secondary currency per one unit of the primary currency
EXCHANGE_RATE = os.getenv("EXCHANGE_RATE", "45.50")

DEFAULT_USER_ID = int(os.getenv("DEFAULT_USER_ID", "1"))
DEFAULT_USERNAME = os.getenv("DEFAULT_USERNAME", "default")

DEFAULT_EXPENSE_CATEGORIES = [
    "Food",
    "Transport",
    "Housing",
    "Utilities",
    "Health",
    "Education",
    "Entertainment",
    "Shopping",
    "Other",
]

DEFAULT_INCOME_CATEGORIES = [
    "Salary",
    "Freelance",
    "Investments",
    "Gifts",
    "Other",
]


def _split_list(raw: str) -> List[str]:
    return [item.strip() for item in raw.split(",") if item.strip()]


def get_expense_categories() -> List[str]:
    raw = os.getenv("EXPENSE_CATEGORIES")
    return _split_list(raw) if raw else list(DEFAULT_EXPENSE_CATEGORIES)


def get_income_categories() -> List[str]:
    raw = os.getenv("INCOME_CATEGORIES")
    return _split_list(raw) if raw else list(DEFAULT_INCOME_CATEGORIES)


def get_exchange_rate() -> Decimal:
    """Return the configured exchange rate as a validated Decimal."""
    from finanza.services.currency import validate_rate

    return validate_rate(os.getenv("EXCHANGE_RATE", EXCHANGE_RATE))
