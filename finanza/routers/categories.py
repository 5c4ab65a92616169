from fastapi import APIRouter

from finanza.config import get_expense_categories, get_income_categories
from finanza.models.category import CategoryList

router = APIRouter(
    prefix="/categories",
    tags=["categories"],
)


@router.get("/", response_model=CategoryList)
def read_categories():
    """
    The configured expense and income category names.
    """
    return CategoryList(expense=get_expense_categories(), income=get_income_categories())
