from pydantic import BaseModel
from typing import List


class CategoryList(BaseModel):
    expense: List[str]
    income: List[str]
