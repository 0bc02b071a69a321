from __future__ import annotations

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class DashboardStats(_CamelModel):
    total_balance: float
    monthly_income: float
    monthly_expenses: float
    savings: float
    savings_goal: float
    savings_percentage: float


class CategoryExpense(_CamelModel):
    category: str
    total: float
    count: int
