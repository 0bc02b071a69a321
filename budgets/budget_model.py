from __future__ import annotations

from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, model_validator

from transactions.transaction_model import Amount, CategoryName


BudgetPeriod = Literal["monthly", "yearly"]


class BudgetCreate(BaseModel):
    category: CategoryName
    limit: Amount
    period: BudgetPeriod


class BudgetUpdate(BaseModel):
    category: Optional[CategoryName] = None
    limit: Optional[Amount] = None
    period: Optional[BudgetPeriod] = None

    @model_validator(mode="after")
    def _reject_null(self) -> "BudgetUpdate":
        for name in self.model_fields_set:
            if getattr(self, name) is None:
                raise ValueError(f"{name} may not be null")
        return self

    def changes(self) -> dict:
        return self.model_dump(exclude_unset=True)


class Budget(BudgetCreate):
    model_config = ConfigDict(from_attributes=True)

    id: str
    user_id: str
    created_at: Optional[datetime] = None
