from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from transactions.transaction_model import CategoryName, TransactionType


class CategoryCreate(BaseModel):
    name: CategoryName
    type: TransactionType
    color: str = Field(..., pattern=r"^#[0-9A-Fa-f]{6}$", description="Hex display color")
    icon: str = Field(..., min_length=1, max_length=50, description="Icon class, e.g. 'fas fa-car'")


class Category(CategoryCreate):
    model_config = ConfigDict(from_attributes=True)

    id: str
