from __future__ import annotations

import re
from datetime import date, datetime
from decimal import Decimal
from typing import Annotated, Literal, Optional

from pydantic import AfterValidator, BaseModel, ConfigDict, Field, model_validator


TransactionType = Literal["income", "expense"]

CENT = Decimal("0.01")

# Extended calendar form only, so stored dates sort and prefix-match by month
ISO_DATE_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}(?:[T ].+)?$")


def _to_cents(value: Decimal) -> Decimal:
    return value.quantize(CENT)


def parse_iso_date(value: str) -> date:
    """
    Parse a `YYYY-MM-DD` date or `YYYY-MM-DDTHH:MM...` datetime string down to
    its calendar date. Raises ValueError for anything else, including the
    compact and week-date ISO forms.
    """
    text = value.strip()
    if not ISO_DATE_PATTERN.match(text):
        raise ValueError(f"Invalid ISO date: {value!r}")
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    return datetime.fromisoformat(text).date()


def _check_iso_date(value: str) -> str:
    parse_iso_date(value)
    return value.strip()


Amount = Annotated[Decimal, Field(gt=0, max_digits=10, decimal_places=2), AfterValidator(_to_cents)]
IsoDate = Annotated[str, AfterValidator(_check_iso_date)]
CategoryName = Annotated[str, Field(min_length=1, max_length=50)]


class TransactionCreate(BaseModel):
    type: TransactionType
    amount: Amount
    description: str = Field(..., min_length=1)
    category: CategoryName
    date: IsoDate
    notes: Optional[str] = None
    receipt_url: Optional[str] = None


class TransactionUpdate(BaseModel):
    type: Optional[TransactionType] = None
    amount: Optional[Amount] = None
    description: Optional[str] = Field(None, min_length=1)
    category: Optional[CategoryName] = None
    date: Optional[IsoDate] = None
    notes: Optional[str] = None
    receipt_url: Optional[str] = None

    @model_validator(mode="after")
    def _reject_null_required(self) -> "TransactionUpdate":
        for name in ("type", "amount", "description", "category", "date"):
            if name in self.model_fields_set and getattr(self, name) is None:
                raise ValueError(f"{name} may not be null")
        return self

    def changes(self) -> dict:
        return self.model_dump(exclude_unset=True)


class Transaction(TransactionCreate):
    model_config = ConfigDict(from_attributes=True)

    id: str
    user_id: str
    created_at: Optional[datetime] = None
