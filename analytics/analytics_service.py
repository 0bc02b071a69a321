from __future__ import annotations

from datetime import date
from functools import lru_cache
from typing import Iterable, List, Optional

import numpy as np
import pandas as pd

from analytics.analytics_model import CategoryExpense, DashboardStats
from settings.config import settings
from transactions.transaction_model import Transaction, parse_iso_date


FRAME_DTYPES = {
  "id": "string",
  "type": "string",
  "amount": "float64",
  "category": "string",
  "year": "int64",
  "month": "int64",
  "day": "int64",
}


class AnalyticsService():

  def __init__(self, savings_goal: float = 5000.0) -> None:
    self.savings_goal = savings_goal

  def transactions_to_dataframe(self, transactions: Iterable[Transaction]) -> pd.DataFrame:
    """
    Flatten transactions into a typed DataFrame: amounts as floats, dates split
    into year, month and a proleptic day ordinal so every year from 1 to 9999
    fits.
    """
    rows = []
    for t in transactions:
      day = parse_iso_date(t.date)
      rows.append({
        "id": t.id,
        "type": t.type,
        "amount": float(t.amount),
        "category": t.category,
        "year": day.year,
        "month": day.month,
        "day": day.toordinal(),
      })
    if not rows:
      return pd.DataFrame(columns=list(FRAME_DTYPES)).astype(FRAME_DTYPES)
    return pd.DataFrame(rows).astype(FRAME_DTYPES)

  async def dashboard_stats(self, transactions: List[Transaction], today: Optional[date] = None) -> DashboardStats:
    today = today or date.today()
    df = self.transactions_to_dataframe(transactions)

    in_month = (df["year"] == today.year) & (df["month"] == today.month)
    monthly = df[in_month]
    monthly_income = float(monthly.loc[monthly["type"] == "income", "amount"].sum())
    monthly_expenses = float(monthly.loc[monthly["type"] == "expense", "amount"].sum())

    is_income = (df["type"] == "income").to_numpy(dtype=bool, na_value=False)
    signed = np.where(is_income, df["amount"].to_numpy(), -df["amount"].to_numpy())
    total_balance = float(signed.sum())

    savings = max(0.0, monthly_income - monthly_expenses)
    if self.savings_goal > 0:
      savings_percentage = min(100.0, savings / self.savings_goal * 100.0)
    else:
      savings_percentage = 0.0

    return DashboardStats(
      total_balance=round(total_balance, 2),
      monthly_income=round(monthly_income, 2),
      monthly_expenses=round(monthly_expenses, 2),
      savings=round(savings, 2),
      savings_goal=self.savings_goal,
      savings_percentage=round(savings_percentage, 2),
    )

  async def expenses_by_category(self, transactions: List[Transaction], start_date: str, end_date: str) -> List[CategoryExpense]:
    """
    Group expenses dated within [start_date, end_date] (inclusive) by category
    name. Largest totals first.
    """
    start = parse_iso_date(start_date).toordinal()
    end = parse_iso_date(end_date).toordinal()
    df = self.transactions_to_dataframe(transactions)

    window = df[(df["type"] == "expense") & (df["day"] >= start) & (df["day"] <= end)]
    if window.empty:
      return []
    grp = window.groupby("category", sort=False).agg(
      total=("amount", "sum"),
      count=("amount", "size"),
    ).reset_index()
    grp = grp.sort_values("total", ascending=False, kind="mergesort")
    return [
      CategoryExpense(category=str(row["category"]), total=round(float(row["total"]), 2), count=int(row["count"]))
      for row in grp.to_dict(orient="records")
    ]

  async def monthly_expenses(self, transactions: List[Transaction], year: int, month: int) -> List[Transaction]:
    df = self.transactions_to_dataframe(transactions)
    mask = (df["type"] == "expense") & (df["year"] == year) & (df["month"] == month)
    keep = set(df.loc[mask, "id"])
    return [t for t in transactions if t.id in keep]


@lru_cache(maxsize=1)
def get_analytics_service() -> "AnalyticsService":
  return AnalyticsService(savings_goal=settings.SAVINGS_GOAL)
