from __future__ import annotations

from datetime import date
from typing import List, Optional

import pandas as pd

from transactions.transaction_model import Transaction


CSV_COLUMNS = ["Date", "Description", "Category", "Type", "Amount", "Notes"]


def transactions_to_csv(transactions: List[Transaction]) -> str:
    rows = [
        {
            "Date": t.date,
            "Description": t.description,
            "Category": t.category,
            "Type": t.type,
            "Amount": str(t.amount),
            "Notes": t.notes or "",
        }
        for t in transactions
    ]
    df = pd.DataFrame(rows, columns=CSV_COLUMNS)
    return df.to_csv(index=False, lineterminator="\n")


def export_filename(today: Optional[date] = None) -> str:
    today = today or date.today()
    return f"transactions_{today.isoformat()}.csv"


def search_transactions(
    transactions: List[Transaction],
    search: Optional[str] = None,
    type: Optional[str] = None,
    category: Optional[str] = None,
) -> List[Transaction]:
    """Case-insensitive match on description or category, plus exact filters."""
    needle = search.strip().lower() if search else ""
    matched = []
    for t in transactions:
        if type and t.type != type:
            continue
        if category and t.category != category:
            continue
        if needle and needle not in t.description.lower() and needle not in t.category.lower():
            continue
        matched.append(t)
    return matched
