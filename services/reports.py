from __future__ import annotations

import pandas as pd

from services.cycles import OVERALL, cycle_bounds
from services.ledger import list_transactions

TRANSACTION_COLUMNS = ["id", "date", "account_id", "type", "category", "description", "amount"]


def transactions_frame(transactions) -> pd.DataFrame:
    return pd.DataFrame(
        [
            {
                "id": t.id,
                "date": t.date,
                "account_id": t.account_id,
                "type": t.type,
                "category": t.category,
                "description": t.description,
                "amount": float(t.amount),
            }
            for t in transactions
        ],
        columns=TRANSACTION_COLUMNS,
    )


def category_breakdown(df: pd.DataFrame) -> pd.DataFrame:
    expenses = df[df["type"] == "expense"]
    if expenses.empty:
        return pd.DataFrame(columns=["category", "amount", "percentage"])

    grouped = expenses.groupby("category", as_index=False)["amount"].sum()
    total = grouped["amount"].sum()
    grouped["percentage"] = (grouped["amount"] / total * 100).round(2) if total > 0 else 0.0
    return grouped.sort_values("amount", ascending=False).reset_index(drop=True)


def daily_totals(df: pd.DataFrame) -> pd.DataFrame:
    if df.empty:
        return pd.DataFrame(columns=["date", "income", "expenses"])

    daily = df.groupby(["date", "type"])["amount"].sum().unstack(fill_value=0.0)
    daily = daily.reindex(columns=["income", "expense"], fill_value=0.0).rename(columns={"expense": "expenses"})
    daily = daily.rename_axis(columns=None).reset_index()
    return daily.sort_values("date").reset_index(drop=True)


def cycle_summary(session, cycle_value: str, cycle_start_day: int, account_id: str | None = None) -> dict:
    """Income, expenses and net for one cycle (or ``overall``)."""
    start, end = cycle_bounds(cycle_value, cycle_start_day)
    df = transactions_frame(list_transactions(session, start=start, end=end, account_id=account_id))

    income = float(df.loc[df["type"] == "income", "amount"].sum()) if not df.empty else 0.0
    expenses = float(df.loc[df["type"] == "expense", "amount"].sum()) if not df.empty else 0.0
    return {
        "cycle": cycle_value,
        "start": start,
        "end": end,
        "is_overall": cycle_value == OVERALL,
        "income": round(income, 2),
        "expenses": round(expenses, 2),
        "net": round(income - expenses, 2),
        "categories_df": category_breakdown(df),
        "daily_df": daily_totals(df),
        "transactions_df": df,
    }
