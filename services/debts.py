from __future__ import annotations

import logging
from decimal import Decimal

import pandas as pd
from sqlalchemy import select

from db import models
from db.engine import atomic
from schemas.domain import DebtPaymentSchema, DebtSchema, TransactionSchema
from services.ledger import ensure_funds, post_transaction
from services.repositories import Repository, validate

logger = logging.getLogger(__name__)

DEBT_PAYMENT_CATEGORY = "Debt Payment"


def debts(session) -> Repository:
    return Repository(session, models.Debt, "Debt")


def list_debts(session):
    return session.scalars(select(models.Debt).order_by(models.Debt.created_at.desc())).all()


def add_debt(session, **payload):
    data = validate(DebtSchema, payload)
    debt = models.Debt(**data.model_dump())
    with atomic(session):
        session.add(debt)
    session.refresh(debt)
    logger.info("Added debt %s with balance %s", debt.name, debt.current_balance)
    return debt


def update_debt(session, debt_id: str, **payload):
    debt = debts(session).require(debt_id)
    current = {
        "name": debt.name,
        "total_amount": debt.total_amount,
        "current_balance": debt.current_balance,
        "interest_rate": debt.interest_rate,
        "minimum_payment": debt.minimum_payment,
        "due_date": debt.due_date,
        "start_date": debt.start_date,
        "notes": debt.notes,
    }
    data = validate(DebtSchema, {**current, **payload})
    with atomic(session):
        for field, value in data.model_dump().items():
            setattr(debt, field, value)
    session.refresh(debt)
    return debt


def delete_debt(session, debt_id: str) -> None:
    debt = debts(session).require(debt_id)
    with atomic(session):
        session.delete(debt)
    logger.info("Deleted debt %s", debt.name)


def pay_debt(session, debt_id: str, account_id: str, amount, date, description: str | None = None):
    """Record a payment as an expense on ``account_id`` and reduce the debt balance."""
    data = validate(
        DebtPaymentSchema,
        {"debt_id": debt_id, "account_id": account_id, "amount": amount, "date": date, "description": description},
    )
    debt = debts(session).require(data.debt_id)
    account = Repository(session, models.Account, "Account").require(data.account_id)
    ensure_funds(account, data.amount)

    with atomic(session):
        tx = post_transaction(
            session,
            TransactionSchema(
                account_id=account.id,
                type="expense",
                category=DEBT_PAYMENT_CATEGORY,
                description=data.description or f"Payment for {debt.name}",
                amount=data.amount,
                date=data.date,
            ),
        )
        debt.current_balance = Decimal(debt.current_balance) - data.amount
    session.refresh(tx)
    session.refresh(debt)
    logger.info("Paid %s towards %s from %s", data.amount, debt.name, account.name)
    return tx


def debt_summary(session) -> dict:
    rows = list_debts(session)
    df = pd.DataFrame(
        [
            {
                "id": d.id,
                "debt": d.name,
                "total_amount": float(d.total_amount),
                "current_balance": float(d.current_balance),
                "interest_rate": float(d.interest_rate or 0),
                "minimum_payment": float(d.minimum_payment or 0),
                "due_date": d.due_date,
            }
            for d in rows
        ],
        columns=["id", "debt", "total_amount", "current_balance", "interest_rate", "minimum_payment", "due_date"],
    )
    if df.empty:
        df["paid_off_pct"] = pd.Series(dtype=float)
        return {"total_debt": 0.0, "total_minimum_payment": 0.0, "weighted_interest_rate": 0.0, "debts_df": df}

    paid = df["total_amount"] - df["current_balance"]
    df["paid_off_pct"] = (paid / df["total_amount"].where(df["total_amount"] > 0) * 100).fillna(0.0).round(2)

    total_debt = float(df["current_balance"].sum())
    weighted = float((df["current_balance"] * df["interest_rate"]).sum() / total_debt) if total_debt > 0 else 0.0
    return {
        "total_debt": round(total_debt, 2),
        "total_minimum_payment": round(float(df["minimum_payment"].sum()), 2),
        "weighted_interest_rate": round(weighted, 2),
        "debts_df": df,
    }
