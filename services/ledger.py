"""Account balance mutations and the transaction rows that justify them.

Balances are never derived from history: every site that inserts or deletes a
transaction also moves the owning account's balance, inside one unit of work.
"""
from __future__ import annotations

import logging
import uuid
from datetime import date
from decimal import Decimal

from sqlalchemy import select

from db import models
from db.engine import atomic
from schemas.domain import TransactionSchema, TransferSchema, positive_money
from services.errors import InvalidInputError
from services.repositories import Repository, validate

logger = logging.getLogger(__name__)

TRANSFER_CATEGORY = "Transfer"


def _signed(tx_type: str, amount) -> Decimal:
    amount = positive_money(amount)
    if tx_type == "income":
        return amount
    if tx_type == "expense":
        return -amount
    raise InvalidInputError(f"Unsupported transaction type {tx_type!r}")


def apply_transaction(session, account_id: str, tx_type: str, amount):
    """Add a transaction's effect to the account balance. Does not commit."""
    account = Repository(session, models.Account, "Account").require(account_id)
    account.balance = Decimal(account.balance or 0) + _signed(tx_type, amount)
    return account


def reverse_transaction(session, account_id: str, tx_type: str, amount):
    """Exact inverse of ``apply_transaction``. Does not commit."""
    account = Repository(session, models.Account, "Account").require(account_id)
    account.balance = Decimal(account.balance or 0) - _signed(tx_type, amount)
    return account


def ensure_funds(account, amount: Decimal) -> None:
    if Decimal(account.balance or 0) < amount:
        raise InvalidInputError(
            f"Insufficient balance in {account.name}: {account.balance} available, {amount} required"
        )


def post_transaction(
    session,
    data: TransactionSchema,
    transfer_id: str | None = None,
    recurring_rule_id: str | None = None,
):
    """Insert a validated transaction row and apply it. Caller owns the commit."""
    apply_transaction(session, data.account_id, data.type, data.amount)
    tx = models.Transaction(
        account_id=data.account_id,
        type=data.type,
        category=data.category,
        description=data.description,
        amount=data.amount,
        date=data.date,
        transfer_id=transfer_id,
        recurring_rule_id=recurring_rule_id,
    )
    session.add(tx)
    return tx


def post_transfer(
    session,
    data: TransferSchema,
    source_label: str | None = None,
    dest_label: str | None = None,
    recurring_rule_id: str | None = None,
):
    """Insert both legs of a transfer. Caller owns the commit."""
    repo = Repository(session, models.Account, "Account")
    source = repo.require(data.source_id)
    dest = repo.require(data.dest_id)
    note = f" ({data.description})" if data.description else ""
    transfer_id = str(uuid.uuid4())

    out_leg = post_transaction(
        session,
        TransactionSchema(
            account_id=source.id,
            type="expense",
            category=TRANSFER_CATEGORY,
            description=source_label or f"Transfer to {dest.name}{note}",
            amount=data.amount,
            date=data.date,
        ),
        transfer_id=transfer_id,
        recurring_rule_id=recurring_rule_id,
    )
    in_leg = post_transaction(
        session,
        TransactionSchema(
            account_id=dest.id,
            type="income",
            category=TRANSFER_CATEGORY,
            description=dest_label or f"Transfer from {source.name}{note}",
            amount=data.amount,
            date=data.date,
        ),
        transfer_id=transfer_id,
        recurring_rule_id=recurring_rule_id,
    )
    return out_leg, in_leg


def add_transaction(
    session,
    account_id: str,
    type: str,  # noqa: A002
    category: str,
    amount,
    date,
    description: str = "",
):
    data = validate(
        TransactionSchema,
        {
            "account_id": account_id,
            "type": type,
            "category": category,
            "description": description or "",
            "amount": amount,
            "date": date,
        },
    )
    account = Repository(session, models.Account, "Account").require(data.account_id)
    if data.type == "expense":
        ensure_funds(account, data.amount)

    with atomic(session):
        tx = post_transaction(session, data)
    session.refresh(tx)
    logger.info("Recorded %s of %s on %s (%s)", tx.type, tx.amount, account.name, tx.category)
    return tx


def delete_transaction(session, transaction_id: str) -> None:
    tx = Repository(session, models.Transaction, "Transaction").require(transaction_id)
    with atomic(session):
        reverse_transaction(session, tx.account_id, tx.type, tx.amount)
        session.delete(tx)
    logger.info("Deleted %s of %s from account %s", tx.type, tx.amount, tx.account_id)


def transfer(session, source_id: str, dest_id: str, amount, date, description: str | None = None):
    data = validate(
        TransferSchema,
        {"source_id": source_id, "dest_id": dest_id, "amount": amount, "date": date, "description": description},
    )
    repo = Repository(session, models.Account, "Account")
    source = repo.require(data.source_id)
    repo.require(data.dest_id)
    ensure_funds(source, data.amount)

    with atomic(session):
        legs = post_transfer(session, data)
    for leg in legs:
        session.refresh(leg)
    logger.info("Transferred %s from %s to %s", data.amount, data.source_id, data.dest_id)
    return legs


def list_transactions(
    session,
    start: date | None = None,
    end: date | None = None,
    account_id: str | None = None,
):
    stmt = select(models.Transaction)
    if start is not None:
        stmt = stmt.where(models.Transaction.date >= start)
    if end is not None:
        stmt = stmt.where(models.Transaction.date <= end)
    if account_id:
        stmt = stmt.where(models.Transaction.account_id == account_id)
    stmt = stmt.order_by(models.Transaction.date.desc(), models.Transaction.created_at.desc())
    return session.scalars(stmt).all()
