from __future__ import annotations

import logging

from sqlalchemy import func, or_, select

from db import models
from db.engine import atomic
from schemas.domain import AccountSchema
from services.errors import InvalidInputError
from services.repositories import Repository, validate

logger = logging.getLogger(__name__)


def accounts(session) -> Repository:
    return Repository(session, models.Account, "Account")


def list_accounts(session):
    # main first, then by name
    return session.scalars(
        select(models.Account).order_by((models.Account.type != "main"), models.Account.name)
    ).all()


def get_primary_account(session):
    return session.scalar(select(models.Account).where(models.Account.type == "main").order_by(models.Account.created_at))


def _check_unique(session, name: str, account_type: str, exclude_id: str | None = None):
    name_clash = select(models.Account.id).where(func.lower(models.Account.name) == name.lower())
    if exclude_id:
        name_clash = name_clash.where(models.Account.id != exclude_id)
    if session.scalar(name_clash):
        raise InvalidInputError(f"Account already exists: {name}")

    if account_type == "main":
        primary = get_primary_account(session)
        if primary and primary.id != exclude_id:
            raise InvalidInputError(f"A main account already exists: {primary.name}")


def create_account(session, name: str, type: str = "custom", balance=0):  # noqa: A002
    data = validate(AccountSchema, {"name": name, "type": type, "balance": balance})
    _check_unique(session, data.name, data.type)

    account = models.Account(name=data.name, type=data.type, balance=data.balance)
    with atomic(session):
        session.add(account)
    session.refresh(account)
    logger.info("Created %s account %s with opening balance %s", account.type, account.name, account.balance)
    return account


def update_account(session, account_id: str, name: str, type: str):  # noqa: A002
    account = accounts(session).require(account_id)
    data = validate(AccountSchema, {"name": name, "type": type, "balance": account.balance})
    _check_unique(session, data.name, data.type, exclude_id=account.id)

    with atomic(session):
        account.name = data.name
        account.type = data.type
    session.refresh(account)
    return account


def delete_account(session, account_id: str) -> None:
    account = accounts(session).require(account_id)
    in_use = session.scalar(
        select(func.count()).select_from(models.Transaction).where(models.Transaction.account_id == account.id)
    )
    in_use += session.scalar(
        select(func.count())
        .select_from(models.RecurringTransaction)
        .where(
            or_(
                models.RecurringTransaction.account_id == account.id,
                models.RecurringTransaction.to_account_id == account.id,
            )
        )
    )
    if in_use:
        raise InvalidInputError(f"Account {account.name} still has transactions or recurring rules")

    with atomic(session):
        session.delete(account)
    logger.info("Deleted account %s", account.name)
