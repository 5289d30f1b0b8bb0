"""Recurring transaction rules: creation, due detection, execution, deletion.

A rule's ``next_run_date`` only ever advances from its own previous value by
one interval, so paying early or late never shifts the future schedule.
"""
from __future__ import annotations

import logging
from datetime import date

from sqlalchemy import select

from db import models
from db.engine import atomic
from schemas.domain import RecurringRuleSchema, TransactionSchema, TransferSchema, positive_money
from services.dates import add_interval, parse_day
from services.errors import InvalidInputError
from services.ledger import post_transaction, post_transfer
from services.repositories import Repository, validate

logger = logging.getLogger(__name__)


def rules(session) -> Repository:
    return Repository(session, models.RecurringTransaction, "Recurring transaction")


def list_rules(session):
    return session.scalars(
        select(models.RecurringTransaction).order_by(
            models.RecurringTransaction.next_run_date, models.RecurringTransaction.created_at
        )
    ).all()


def create_rule(session, **payload):
    data = validate(RecurringRuleSchema, payload)
    accounts = Repository(session, models.Account, "Account")
    accounts.require(data.account_id)
    if data.type == "transfer":
        accounts.require(data.to_account_id)

    rule = models.RecurringTransaction(
        account_id=data.account_id,
        to_account_id=data.to_account_id,
        type=data.type,
        category=data.category,
        description=data.description,
        amount=data.amount,
        interval_unit=data.interval_unit,
        interval_value=data.interval_value,
        start_date=data.start_date,
        next_run_date=data.start_date,
        end_date=data.end_date,
        is_active=True,
    )
    with atomic(session):
        session.add(rule)
    session.refresh(rule)
    logger.info(
        "Created %s rule every %s %s(s) starting %s",
        rule.type,
        rule.interval_value,
        rule.interval_unit,
        rule.start_date,
    )
    return rule


def has_ended(rule) -> bool:
    return rule.end_date is not None and rule.next_run_date > rule.end_date


def is_due(rule, today=None) -> bool:
    today = parse_day(today or date.today())
    if not rule.is_active or has_ended(rule):
        return False
    return rule.next_run_date <= today


def due_rules(session, today=None):
    today = parse_day(today or date.today())
    return [rule for rule in list_rules(session) if is_due(rule, today)]


def next_run_after(rule) -> date:
    return add_interval(rule.next_run_date, rule.interval_unit, int(rule.interval_value))


def resolve_amount(rule, override_amount=None):
    # a fixed amount always wins over an override
    value = rule.amount if rule.amount is not None else override_amount
    if value is None:
        raise InvalidInputError("This recurring transaction has a variable amount; an amount is required")
    try:
        return positive_money(value)
    except (ArithmeticError, ValueError) as exc:
        raise InvalidInputError(f"Invalid amount {value!r}: amount must be greater than 0") from exc


def _materialize(session, rule, amount, effective_date: date):
    if rule.type == "transfer":
        accounts = Repository(session, models.Account, "Account")
        source = accounts.require(rule.account_id)
        dest = accounts.require(rule.to_account_id)
        return post_transfer(
            session,
            TransferSchema(
                source_id=source.id,
                dest_id=dest.id,
                amount=amount,
                date=effective_date,
                description=rule.description,
            ),
            source_label=f"Recurring Transfer to {dest.name} ({rule.description})",
            dest_label=f"Recurring Transfer from {source.name} ({rule.description})",
            recurring_rule_id=rule.id,
        )

    tx = post_transaction(
        session,
        TransactionSchema(
            account_id=rule.account_id,
            type=rule.type,
            category=rule.category,
            description=f"Recurring: {rule.description}",
            amount=amount,
            date=effective_date,
        ),
        recurring_rule_id=rule.id,
    )
    return (tx,)


def execute_rule(session, rule_id: str, override_amount=None, effective_date=None):
    """Materialize one occurrence of a rule and advance its schedule.

    Transactions are dated ``effective_date`` (today by default) while the
    schedule advances from the pre-execution ``next_run_date``.
    """
    rule = rules(session).require(rule_id)
    effective_date = parse_day(effective_date or date.today())
    if has_ended(rule):
        raise InvalidInputError(f"Recurring transaction ended on {rule.end_date}")
    amount = resolve_amount(rule, override_amount)
    scheduled_for = rule.next_run_date

    with atomic(session):
        created = _materialize(session, rule, amount, effective_date)
        rule.next_run_date = next_run_after(rule)
        rule.last_run_date = effective_date

    for tx in created:
        session.refresh(tx)
    session.refresh(rule)
    logger.info(
        "Executed %s rule %s for %s on %s; next run %s",
        rule.type,
        rule.id,
        scheduled_for,
        effective_date,
        rule.next_run_date,
    )
    return list(created)


def delete_rule(session, rule_id: str) -> None:
    rule = rules(session).require(rule_id)
    with atomic(session):
        session.delete(rule)
    logger.info("Deleted recurring rule %s", rule_id)
