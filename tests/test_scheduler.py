from datetime import date
from decimal import Decimal

from db import models
from services.recurring import create_rule
from services.scheduler import JOB_ID, build_scheduler, run_scheduled_tick, start_local_scheduler


class DummySession:
    def close(self):
        pass


def _factory():
    return DummySession()


class _KeepOpen:
    """Session factory that hands out the test session without closing it."""

    def __init__(self, session):
        self.session = session

    def __call__(self):
        return self

    def __getattr__(self, name):
        return getattr(self.session, name)

    def close(self):
        pass


def test_build_scheduler_registers_tick_job():
    scheduler = build_scheduler(_factory, interval_minutes=5)
    jobs = scheduler.get_jobs()

    assert len(jobs) == 1
    assert jobs[0].id == JOB_ID


def test_tick_executes_due_fixed_rules_only(session, accounts):
    main, _ = accounts
    fixed = create_rule(
        session,
        account_id=main.id,
        type="expense",
        category="Housing",
        description="Rent",
        amount=100,
        interval_unit="month",
        start_date="2024-03-01",
    )
    variable = create_rule(
        session,
        account_id=main.id,
        type="expense",
        category="Utilities",
        description="Power",
        interval_unit="month",
        start_date="2024-03-01",
    )
    create_rule(
        session,
        account_id=main.id,
        type="expense",
        category="Other",
        description="Later",
        amount=5,
        interval_unit="month",
        start_date="2024-04-01",
    )

    executed = run_scheduled_tick(_KeepOpen(session), today=date(2024, 3, 2))

    assert executed == [fixed.id]
    session.refresh(fixed)
    session.refresh(variable)
    assert fixed.next_run_date == date(2024, 4, 1)
    assert variable.next_run_date == date(2024, 3, 1)
    session.refresh(main)
    assert main.balance == Decimal("900.00")
    assert session.query(models.Transaction).count() == 1


def test_local_scheduler_stays_off_unless_enabled(scheduler_switch):
    scheduler_switch(False)
    assert start_local_scheduler(_factory) is None


def test_local_scheduler_starts_when_enabled(scheduler_switch):
    scheduler_switch(True)
    scheduler = start_local_scheduler(_factory)
    try:
        assert scheduler.running
        assert scheduler.get_job(JOB_ID) is not None
    finally:
        scheduler.shutdown(wait=False)
