from __future__ import annotations

import logging
from datetime import date

from apscheduler.schedulers.background import BackgroundScheduler

from db.config import get_config
from services.errors import InvalidInputError, NotFoundError
from services.recurring import due_rules, execute_rule

logger = logging.getLogger(__name__)

JOB_ID = "recurring_due_tick"


def run_scheduled_tick(session_factory, today: date | None = None) -> list[str]:
    """Execute every due fixed-amount rule once. Returns the executed rule ids.

    Variable-amount rules need a user-supplied amount and are left due.
    Rules that are several intervals behind catch up one interval per tick.
    """
    today = today or date.today()
    session = session_factory()
    executed = []
    try:
        for rule in due_rules(session, today):
            if rule.amount is None:
                logger.info("Skipping variable-amount rule %s; needs a manual amount", rule.id)
                continue
            try:
                execute_rule(session, rule.id, effective_date=today)
            except (InvalidInputError, NotFoundError) as exc:
                logger.warning("Recurring rule %s was not executed: %s", rule.id, exc)
                continue
            executed.append(rule.id)
        logger.info("Scheduler tick executed %d recurring rule(s)", len(executed))
        return executed
    finally:
        session.close()


def build_scheduler(session_factory, interval_minutes: int | None = None):
    scheduler = BackgroundScheduler(timezone="UTC")
    scheduler.add_job(
        run_scheduled_tick,
        "interval",
        minutes=interval_minutes or get_config().scheduler_interval_minutes,
        id=JOB_ID,
        replace_existing=True,
        coalesce=True,
        max_instances=1,
        args=[session_factory],
    )
    return scheduler


def start_local_scheduler(session_factory):
    if not get_config().scheduler_enabled:
        logger.info("Recurring scheduler disabled")
        return None
    scheduler = build_scheduler(session_factory)
    scheduler.start()
    return scheduler
