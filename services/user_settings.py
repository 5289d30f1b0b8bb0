from __future__ import annotations

import logging

from sqlalchemy import select

from db import models
from db.engine import atomic
from schemas.domain import SettingsSchema
from services.repositories import validate

logger = logging.getLogger(__name__)

DEFAULT_CYCLE_START_DAY = 1
DEFAULT_CURRENCY = "USD"


def get_or_create_settings(session):
    settings = session.scalar(select(models.Settings).limit(1))
    if settings:
        return settings

    settings = models.Settings(cycle_start_day=DEFAULT_CYCLE_START_DAY, currency=DEFAULT_CURRENCY)
    with atomic(session):
        session.add(settings)
    session.refresh(settings)
    return settings


def save_settings(session, cycle_start_day: int, currency: str):
    data = validate(SettingsSchema, {"cycle_start_day": cycle_start_day, "currency": currency})
    settings = get_or_create_settings(session)
    with atomic(session):
        settings.cycle_start_day = data.cycle_start_day
        settings.currency = data.currency
    session.refresh(settings)
    logger.info("Settings updated: cycle_start_day=%s currency=%s", settings.cycle_start_day, settings.currency)
    return settings
