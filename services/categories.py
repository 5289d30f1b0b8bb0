from __future__ import annotations

import logging

from sqlalchemy import func, select

from db import models
from db.engine import atomic
from schemas.domain import CategorySchema
from services.errors import InvalidInputError
from services.repositories import validate

logger = logging.getLogger(__name__)

DEFAULT_CATEGORIES = {
    "income": ("Salary", "Freelance", "Investments", "Other Income"),
    "expense": (
        "Housing",
        "Food",
        "Transportation",
        "Utilities",
        "Entertainment",
        "Healthcare",
        "Shopping",
        "Other",
    ),
}


def _find(session, name: str, category_type: str):
    return session.scalar(
        select(models.Category).where(
            func.lower(models.Category.name) == name.lower(),
            models.Category.type == category_type,
        )
    )


def list_categories(session, category_type: str | None = None):
    stmt = select(models.Category).order_by(models.Category.name)
    if category_type:
        stmt = stmt.where(models.Category.type == category_type)
    return session.scalars(stmt).all()


def add_category(session, name: str, type: str):  # noqa: A002
    data = validate(CategorySchema, {"name": name, "type": type})
    if _find(session, data.name, data.type):
        raise InvalidInputError("Category already exists")

    category = models.Category(name=data.name, type=data.type)
    with atomic(session):
        session.add(category)
    session.refresh(category)
    logger.info("Added %s category %s", category.type, category.name)
    return category


def seed_default_categories(session) -> int:
    created = 0
    with atomic(session):
        for category_type, names in DEFAULT_CATEGORIES.items():
            for name in names:
                if _find(session, name, category_type):
                    continue
                session.add(models.Category(name=name, type=category_type))
                created += 1
            session.flush()
    return created
