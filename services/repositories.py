from __future__ import annotations

from pydantic import ValidationError

from services.errors import InvalidInputError, NotFoundError, describe_validation_error


class Repository:
    def __init__(self, session, model, label: str | None = None):
        self.session = session
        self.model = model
        self.label = label or model.__name__

    def get(self, entity_id: str):
        return self.session.get(self.model, entity_id)

    def require(self, entity_id: str):
        entity = self.get(entity_id) if entity_id else None
        if entity is None:
            raise NotFoundError(f"{self.label} not found: {entity_id}")
        return entity


def validate(schema, payload: dict):
    """Build a pydantic schema, reporting failures as ``InvalidInputError``."""
    try:
        return schema(**payload)
    except ValidationError as exc:
        raise InvalidInputError(describe_validation_error(exc)) from exc
