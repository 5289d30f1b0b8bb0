from __future__ import annotations


class LedgerError(Exception):
    """Base class for failures reported by the service layer."""


class InvalidInputError(LedgerError, ValueError):
    pass


class NotFoundError(LedgerError, LookupError):
    pass


class PersistenceError(LedgerError):
    pass


def describe_validation_error(exc) -> str:
    parts = []
    for err in exc.errors():
        field = ".".join(str(p) for p in err.get("loc", ())) or "input"
        parts.append(f"{field}: {err.get('msg', 'invalid value')}")
    return "; ".join(parts)
