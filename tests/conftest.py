from decimal import Decimal

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from db import models
from db.config import get_config
from db.engine import Base


@pytest.fixture()
def session():
    engine = create_engine("sqlite:///:memory:")
    TestingSessionLocal = sessionmaker(bind=engine)
    Base.metadata.create_all(bind=engine)
    db = TestingSessionLocal()
    yield db
    db.close()


@pytest.fixture()
def accounts(session):
    main = models.Account(name="Checking", type="main", balance=Decimal("1000.00"))
    saving = models.Account(name="Savings", type="saving", balance=Decimal("250.00"))
    session.add_all([main, saving])
    session.commit()
    return main, saving


@pytest.fixture()
def scheduler_switch(monkeypatch):
    """Flip ``LEDGER_SCHEDULER_ENABLED`` for one test."""

    def flip(enabled: bool):
        monkeypatch.setenv("LEDGER_SCHEDULER_ENABLED", "true" if enabled else "false")
        get_config.cache_clear()

    yield flip
    get_config.cache_clear()
