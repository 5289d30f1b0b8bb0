from decimal import Decimal

import pytest

from services.accounts import create_account, delete_account, get_primary_account, list_accounts, update_account
from services.errors import InvalidInputError, NotFoundError
from services.ledger import add_transaction


def test_create_and_list_accounts_main_first(session):
    create_account(session, "Holiday Fund", "saving", "120.555")
    create_account(session, "  Wallet ", "main", 50)

    accounts = list_accounts(session)
    assert [a.name for a in accounts] == ["Wallet", "Holiday Fund"]
    assert accounts[1].balance == Decimal("120.56")
    assert get_primary_account(session).name == "Wallet"


def test_only_one_main_account(session):
    create_account(session, "Wallet", "main")
    with pytest.raises(InvalidInputError):
        create_account(session, "Checking", "main")


def test_duplicate_names_rejected_case_insensitively(session):
    create_account(session, "Wallet")
    with pytest.raises(InvalidInputError):
        create_account(session, "wallet")


def test_update_account_keeps_balance(session):
    account = create_account(session, "Wallet", "custom", 80)
    updated = update_account(session, account.id, "Daily", "main")
    assert (updated.name, updated.type, updated.balance) == ("Daily", "main", Decimal("80.00"))
    with pytest.raises(NotFoundError):
        update_account(session, "missing", "X", "custom")


def test_delete_account_with_history_is_rejected(session):
    used = create_account(session, "Wallet", "main", 10)
    spare = create_account(session, "Spare")
    add_transaction(session, used.id, "expense", "Food", 5, "2024-01-01")

    with pytest.raises(InvalidInputError):
        delete_account(session, used.id)
    delete_account(session, spare.id)
    assert [a.name for a in list_accounts(session)] == ["Wallet"]
