import pytest

from services.categories import DEFAULT_CATEGORIES, add_category, list_categories, seed_default_categories
from services.errors import InvalidInputError


def test_add_category_trims_and_dedupes_case_insensitively(session):
    created = add_category(session, "  Groceries ", "expense")
    assert created.name == "Groceries"

    with pytest.raises(InvalidInputError):
        add_category(session, "GROCERIES", "expense")

    # same name is allowed for the other type
    add_category(session, "groceries", "income")
    assert len(list_categories(session)) == 2


def test_add_category_validates_type_and_name(session):
    with pytest.raises(InvalidInputError):
        add_category(session, "Gifts", "transfer")
    with pytest.raises(InvalidInputError):
        add_category(session, "   ", "income")


def test_seed_default_categories_is_idempotent(session):
    first = seed_default_categories(session)
    second = seed_default_categories(session)

    assert first == sum(len(v) for v in DEFAULT_CATEGORIES.values())
    assert second == 0
    income = list_categories(session, "income")
    assert [c.name for c in income] == sorted(DEFAULT_CATEGORIES["income"])
