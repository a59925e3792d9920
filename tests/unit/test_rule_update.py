from dataclasses import replace
from datetime import date
from decimal import Decimal

import pytest

from app.domain.models import RecurringFrequency, RecurringRule, TransactionType
from app.domain.services.rule_update import UNSET, RecurringRuleUpdate, apply_update


@pytest.fixture()
def rule() -> RecurringRule:
    return RecurringRule(
        id=7,
        user_id=3,
        title="Gym",
        amount=Decimal("45.00"),
        frequency=RecurringFrequency.MONTHLY,
        type=TransactionType.EXPENSE,
        start_date=date(2024, 1, 10),
        description="membership",
        category_id=2,
        last_generated=date(2024, 3, 10),
    )


@pytest.mark.unit
def test_unset_fields_are_left_untouched(rule):
    updated = apply_update(rule, RecurringRuleUpdate(amount=Decimal("50.00")))

    assert updated.amount == Decimal("50.00")
    assert updated.title == "Gym"
    assert updated.description == "membership"
    assert updated.category_id == 2
    assert updated.last_generated == date(2024, 3, 10)


@pytest.mark.unit
def test_optional_fields_can_be_cleared(rule):
    updated = apply_update(rule, RecurringRuleUpdate(description=None, category_id=None))

    assert updated.description is None
    assert updated.category_id is None


@pytest.mark.unit
def test_required_fields_cannot_be_cleared(rule):
    with pytest.raises(ValueError, match="title"):
        apply_update(rule, RecurringRuleUpdate(title=None))


@pytest.mark.unit
def test_merged_rule_is_validated(rule):
    with pytest.raises(ValueError):
        apply_update(rule, RecurringRuleUpdate(end_date=date(2023, 12, 31)))

    with pytest.raises(ValueError):
        apply_update(rule, RecurringRuleUpdate(start_date=date(2024, 6, 1), end_date=date(2024, 5, 1)))


@pytest.mark.unit
def test_enum_values_are_coerced(rule):
    updated = apply_update(rule, RecurringRuleUpdate(frequency="weekly", type="income"))

    assert updated.frequency is RecurringFrequency.WEEKLY
    assert updated.type is TransactionType.INCOME


@pytest.mark.unit
def test_from_mapping_rejects_last_generated():
    with pytest.raises(ValueError, match="last_generated"):
        RecurringRuleUpdate.from_mapping({"last_generated": date(2024, 1, 1)})


@pytest.mark.unit
def test_changes_only_lists_provided_fields():
    command = RecurringRuleUpdate.from_mapping({"title": "Pool", "end_date": None})

    assert command.changes() == {"title": "Pool", "end_date": None}
    assert command.amount is UNSET


@pytest.mark.unit
def test_start_date_cannot_pass_last_generated(rule):
    updated = apply_update(rule, RecurringRuleUpdate(start_date=date(2024, 3, 10)))
    assert updated.start_date == date(2024, 3, 10)

    with pytest.raises(ValueError, match="last generated"):
        apply_update(rule, RecurringRuleUpdate(start_date=date(2024, 3, 11)))


@pytest.mark.unit
def test_start_date_is_free_before_first_firing(rule):
    fresh = replace(rule, last_generated=None)

    updated = apply_update(fresh, RecurringRuleUpdate(start_date=date(2025, 1, 1)))
    assert updated.start_date == date(2025, 1, 1)
