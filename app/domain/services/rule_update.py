"""
Recurring rule update command.

Lists the user-editable fields of a rule explicitly. `last_generated` is
not one of them; only the recurring sweep writes it.
"""

from __future__ import annotations

from dataclasses import dataclass, fields, replace
from datetime import date
from decimal import Decimal
from typing import Any, Mapping, Optional, Union

from app.domain.models import RecurringFrequency, RecurringRule, TransactionType


class _Unset:
    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "UNSET"

    def __bool__(self) -> bool:
        return False


UNSET: Any = _Unset()

# Fields that may not be cleared to None
_REQUIRED = {"title", "amount", "frequency", "type", "start_date", "is_active"}


@dataclass(frozen=True)
class RecurringRuleUpdate:
    """Partial update of a recurring rule. UNSET fields are left untouched."""
    title: Union[str, _Unset] = UNSET
    description: Union[Optional[str], _Unset] = UNSET
    amount: Union[Decimal, _Unset] = UNSET
    frequency: Union[RecurringFrequency, _Unset] = UNSET
    type: Union[TransactionType, _Unset] = UNSET
    start_date: Union[date, _Unset] = UNSET
    end_date: Union[Optional[date], _Unset] = UNSET
    is_active: Union[bool, _Unset] = UNSET
    category_id: Union[Optional[int], _Unset] = UNSET

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "RecurringRuleUpdate":
        allowed = {f.name for f in fields(cls)}
        unknown = set(data) - allowed
        if unknown:
            raise ValueError(f"Fields cannot be updated: {', '.join(sorted(unknown))}")
        return cls(**dict(data))

    def changes(self) -> dict:
        """Only the fields that were explicitly provided"""
        return {
            f.name: getattr(self, f.name)
            for f in fields(self)
            if getattr(self, f.name) is not UNSET
        }


def apply_update(rule: RecurringRule, command: RecurringRuleUpdate) -> RecurringRule:
    """
    Merge `command` into `rule` field by field.

    Raises:
        ValueError: a required field is cleared, or the merged rule breaks
            a rule invariant (end_date before start_date, start_date
            after last_generated)
    """
    changes = command.changes()

    for name in _REQUIRED:
        if name in changes and changes[name] is None:
            raise ValueError(f"{name} cannot be null")

    if "frequency" in changes:
        changes["frequency"] = RecurringFrequency(changes["frequency"])
    if "type" in changes:
        changes["type"] = TransactionType(changes["type"])

    # replace() re-runs RecurringRule validation on the merged result
    updated = replace(rule, **changes)

    if updated.last_generated is not None and updated.start_date > updated.last_generated:
        raise ValueError(
            f"start_date cannot move past the last generated date ({updated.last_generated.isoformat()})"
        )
    return updated
