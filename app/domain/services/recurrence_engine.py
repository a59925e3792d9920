"""
RECURRENCE ENGINE
Decides whether a recurring rule fires on a reference date.

RULES:
- Pure function, no I/O, no clock access
- Checks run in order, the first failing check returns False
- MONTHLY / YEARLY compare the raw day of month. A rule started on the
  31st never fires in shorter months, and a YEARLY rule started on
  Feb 29 only fires in leap years. No end-of-month clamping.
"""

from datetime import date

from app.domain.models import RecurringFrequency, RecurringRule


def should_fire(rule: RecurringRule, reference_date: date) -> bool:
    """
    Return True if `rule` should produce a transaction on `reference_date`.

    Args:
        rule: Rule snapshot
        reference_date: The sweep date ("today")

    Returns:
        bool
    """
    if rule.end_date is not None and reference_date > rule.end_date:
        return False

    if reference_date < rule.start_date:
        return False

    # At most once per calendar day
    if rule.last_generated is not None and rule.last_generated == reference_date:
        return False

    if rule.frequency == RecurringFrequency.DAILY:
        return True

    if rule.frequency == RecurringFrequency.WEEKLY:
        return (reference_date - rule.start_date).days % 7 == 0

    if rule.frequency == RecurringFrequency.MONTHLY:
        return reference_date.day == rule.start_date.day

    if rule.frequency == RecurringFrequency.YEARLY:
        return (
            reference_date.month == rule.start_date.month
            and reference_date.day == rule.start_date.day
        )

    return False
