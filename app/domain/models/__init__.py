"""
Domain Models Package
Export all domain entities
"""

from .entities import (
    # Enums
    RecurringFrequency,
    SweepOutcome,
    TransactionType,

    # Entities
    GeneratedTransaction,
    RecurringRule,
    SweepEntry,
    SweepReport,
)

__all__ = [
    # Enums
    "RecurringFrequency",
    "SweepOutcome",
    "TransactionType",

    # Entities
    "GeneratedTransaction",
    "RecurringRule",
    "SweepEntry",
    "SweepReport",
]
