"""
Domain Models - Entities
Pure domain objects with no infrastructure dependencies
"""

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import List, Optional


class RecurringFrequency(str, Enum):
    """How often a recurring rule fires"""
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    YEARLY = "yearly"


class TransactionType(str, Enum):
    """Which ledger a rule writes to"""
    EXPENSE = "expense"
    INCOME = "income"


class SweepOutcome(str, Enum):
    """Terminal state of one rule within one sweep"""
    GENERATED = "generated"
    SKIPPED = "skipped"
    FAILED = "failed"


@dataclass(frozen=True)
class RecurringRule:
    """Recurring Rule - Immutable snapshot of a stored rule"""
    id: Optional[int]
    user_id: int
    title: str
    amount: Decimal
    frequency: RecurringFrequency
    type: TransactionType
    start_date: date
    description: Optional[str] = None
    end_date: Optional[date] = None
    is_active: bool = True
    category_id: Optional[int] = None
    last_generated: Optional[date] = None

    def __post_init__(self):
        if not self.title or not self.title.strip():
            raise ValueError("Rule title cannot be empty")
        if self.amount <= 0:
            raise ValueError("Rule amount must be positive")
        if self.end_date is not None and self.end_date < self.start_date:
            raise ValueError("Rule end date cannot be before start date")


@dataclass(frozen=True)
class GeneratedTransaction:
    """Ledger entry produced by firing a rule"""
    id: int
    type: TransactionType
    user_id: int
    title: str
    amount: Decimal
    date: date
    description: Optional[str] = None
    category_id: Optional[int] = None


@dataclass(frozen=True)
class SweepEntry:
    """Outcome for a single rule"""
    rule_id: int
    user_id: int
    outcome: SweepOutcome
    error: Optional[str] = None
    transaction: Optional[GeneratedTransaction] = None


@dataclass
class SweepReport:
    """Result of one sweep over all active rules"""
    reference_date: date
    entries: List[SweepEntry] = field(default_factory=list)

    def record(self, entry: SweepEntry) -> None:
        self.entries.append(entry)

    def _count(self, outcome: SweepOutcome) -> int:
        return sum(1 for e in self.entries if e.outcome == outcome)

    @property
    def generated(self) -> int:
        return self._count(SweepOutcome.GENERATED)

    @property
    def skipped(self) -> int:
        return self._count(SweepOutcome.SKIPPED)

    @property
    def failed(self) -> int:
        return self._count(SweepOutcome.FAILED)

    def for_user(self, user_id: int) -> List[SweepEntry]:
        return [e for e in self.entries if e.user_id == user_id]
