"""
Recurring transaction request / response models
"""

from datetime import date
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from app.domain.models import (
    RecurringFrequency,
    SweepEntry,
    SweepReport,
    TransactionType,
)
from app.domain.schemas.categories import CategoryResponse
from app.utils.time import to_local_iso_db


class RecurringTransactionCreate(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True, extra="forbid")

    title: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    amount: Decimal = Field(..., gt=0, max_digits=10, decimal_places=2)
    frequency: RecurringFrequency = RecurringFrequency.MONTHLY
    type: TransactionType = TransactionType.EXPENSE
    start_date: date
    end_date: Optional[date] = None
    is_active: bool = True
    category_id: Optional[int] = None

    @model_validator(mode="after")
    def check_dates(self):
        if self.end_date is not None and self.end_date < self.start_date:
            raise ValueError("end_date cannot be before start_date")
        return self


class RecurringTransactionUpdate(BaseModel):
    """
    Mutable fields only. Anything else (last_generated included) is
    rejected with 422.
    """
    model_config = ConfigDict(str_strip_whitespace=True, extra="forbid")

    title: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None
    amount: Optional[Decimal] = Field(None, gt=0, max_digits=10, decimal_places=2)
    frequency: Optional[RecurringFrequency] = None
    type: Optional[TransactionType] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    is_active: Optional[bool] = None
    category_id: Optional[int] = None


class RecurringTransactionResponse(BaseModel):
    id: int
    title: str
    description: Optional[str]
    amount: float
    frequency: RecurringFrequency
    type: TransactionType
    start_date: str
    end_date: Optional[str]
    is_active: bool
    user_id: int
    category_id: Optional[int]
    category: Optional[CategoryResponse]
    last_generated: Optional[str]
    created_at: str
    updated_at: str

    @classmethod
    def from_model(cls, model) -> "RecurringTransactionResponse":
        return cls(
            id=model.id,
            title=model.title,
            description=model.description,
            amount=float(model.amount),
            frequency=RecurringFrequency(model.frequency.value),
            type=TransactionType(model.type.value),
            start_date=model.start_date.isoformat(),
            end_date=model.end_date.isoformat() if model.end_date else None,
            is_active=model.is_active,
            user_id=model.user_id,
            category_id=model.category_id,
            category=CategoryResponse.from_model(model.category) if model.category else None,
            last_generated=model.last_generated.isoformat() if model.last_generated else None,
            created_at=to_local_iso_db(model.created_at),
            updated_at=to_local_iso_db(model.updated_at),
        )


class SweepEntryResponse(BaseModel):
    rule_id: int
    outcome: str
    error: Optional[str] = None
    transaction_type: Optional[str] = None
    transaction_id: Optional[int] = None

    @classmethod
    def from_entry(cls, entry: SweepEntry) -> "SweepEntryResponse":
        return cls(
            rule_id=entry.rule_id,
            outcome=entry.outcome.value,
            error=entry.error,
            transaction_type=entry.transaction.type.value if entry.transaction else None,
            transaction_id=entry.transaction.id if entry.transaction else None,
        )


class SweepReportResponse(BaseModel):
    """Totals and entries of a sweep over the caller's own rules"""
    reference_date: str
    generated: int
    skipped: int
    failed: int
    entries: List[SweepEntryResponse]

    @classmethod
    def from_report(cls, report: SweepReport, user_id: int) -> "SweepReportResponse":
        return cls(
            reference_date=report.reference_date.isoformat(),
            generated=report.generated,
            skipped=report.skipped,
            failed=report.failed,
            entries=[SweepEntryResponse.from_entry(e) for e in report.for_user(user_id)],
        )
