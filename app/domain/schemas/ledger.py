"""
Request / response models shared by the expense and income ledgers
"""

import datetime as dt
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from app.domain.schemas.categories import CategoryResponse
from app.utils.time import to_local_iso_db


class LedgerEntryCreate(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True, extra="forbid")

    title: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    amount: Decimal = Field(..., gt=0, max_digits=10, decimal_places=2)
    date: dt.date
    category_id: Optional[int] = None


class LedgerEntryUpdate(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True, extra="forbid")

    title: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None
    amount: Optional[Decimal] = Field(None, gt=0, max_digits=10, decimal_places=2)
    date: Optional[dt.date] = None
    category_id: Optional[int] = None


class LedgerEntryResponse(BaseModel):
    id: int
    title: str
    description: Optional[str]
    amount: float
    date: str
    user_id: int
    category_id: Optional[int]
    category: Optional[CategoryResponse]
    created_at: str
    updated_at: str

    @classmethod
    def from_model(cls, model) -> "LedgerEntryResponse":
        return cls(
            id=model.id,
            title=model.title,
            description=model.description,
            amount=float(model.amount),
            date=model.date.isoformat(),
            user_id=model.user_id,
            category_id=model.category_id,
            category=CategoryResponse.from_model(model.category) if model.category else None,
            created_at=to_local_iso_db(model.created_at),
            updated_at=to_local_iso_db(model.updated_at),
        )


class MonthlyTotalResponse(BaseModel):
    year: int
    month: int
    total: float
