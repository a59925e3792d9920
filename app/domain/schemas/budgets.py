from decimal import Decimal
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from app.domain.schemas.categories import CategoryResponse
from app.utils.time import to_local_iso_db

BudgetPeriod = Literal["monthly", "annual"]


class BudgetCreate(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True, extra="forbid")

    title: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    amount: Decimal = Field(..., gt=0, max_digits=10, decimal_places=2)
    period: BudgetPeriod
    year: int = Field(..., ge=2000, le=2100)
    month: Optional[int] = Field(None, ge=1, le=12, description="1-12, monthly budgets only")
    category_id: Optional[int] = None

    @model_validator(mode="after")
    def check_month_for_period(self):
        if self.period == "monthly" and self.month is None:
            raise ValueError("month is required for monthly budgets")
        return self


class BudgetUpdate(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True, extra="forbid")

    title: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None
    amount: Optional[Decimal] = Field(None, gt=0, max_digits=10, decimal_places=2)
    period: Optional[BudgetPeriod] = None
    year: Optional[int] = Field(None, ge=2000, le=2100)
    month: Optional[int] = Field(None, ge=1, le=12)
    category_id: Optional[int] = None


class BudgetResponse(BaseModel):
    id: int
    title: str
    description: Optional[str]
    amount: float
    period: str
    year: int
    month: Optional[int]
    user_id: int
    category_id: Optional[int]
    category: Optional[CategoryResponse]
    created_at: str
    updated_at: str

    @classmethod
    def from_model(cls, model) -> "BudgetResponse":
        return cls(
            id=model.id,
            title=model.title,
            description=model.description,
            amount=float(model.amount),
            period=model.period,
            year=model.year,
            month=model.month,
            user_id=model.user_id,
            category_id=model.category_id,
            category=CategoryResponse.from_model(model.category) if model.category else None,
            created_at=to_local_iso_db(model.created_at),
            updated_at=to_local_iso_db(model.updated_at),
        )
