"""
Ledger Repositories
CRUD for the expense and income ledgers.

Both ledgers share one table layout, so a single base class carries the
queries and the subclasses only bind the model.
"""

from calendar import monthrange
from datetime import date
from decimal import Decimal
from typing import List, Optional, Type, Union

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.infrastructure.db.models import ExpenseModel, IncomeModel

LedgerModel = Union[ExpenseModel, IncomeModel]


class LedgerRepository:
    """Shared ledger queries, scoped by owning user"""

    model: Type[LedgerModel]

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(
        self,
        *,
        user_id: int,
        title: str,
        amount: Decimal,
        entry_date: date,
        description: Optional[str] = None,
        category_id: Optional[int] = None,
    ) -> LedgerModel:
        record = self.model(
            user_id=user_id,
            title=title,
            description=description,
            amount=amount,
            date=entry_date,
            category_id=category_id,
        )
        self.session.add(record)
        await self.session.flush()
        await self.session.refresh(record, attribute_names=["category"])
        return record

    async def get_for_user(self, entry_id: int, user_id: int) -> Optional[LedgerModel]:
        result = await self.session.execute(
            select(self.model).where(
                self.model.id == entry_id,
                self.model.user_id == user_id,
            )
        )
        return result.scalar_one_or_none()

    async def list_for_user(
        self,
        user_id: int,
        *,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        category_id: Optional[int] = None,
    ) -> List[LedgerModel]:
        stmt = select(self.model).where(self.model.user_id == user_id)
        if start_date is not None:
            stmt = stmt.where(self.model.date >= start_date)
        if end_date is not None:
            stmt = stmt.where(self.model.date <= end_date)
        if category_id is not None:
            stmt = stmt.where(self.model.category_id == category_id)

        result = await self.session.execute(
            stmt.order_by(self.model.date.desc(), self.model.id.desc())
        )
        return list(result.scalars().all())

    async def get_total_for_month(self, user_id: int, year: int, month: int) -> Decimal:
        first = date(year, month, 1)
        last = date(year, month, monthrange(year, month)[1])
        result = await self.session.execute(
            select(func.coalesce(func.sum(self.model.amount), 0)).where(
                self.model.user_id == user_id,
                self.model.date >= first,
                self.model.date <= last,
            )
        )
        return Decimal(str(result.scalar_one()))

    async def update(self, record: LedgerModel, changes: dict) -> LedgerModel:
        for key, value in changes.items():
            setattr(record, key, value)
        await self.session.flush()
        await self.session.refresh(record, attribute_names=["category"])
        return record

    async def delete(self, record: LedgerModel) -> None:
        await self.session.delete(record)
        await self.session.flush()


class ExpenseRepository(LedgerRepository):
    """Repository for expenses"""
    model = ExpenseModel


class IncomeRepository(LedgerRepository):
    """Repository for incomes"""
    model = IncomeModel
