"""
Budget Repository
CRUD for monthly / annual budgets
"""

from decimal import Decimal
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.infrastructure.db.models import BudgetModel


class BudgetRepository:
    """Repository for budgets"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(
        self,
        *,
        user_id: int,
        title: str,
        amount: Decimal,
        period: str,
        year: int,
        month: Optional[int] = None,
        description: Optional[str] = None,
        category_id: Optional[int] = None,
    ) -> BudgetModel:
        model = BudgetModel(
            user_id=user_id,
            title=title,
            description=description,
            amount=amount,
            period=period,
            year=year,
            month=month,
            category_id=category_id,
        )
        self.session.add(model)
        await self.session.flush()
        await self.session.refresh(model, attribute_names=["category"])
        return model

    async def get_for_user(self, budget_id: int, user_id: int) -> Optional[BudgetModel]:
        result = await self.session.execute(
            select(BudgetModel).where(
                BudgetModel.id == budget_id,
                BudgetModel.user_id == user_id,
            )
        )
        return result.scalar_one_or_none()

    async def list_for_user(
        self,
        user_id: int,
        *,
        year: Optional[int] = None,
        month: Optional[int] = None,
        category_id: Optional[int] = None,
    ) -> List[BudgetModel]:
        stmt = select(BudgetModel).where(BudgetModel.user_id == user_id)
        if year is not None:
            stmt = stmt.where(BudgetModel.year == year)
            if month is not None:
                stmt = stmt.where(BudgetModel.month == month)
        if category_id is not None:
            stmt = stmt.where(BudgetModel.category_id == category_id)

        result = await self.session.execute(
            stmt.order_by(BudgetModel.year.desc(), BudgetModel.month.desc(), BudgetModel.id.desc())
        )
        return list(result.scalars().all())

    async def update(self, model: BudgetModel, changes: dict) -> BudgetModel:
        for key, value in changes.items():
            setattr(model, key, value)
        await self.session.flush()
        await self.session.refresh(model, attribute_names=["category"])
        return model

    async def delete(self, model: BudgetModel) -> None:
        await self.session.delete(model)
        await self.session.flush()
