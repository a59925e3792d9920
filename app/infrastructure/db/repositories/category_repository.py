"""
Category Repository
CRUD for the shared category catalogue
"""

from typing import List, Optional

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.infrastructure.db.models import (
    BudgetModel,
    CategoryModel,
    ExpenseModel,
    IncomeModel,
    RecurringTransactionModel,
)

# Tables holding a weak reference to a category
_REFERENCING_MODELS = (ExpenseModel, IncomeModel, BudgetModel, RecurringTransactionModel)


class CategoryRepository:
    """Repository for categories"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get(self, category_id: int) -> Optional[CategoryModel]:
        return await self.session.get(CategoryModel, category_id)

    async def exists(self, category_id: int) -> bool:
        result = await self.session.execute(
            select(CategoryModel.id).where(CategoryModel.id == category_id)
        )
        return result.scalar_one_or_none() is not None

    async def get_by_name(self, name: str) -> Optional[CategoryModel]:
        result = await self.session.execute(
            select(CategoryModel).where(CategoryModel.name == name)
        )
        return result.scalar_one_or_none()

    async def list_all(self) -> List[CategoryModel]:
        result = await self.session.execute(
            select(CategoryModel).order_by(CategoryModel.name.asc())
        )
        return list(result.scalars().all())

    async def create(
        self,
        *,
        name: str,
        description: Optional[str] = None,
        color: Optional[str] = None,
    ) -> CategoryModel:
        model = CategoryModel(name=name, description=description)
        if color:
            model.color = color
        self.session.add(model)
        await self.session.flush()
        return model

    async def update(self, model: CategoryModel, changes: dict) -> CategoryModel:
        for key, value in changes.items():
            setattr(model, key, value)
        await self.session.flush()
        return model

    async def delete(self, model: CategoryModel) -> None:
        """
        Delete a category and clear every reference to it.

        References are nulled explicitly so the behavior does not depend on
        the backend enforcing ON DELETE SET NULL (SQLite does not by default).
        """
        for ref_model in _REFERENCING_MODELS:
            await self.session.execute(
                update(ref_model)
                .where(ref_model.category_id == model.id)
                .values(category_id=None)
                .execution_options(synchronize_session="evaluate")
            )
        await self.session.delete(model)
        await self.session.flush()
