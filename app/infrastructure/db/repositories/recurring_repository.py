"""
Recurring Transaction Repository
CRUD for recurring rules plus the queries used by the daily sweep
"""

from datetime import date
from typing import List, Optional

from sqlalchemy import or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.domain.models import RecurringFrequency, RecurringRule, TransactionType
from app.infrastructure.db.models import (
    RecurringFrequencyEnum,
    RecurringTransactionModel,
    TransactionTypeEnum,
)


class RecurringTransactionRepository:
    """Repository for RecurringRule"""

    def __init__(self, session: AsyncSession):
        """Initialize with database session"""
        self.session = session

    async def create(self, rule: RecurringRule) -> RecurringTransactionModel:
        """
        Create new recurring rule

        Args:
            rule: RecurringRule domain object (id and last_generated ignored)

        Returns:
            Created model
        """
        model = RecurringTransactionModel(
            user_id=rule.user_id,
            title=rule.title,
            description=rule.description,
            amount=rule.amount,
            frequency=RecurringFrequencyEnum(rule.frequency.value),
            type=TransactionTypeEnum(rule.type.value),
            start_date=rule.start_date,
            end_date=rule.end_date,
            is_active=rule.is_active,
            category_id=rule.category_id,
        )

        self.session.add(model)
        await self.session.flush()
        await self.session.refresh(model, attribute_names=["category"])

        return model

    async def get_for_user(self, rule_id: int, user_id: int) -> Optional[RecurringTransactionModel]:
        result = await self.session.execute(
            select(RecurringTransactionModel).where(
                RecurringTransactionModel.id == rule_id,
                RecurringTransactionModel.user_id == user_id,
            )
        )
        return result.scalar_one_or_none()

    async def list_for_user(self, user_id: int) -> List[RecurringTransactionModel]:
        result = await self.session.execute(
            select(RecurringTransactionModel)
            .where(RecurringTransactionModel.user_id == user_id)
            .order_by(RecurringTransactionModel.created_at.desc(), RecurringTransactionModel.id.desc())
        )
        return list(result.scalars().all())

    async def save(self, model: RecurringTransactionModel, rule: RecurringRule) -> RecurringTransactionModel:
        """
        Write the user-editable fields of `rule` onto `model`.
        last_generated is never copied here.
        """
        model.title = rule.title
        model.description = rule.description
        model.amount = rule.amount
        model.frequency = RecurringFrequencyEnum(rule.frequency.value)
        model.type = TransactionTypeEnum(rule.type.value)
        model.start_date = rule.start_date
        model.end_date = rule.end_date
        model.is_active = rule.is_active
        model.category_id = rule.category_id

        await self.session.flush()
        await self.session.refresh(model, attribute_names=["category"])
        return model

    async def delete(self, model: RecurringTransactionModel) -> None:
        await self.session.delete(model)
        await self.session.flush()

    async def get_active_rules(self, user_id: Optional[int] = None) -> List[RecurringRule]:
        """Active rules as domain snapshots, across users unless `user_id` is given"""
        query = select(RecurringTransactionModel).where(RecurringTransactionModel.is_active.is_(True))
        if user_id is not None:
            query = query.where(RecurringTransactionModel.user_id == user_id)
        result = await self.session.execute(query.order_by(RecurringTransactionModel.id.asc()))
        return [self.to_domain(m) for m in result.scalars().all()]

    async def claim_for_date(self, rule_id: int, reference_date: date) -> bool:
        """
        Move last_generated forward to reference_date.

        The marker never moves backwards, so a back-dated manual sweep does
        not re-fire a rule that already fired on a later day.

        Returns:
            True if this caller advanced the marker, False if the rule was
            already fired on or after that date.
        """
        result = await self.session.execute(
            update(RecurringTransactionModel)
            .where(
                RecurringTransactionModel.id == rule_id,
                or_(
                    RecurringTransactionModel.last_generated.is_(None),
                    RecurringTransactionModel.last_generated < reference_date,
                ),
            )
            .values(last_generated=reference_date)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1

    @staticmethod
    def to_domain(model: RecurringTransactionModel) -> RecurringRule:
        """Convert database model to domain entity"""
        return RecurringRule(
            id=model.id,
            user_id=model.user_id,
            title=model.title,
            description=model.description,
            amount=model.amount,
            frequency=RecurringFrequency(model.frequency.value),
            type=TransactionType(model.type.value),
            start_date=model.start_date,
            end_date=model.end_date,
            is_active=model.is_active,
            category_id=model.category_id,
            last_generated=model.last_generated,
        )
