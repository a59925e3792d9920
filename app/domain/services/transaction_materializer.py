"""
TRANSACTION MATERIALIZER
Turns one firing decision into one ledger row.

RULES:
- Writes to the expense ledger for EXPENSE rules, the income ledger for
  INCOME rules. Never both, never neither.
- Performs no deduplication; the sweep calls it at most once per rule.
- A category that no longer exists is treated as absent.
- Write errors propagate to the caller.
"""

from datetime import date
from typing import Optional, Protocol

from app.domain.models import GeneratedTransaction, RecurringRule, TransactionType


class LedgerStore(Protocol):
    """Protocol for an expense or income ledger - ASYNC"""

    async def create(
        self,
        *,
        user_id: int,
        title: str,
        amount,
        entry_date: date,
        description: Optional[str] = None,
        category_id: Optional[int] = None,
    ):
        """Insert one ledger row and return it"""
        ...


class CategoryStore(Protocol):
    """Protocol for category lookups - ASYNC"""

    async def exists(self, category_id: int) -> bool:
        ...


class TransactionMaterializer:
    """Creates the concrete expense / income for a fired rule"""

    def __init__(
        self,
        expense_store: LedgerStore,
        income_store: LedgerStore,
        category_store: CategoryStore,
    ):
        self.expense_store = expense_store
        self.income_store = income_store
        self.category_store = category_store

    async def materialize(self, rule: RecurringRule, reference_date: date) -> GeneratedTransaction:
        """
        Insert the ledger row for `rule` dated `reference_date`.

        Returns:
            GeneratedTransaction describing the inserted row
        """
        category_id = rule.category_id
        if category_id is not None and not await self.category_store.exists(category_id):
            category_id = None

        store = self.expense_store if rule.type == TransactionType.EXPENSE else self.income_store

        record = await store.create(
            user_id=rule.user_id,
            title=rule.title,
            description=rule.description,
            amount=rule.amount,
            entry_date=reference_date,
            category_id=category_id,
        )

        return GeneratedTransaction(
            id=record.id,
            type=rule.type,
            user_id=rule.user_id,
            title=rule.title,
            description=rule.description,
            amount=rule.amount,
            date=reference_date,
            category_id=category_id,
        )
