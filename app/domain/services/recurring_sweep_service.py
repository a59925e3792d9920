"""
Recurring Sweep Service
One pass over every active recurring rule for a single reference date.

Per rule and per sweep: PENDING -> GENERATED | SKIPPED | FAILED.
Each fired rule is its own unit of work: the last_generated claim and the
ledger insert commit together or roll back together, so a failed insert
never advances the rule.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import date
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from app.domain.models import SweepEntry, SweepOutcome, SweepReport
from app.domain.services.recurrence_engine import should_fire
from app.domain.services.transaction_materializer import TransactionMaterializer
from app.infrastructure.db.repositories.category_repository import CategoryRepository
from app.infrastructure.db.repositories.ledger_repository import ExpenseRepository, IncomeRepository
from app.infrastructure.db.repositories.recurring_repository import RecurringTransactionRepository

logger = logging.getLogger(__name__)

# One sweep at a time per process (cron job and manual trigger share it)
_SWEEP_LOCK = asyncio.Lock()


class SweepError(RuntimeError):
    """The sweep could not run at all (e.g. rules could not be loaded)"""


class RecurringSweepService:
    """Materializes due recurring rules into expenses / incomes"""

    def __init__(
        self,
        session: AsyncSession,
        materializer: Optional[TransactionMaterializer] = None,
    ):
        self.session = session
        self.rule_repo = RecurringTransactionRepository(session)
        self.materializer = materializer or TransactionMaterializer(
            expense_store=ExpenseRepository(session),
            income_store=IncomeRepository(session),
            category_store=CategoryRepository(session),
        )

    async def run_sweep(self, reference_date: date, user_id: Optional[int] = None) -> SweepReport:
        """
        Evaluate and fire all active rules for `reference_date`.
        With `user_id`, only that user's rules are evaluated.

        Raises:
            SweepError: if the rule set cannot be loaded
        """
        async with _SWEEP_LOCK:
            return await self._run(reference_date, user_id)

    async def _run(self, reference_date: date, user_id: Optional[int]) -> SweepReport:
        scope = f"user {user_id}" if user_id is not None else "all users"
        logger.info(f"🔄 Recurring sweep started for {reference_date} ({scope})")

        try:
            rules = await self.rule_repo.get_active_rules(user_id=user_id)
            # End the read transaction before per-rule units of work
            await self.session.commit()
        except Exception as exc:
            await self.session.rollback()
            logger.error(f"❌ Could not load recurring rules: {exc}")
            raise SweepError(f"Could not load recurring rules: {exc}") from exc

        report = SweepReport(reference_date=reference_date)

        for rule in rules:
            if not should_fire(rule, reference_date):
                report.record(SweepEntry(rule_id=rule.id, user_id=rule.user_id, outcome=SweepOutcome.SKIPPED))
                continue

            try:
                claimed = await self.rule_repo.claim_for_date(rule.id, reference_date)
                if not claimed:
                    # Already fired on or after this date (concurrent or later sweep)
                    await self.session.rollback()
                    report.record(SweepEntry(rule_id=rule.id, user_id=rule.user_id, outcome=SweepOutcome.SKIPPED))
                    continue

                generated = await self.materializer.materialize(rule, reference_date)
                await self.session.commit()
            except Exception as exc:
                await self.session.rollback()
                logger.exception(f"Recurring rule {rule.id} failed for {reference_date}")
                report.record(
                    SweepEntry(
                        rule_id=rule.id,
                        user_id=rule.user_id,
                        outcome=SweepOutcome.FAILED,
                        error=str(exc) or exc.__class__.__name__,
                    )
                )
                continue

            report.record(
                SweepEntry(
                    rule_id=rule.id,
                    user_id=rule.user_id,
                    outcome=SweepOutcome.GENERATED,
                    transaction=generated,
                )
            )

        logger.info(
            f"✅ Recurring sweep {reference_date}: "
            f"{report.generated} generated, {report.skipped} skipped, {report.failed} failed"
        )
        return report
