from datetime import date, timedelta
from decimal import Decimal

import pytest
from sqlalchemy import delete, select

from app.domain.models import RecurringFrequency, RecurringRule, SweepOutcome, TransactionType
from app.domain.services.recurring_sweep_service import RecurringSweepService, SweepError
from app.domain.services.transaction_materializer import TransactionMaterializer
from app.infrastructure.db.models import CategoryModel, ExpenseModel, IncomeModel, RecurringTransactionModel
from app.infrastructure.db.repositories.category_repository import CategoryRepository
from app.infrastructure.db.repositories.ledger_repository import IncomeRepository
from app.infrastructure.db.repositories.recurring_repository import RecurringTransactionRepository
from app.infrastructure.db.repositories.user_repository import UserRepository


class FailingLedgerStore:
    """Ledger store whose writes always fail"""

    async def create(self, **kwargs):
        raise RuntimeError("disk full")


async def _create_user(session, email="sweep@example.com"):
    user = await UserRepository(session).create(
        email=email,
        password_hash="x",
        first_name="Sweep",
        last_name="Test",
    )
    await session.commit()
    return user.id


async def _create_rule(session, user_id, **overrides):
    values = dict(
        id=None,
        user_id=user_id,
        title="Rent",
        amount=Decimal("100"),
        frequency=RecurringFrequency.DAILY,
        type=TransactionType.EXPENSE,
        start_date=date(2024, 1, 1),
    )
    values.update(overrides)
    model = await RecurringTransactionRepository(session).create(RecurringRule(**values))
    await session.commit()
    return model.id


async def _last_generated(session_maker, rule_id):
    async with session_maker() as session:
        model = await session.get(RecurringTransactionModel, rule_id)
        return model.last_generated


async def _rows(session_maker, model, user_id):
    async with session_maker() as session:
        result = await session.execute(select(model).where(model.user_id == user_id))
        return list(result.scalars().all())


async def _sweep(session_maker, reference_date):
    async with session_maker() as session:
        return await RecurringSweepService(session).run_sweep(reference_date)


@pytest.mark.asyncio
@pytest.mark.e2e
async def test_daily_rule_fires_once_per_day(db_session, session_maker):
    today = date.today()
    user_id = await _create_user(db_session)
    rule_id = await _create_rule(db_session, user_id, start_date=today - timedelta(days=1))

    report = await _sweep(session_maker, today)

    assert report.generated == 1
    expenses = await _rows(session_maker, ExpenseModel, user_id)
    assert len(expenses) == 1
    assert expenses[0].amount == Decimal("100")
    assert expenses[0].date == today
    assert await _last_generated(session_maker, rule_id) == today

    # Second sweep on the same day is a no-op
    report = await _sweep(session_maker, today)

    assert report.generated == 0
    assert report.skipped == 1
    assert len(await _rows(session_maker, ExpenseModel, user_id)) == 1


@pytest.mark.asyncio
@pytest.mark.integration
async def test_inactive_rule_never_fires(db_session, session_maker):
    user_id = await _create_user(db_session)
    rule_id = await _create_rule(db_session, user_id, is_active=False)

    for offset in range(3):
        report = await _sweep(session_maker, date(2024, 2, 1) + timedelta(days=offset))
        assert report.entries == []

    assert await _rows(session_maker, ExpenseModel, user_id) == []
    assert await _last_generated(session_maker, rule_id) is None


@pytest.mark.asyncio
@pytest.mark.integration
async def test_failed_materialization_leaves_marker_and_retries_next_day(db_session, session_maker):
    user_id = await _create_user(db_session)
    rule_id = await _create_rule(db_session, user_id)

    async with session_maker() as session:
        failing = TransactionMaterializer(
            expense_store=FailingLedgerStore(),
            income_store=FailingLedgerStore(),
            category_store=CategoryRepository(session),
        )
        report = await RecurringSweepService(session, materializer=failing).run_sweep(date(2024, 3, 1))

    assert report.failed == 1
    entry = report.entries[0]
    assert entry.outcome == SweepOutcome.FAILED
    assert "disk full" in entry.error
    assert await _last_generated(session_maker, rule_id) is None
    assert await _rows(session_maker, ExpenseModel, user_id) == []

    report = await _sweep(session_maker, date(2024, 3, 2))

    assert report.generated == 1
    assert await _last_generated(session_maker, rule_id) == date(2024, 3, 2)
    expenses = await _rows(session_maker, ExpenseModel, user_id)
    assert [e.date for e in expenses] == [date(2024, 3, 2)]


@pytest.mark.asyncio
@pytest.mark.integration
async def test_one_failing_rule_does_not_abort_the_sweep(db_session, session_maker):
    user_id = await _create_user(db_session)
    expense_rule = await _create_rule(db_session, user_id, title="Rent")
    income_rule = await _create_rule(db_session, user_id, title="Salary", type=TransactionType.INCOME)

    async with session_maker() as session:
        partial = TransactionMaterializer(
            expense_store=FailingLedgerStore(),
            income_store=IncomeRepository(session),
            category_store=CategoryRepository(session),
        )
        report = await RecurringSweepService(session, materializer=partial).run_sweep(date(2024, 3, 1))

    outcomes = {e.rule_id: e.outcome for e in report.entries}
    assert outcomes == {expense_rule: SweepOutcome.FAILED, income_rule: SweepOutcome.GENERATED}
    assert await _last_generated(session_maker, expense_rule) is None
    assert await _last_generated(session_maker, income_rule) == date(2024, 3, 1)


@pytest.mark.asyncio
@pytest.mark.integration
async def test_income_rule_writes_income_ledger(db_session, session_maker):
    user_id = await _create_user(db_session)
    await _create_rule(
        db_session,
        user_id,
        title="Salary",
        amount=Decimal("2500.00"),
        frequency=RecurringFrequency.MONTHLY,
        type=TransactionType.INCOME,
        start_date=date(2024, 1, 25),
        description="employer",
    )

    report = await _sweep(session_maker, date(2024, 2, 25))

    assert report.generated == 1
    generated = report.entries[0].transaction
    assert generated.type == TransactionType.INCOME
    assert generated.date == date(2024, 2, 25)

    incomes = await _rows(session_maker, IncomeModel, user_id)
    assert len(incomes) == 1
    assert incomes[0].title == "Salary"
    assert incomes[0].description == "employer"
    assert incomes[0].amount == Decimal("2500.00")
    assert await _rows(session_maker, ExpenseModel, user_id) == []


@pytest.mark.asyncio
@pytest.mark.integration
async def test_missing_category_is_treated_as_absent(db_session, session_maker):
    user_id = await _create_user(db_session)
    category = await CategoryRepository(db_session).create(name="Gone")
    await db_session.commit()
    await _create_rule(db_session, user_id, category_id=category.id)

    # Remove the category row behind the rule's back
    await db_session.execute(delete(CategoryModel))
    await db_session.commit()

    report = await _sweep(session_maker, date(2024, 1, 2))

    assert report.generated == 1
    assert report.entries[0].transaction.category_id is None
    expenses = await _rows(session_maker, ExpenseModel, user_id)
    assert expenses[0].category_id is None


@pytest.mark.asyncio
@pytest.mark.integration
async def test_rules_outside_their_window_are_skipped(db_session, session_maker):
    user_id = await _create_user(db_session)
    await _create_rule(db_session, user_id, start_date=date(2024, 5, 1))
    await _create_rule(db_session, user_id, start_date=date(2024, 1, 1), end_date=date(2024, 1, 31))

    report = await _sweep(session_maker, date(2024, 3, 1))

    assert report.generated == 0
    assert report.skipped == 2


@pytest.mark.asyncio
@pytest.mark.integration
async def test_sweep_error_when_rules_cannot_be_loaded(db_session, session_maker, monkeypatch):
    async def broken(self, user_id=None):
        raise RuntimeError("connection lost")

    monkeypatch.setattr(RecurringTransactionRepository, "get_active_rules", broken)

    with pytest.raises(SweepError):
        await _sweep(session_maker, date(2024, 3, 1))


@pytest.mark.asyncio
@pytest.mark.integration
async def test_back_dated_sweep_does_not_rewind_marker(db_session, session_maker):
    user_id = await _create_user(db_session)
    rule_id = await _create_rule(db_session, user_id)

    await _sweep(session_maker, date(2024, 3, 5))
    report = await _sweep(session_maker, date(2024, 3, 1))

    assert report.skipped == 1
    assert await _last_generated(session_maker, rule_id) == date(2024, 3, 5)
    assert len(await _rows(session_maker, ExpenseModel, user_id)) == 1
