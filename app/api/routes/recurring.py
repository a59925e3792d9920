"""
Recurring Transaction API Routes
Rule CRUD plus a manual trigger for the daily sweep
"""

import logging
from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import ensure_category_exists, get_current_user
from app.domain.models import RecurringRule
from app.domain.schemas.recurring import (
    RecurringTransactionCreate,
    RecurringTransactionResponse,
    RecurringTransactionUpdate,
    SweepReportResponse,
)
from app.domain.services.recurring_sweep_service import RecurringSweepService, SweepError
from app.domain.services.rule_update import RecurringRuleUpdate, apply_update
from app.infrastructure.db.database import get_db
from app.infrastructure.db.models import UserModel
from app.infrastructure.db.repositories.recurring_repository import RecurringTransactionRepository
from app.utils.time import today_local

logger = logging.getLogger(__name__)
router = APIRouter()


async def _get_or_404(repo: RecurringTransactionRepository, rule_id: int, user_id: int):
    model = await repo.get_for_user(rule_id, user_id)
    if model is None:
        raise HTTPException(status_code=404, detail="Recurring transaction not found")
    return model


@router.post("", response_model=RecurringTransactionResponse, status_code=status.HTTP_201_CREATED)
async def create_recurring_transaction(
    request: RecurringTransactionCreate,
    db: AsyncSession = Depends(get_db),
    current_user: UserModel = Depends(get_current_user),
):
    await ensure_category_exists(db, request.category_id)

    try:
        rule = RecurringRule(
            id=None,
            user_id=current_user.id,
            title=request.title,
            description=request.description,
            amount=request.amount,
            frequency=request.frequency,
            type=request.type,
            start_date=request.start_date,
            end_date=request.end_date,
            is_active=request.is_active,
            category_id=request.category_id,
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    model = await RecurringTransactionRepository(db).create(rule)
    logger.info(f"🔁 Recurring rule {model.id} created ({rule.frequency.value} {rule.type.value})")
    return RecurringTransactionResponse.from_model(model)


@router.get("", response_model=List[RecurringTransactionResponse])
async def list_recurring_transactions(
    db: AsyncSession = Depends(get_db),
    current_user: UserModel = Depends(get_current_user),
):
    models = await RecurringTransactionRepository(db).list_for_user(current_user.id)
    return [RecurringTransactionResponse.from_model(m) for m in models]


@router.post("/generate", response_model=SweepReportResponse)
async def generate_recurring_transactions(
    reference_date: Optional[date] = Query(None, description="YYYY-MM-DD, defaults to today"),
    db: AsyncSession = Depends(get_db),
    current_user: UserModel = Depends(get_current_user),
):
    """
    Run the recurring sweep now over the caller's own rules.

    Other users' rules are left to the daily job, so a back-dated call
    never writes into another user's ledger.
    """
    today = today_local()
    ref = reference_date or today
    if ref > today:
        raise HTTPException(status_code=400, detail="reference_date cannot be in the future")

    # The sweep commits per rule, which expires ORM instances in this session
    user_id = current_user.id

    try:
        report = await RecurringSweepService(db).run_sweep(ref, user_id=user_id)
    except SweepError as e:
        raise HTTPException(status_code=503, detail=str(e))

    return SweepReportResponse.from_report(report, user_id)


@router.get("/{rule_id}", response_model=RecurringTransactionResponse)
async def get_recurring_transaction(
    rule_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: UserModel = Depends(get_current_user),
):
    model = await _get_or_404(RecurringTransactionRepository(db), rule_id, current_user.id)
    return RecurringTransactionResponse.from_model(model)


@router.patch("/{rule_id}", response_model=RecurringTransactionResponse)
async def update_recurring_transaction(
    rule_id: int,
    request: RecurringTransactionUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: UserModel = Depends(get_current_user),
):
    repo = RecurringTransactionRepository(db)
    model = await _get_or_404(repo, rule_id, current_user.id)

    changes = request.model_dump(exclude_unset=True)
    if changes.get("category_id") is not None:
        await ensure_category_exists(db, changes["category_id"])

    try:
        command = RecurringRuleUpdate.from_mapping(changes)
        rule = apply_update(repo.to_domain(model), command)
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))

    model = await repo.save(model, rule)
    return RecurringTransactionResponse.from_model(model)


@router.delete("/{rule_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_recurring_transaction(
    rule_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: UserModel = Depends(get_current_user),
):
    repo = RecurringTransactionRepository(db)
    model = await _get_or_404(repo, rule_id, current_user.id)
    await repo.delete(model)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
