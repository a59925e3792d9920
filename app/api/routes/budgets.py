"""
Budget API Routes
Monthly / annual budgets per user
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import ensure_category_exists, get_current_user, reject_null_fields
from app.domain.schemas.budgets import BudgetCreate, BudgetResponse, BudgetUpdate
from app.infrastructure.db.database import get_db
from app.infrastructure.db.models import UserModel
from app.infrastructure.db.repositories.budget_repository import BudgetRepository

router = APIRouter()


async def _get_or_404(repo: BudgetRepository, budget_id: int, user_id: int):
    budget = await repo.get_for_user(budget_id, user_id)
    if budget is None:
        raise HTTPException(status_code=404, detail="Budget not found")
    return budget


@router.post("", response_model=BudgetResponse, status_code=status.HTTP_201_CREATED)
async def create_budget(
    request: BudgetCreate,
    db: AsyncSession = Depends(get_db),
    current_user: UserModel = Depends(get_current_user),
):
    await ensure_category_exists(db, request.category_id)
    budget = await BudgetRepository(db).create(
        user_id=current_user.id,
        title=request.title,
        description=request.description,
        amount=request.amount,
        period=request.period,
        year=request.year,
        month=request.month,
        category_id=request.category_id,
    )
    return BudgetResponse.from_model(budget)


@router.get("", response_model=List[BudgetResponse])
async def list_budgets(
    year: Optional[int] = Query(None, ge=2000, le=2100),
    month: Optional[int] = Query(None, ge=1, le=12, description="Only applied together with year"),
    category_id: Optional[int] = Query(None),
    db: AsyncSession = Depends(get_db),
    current_user: UserModel = Depends(get_current_user),
):
    budgets = await BudgetRepository(db).list_for_user(
        current_user.id,
        year=year,
        month=month,
        category_id=category_id,
    )
    return [BudgetResponse.from_model(b) for b in budgets]


@router.get("/{budget_id}", response_model=BudgetResponse)
async def get_budget(
    budget_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: UserModel = Depends(get_current_user),
):
    budget = await _get_or_404(BudgetRepository(db), budget_id, current_user.id)
    return BudgetResponse.from_model(budget)


@router.patch("/{budget_id}", response_model=BudgetResponse)
async def update_budget(
    budget_id: int,
    request: BudgetUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: UserModel = Depends(get_current_user),
):
    repo = BudgetRepository(db)
    budget = await _get_or_404(repo, budget_id, current_user.id)

    changes = request.model_dump(exclude_unset=True)
    reject_null_fields(changes, ("title", "amount", "period", "year"))
    if "category_id" in changes:
        await ensure_category_exists(db, changes["category_id"])

    period = changes.get("period", budget.period)
    month = changes.get("month", budget.month)
    if period == "monthly" and month is None:
        raise HTTPException(status_code=400, detail="month is required for monthly budgets")

    budget = await repo.update(budget, changes)
    return BudgetResponse.from_model(budget)


@router.delete("/{budget_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_budget(
    budget_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: UserModel = Depends(get_current_user),
):
    repo = BudgetRepository(db)
    budget = await _get_or_404(repo, budget_id, current_user.id)
    await repo.delete(budget)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
