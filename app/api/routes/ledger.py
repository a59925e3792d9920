"""
Ledger API Routes
Expense and income CRUD. Both ledgers expose the same surface, so one
router builder serves both.
"""

from datetime import date
from typing import List, Optional, Type

from fastapi import APIRouter, Depends, HTTPException, Path, Query, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import ensure_category_exists, get_current_user, reject_null_fields
from app.domain.schemas.ledger import (
    LedgerEntryCreate,
    LedgerEntryResponse,
    LedgerEntryUpdate,
    MonthlyTotalResponse,
)
from app.infrastructure.db.database import get_db
from app.infrastructure.db.models import UserModel
from app.infrastructure.db.repositories.ledger_repository import (
    ExpenseRepository,
    IncomeRepository,
    LedgerRepository,
)


def build_ledger_router(repo_cls: Type[LedgerRepository], label: str) -> APIRouter:
    """Create the CRUD router for one ledger ("Expense" / "Income")"""
    router = APIRouter()
    not_found = f"{label} not found"

    async def _get_or_404(repo: LedgerRepository, entry_id: int, user_id: int):
        entry = await repo.get_for_user(entry_id, user_id)
        if entry is None:
            raise HTTPException(status_code=404, detail=not_found)
        return entry

    @router.post("", response_model=LedgerEntryResponse, status_code=status.HTTP_201_CREATED)
    async def create_entry(
        request: LedgerEntryCreate,
        db: AsyncSession = Depends(get_db),
        current_user: UserModel = Depends(get_current_user),
    ):
        await ensure_category_exists(db, request.category_id)
        entry = await repo_cls(db).create(
            user_id=current_user.id,
            title=request.title,
            description=request.description,
            amount=request.amount,
            entry_date=request.date,
            category_id=request.category_id,
        )
        return LedgerEntryResponse.from_model(entry)

    @router.get("", response_model=List[LedgerEntryResponse])
    async def list_entries(
        start_date: Optional[date] = Query(None, description="YYYY-MM-DD"),
        end_date: Optional[date] = Query(None, description="YYYY-MM-DD"),
        category_id: Optional[int] = Query(None),
        db: AsyncSession = Depends(get_db),
        current_user: UserModel = Depends(get_current_user),
    ):
        if start_date and end_date and end_date < start_date:
            raise HTTPException(status_code=400, detail="end_date cannot be before start_date")

        entries = await repo_cls(db).list_for_user(
            current_user.id,
            start_date=start_date,
            end_date=end_date,
            category_id=category_id,
        )
        return [LedgerEntryResponse.from_model(e) for e in entries]

    @router.get("/stats/monthly/{year}/{month}", response_model=MonthlyTotalResponse)
    async def get_monthly_total(
        year: int = Path(..., ge=2000, le=2100),
        month: int = Path(..., ge=1, le=12),
        db: AsyncSession = Depends(get_db),
        current_user: UserModel = Depends(get_current_user),
    ):
        total = await repo_cls(db).get_total_for_month(current_user.id, year, month)
        return MonthlyTotalResponse(year=year, month=month, total=float(total))

    @router.get("/{entry_id}", response_model=LedgerEntryResponse)
    async def get_entry(
        entry_id: int,
        db: AsyncSession = Depends(get_db),
        current_user: UserModel = Depends(get_current_user),
    ):
        entry = await _get_or_404(repo_cls(db), entry_id, current_user.id)
        return LedgerEntryResponse.from_model(entry)

    @router.patch("/{entry_id}", response_model=LedgerEntryResponse)
    async def update_entry(
        entry_id: int,
        request: LedgerEntryUpdate,
        db: AsyncSession = Depends(get_db),
        current_user: UserModel = Depends(get_current_user),
    ):
        repo = repo_cls(db)
        entry = await _get_or_404(repo, entry_id, current_user.id)

        changes = request.model_dump(exclude_unset=True)
        reject_null_fields(changes, ("title", "amount", "date"))
        if "category_id" in changes:
            await ensure_category_exists(db, changes["category_id"])

        entry = await repo.update(entry, changes)
        return LedgerEntryResponse.from_model(entry)

    @router.delete("/{entry_id}", status_code=status.HTTP_204_NO_CONTENT)
    async def delete_entry(
        entry_id: int,
        db: AsyncSession = Depends(get_db),
        current_user: UserModel = Depends(get_current_user),
    ):
        repo = repo_cls(db)
        entry = await _get_or_404(repo, entry_id, current_user.id)
        await repo.delete(entry)
        return Response(status_code=status.HTTP_204_NO_CONTENT)

    return router


expenses_router = build_ledger_router(ExpenseRepository, "Expense")
incomes_router = build_ledger_router(IncomeRepository, "Income")
