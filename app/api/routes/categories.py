"""
Category API Routes
Shared category catalogue. Deleting a category clears references to it
from ledgers, budgets and recurring rules.
"""

from typing import List

from fastapi import APIRouter, Depends, HTTPException, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_current_user, reject_null_fields
from app.domain.schemas.categories import CategoryCreate, CategoryResponse, CategoryUpdate
from app.infrastructure.db.database import get_db
from app.infrastructure.db.repositories.category_repository import CategoryRepository

router = APIRouter(dependencies=[Depends(get_current_user)])


async def _get_or_404(repo: CategoryRepository, category_id: int):
    category = await repo.get(category_id)
    if category is None:
        raise HTTPException(status_code=404, detail="Category not found")
    return category


@router.post("", response_model=CategoryResponse, status_code=status.HTTP_201_CREATED)
async def create_category(request: CategoryCreate, db: AsyncSession = Depends(get_db)):
    repo = CategoryRepository(db)
    if await repo.get_by_name(request.name):
        raise HTTPException(status_code=409, detail=f"Category '{request.name}' already exists")

    category = await repo.create(
        name=request.name,
        description=request.description,
        color=request.color,
    )
    return CategoryResponse.from_model(category)


@router.get("", response_model=List[CategoryResponse])
async def list_categories(db: AsyncSession = Depends(get_db)):
    categories = await CategoryRepository(db).list_all()
    return [CategoryResponse.from_model(c) for c in categories]


@router.get("/{category_id}", response_model=CategoryResponse)
async def get_category(category_id: int, db: AsyncSession = Depends(get_db)):
    category = await _get_or_404(CategoryRepository(db), category_id)
    return CategoryResponse.from_model(category)


@router.patch("/{category_id}", response_model=CategoryResponse)
async def update_category(
    category_id: int,
    request: CategoryUpdate,
    db: AsyncSession = Depends(get_db),
):
    repo = CategoryRepository(db)
    category = await _get_or_404(repo, category_id)

    changes = request.model_dump(exclude_unset=True)
    reject_null_fields(changes, ("name", "color"))

    if "name" in changes and changes["name"] != category.name:
        if await repo.get_by_name(changes["name"]):
            raise HTTPException(status_code=409, detail=f"Category '{changes['name']}' already exists")

    category = await repo.update(category, changes)
    return CategoryResponse.from_model(category)


@router.delete("/{category_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_category(category_id: int, db: AsyncSession = Depends(get_db)):
    repo = CategoryRepository(db)
    category = await _get_or_404(repo, category_id)
    await repo.delete(category)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
