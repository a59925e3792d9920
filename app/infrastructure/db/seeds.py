"""
Default category catalogue, inserted on startup into an empty table
"""

import logging

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.infrastructure.db.models import CategoryModel

logger = logging.getLogger(__name__)

DEFAULT_CATEGORIES = [
    ("Food", "Groceries, restaurants and drinks", "#ff6b6b"),
    ("Transport", "Public transport, fuel and parking", "#4ecdc4"),
    ("Entertainment", "Leisure and entertainment", "#45b7d1"),
    ("Health", "Medical costs and pharmacy", "#96ceb4"),
    ("Education", "Courses, books and training", "#feca57"),
    ("Home", "Household and utilities", "#ff9ff3"),
    ("Clothing", "Clothes and accessories", "#54a0ff"),
    ("Other", "Miscellaneous", "#5f27cd"),
]


async def seed_default_categories(session: AsyncSession) -> int:
    """
    Insert the default categories if no category exists yet.

    Returns:
        Number of categories inserted
    """
    count = await session.scalar(select(func.count()).select_from(CategoryModel))
    if count:
        return 0

    for name, description, color in DEFAULT_CATEGORIES:
        session.add(CategoryModel(name=name, description=description, color=color))
    await session.flush()

    logger.info(f"🌱 Seeded {len(DEFAULT_CATEGORIES)} default categories")
    return len(DEFAULT_CATEGORIES)
