from typing import AsyncGenerator

import pytest
from fastapi import FastAPI
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from app.infrastructure.db.database import Base, get_db
from app.infrastructure.db import models  # noqa: F401
from app.api.routes import auth, budgets, categories, recurring, users
from app.api.routes.ledger import expenses_router, incomes_router


@pytest.fixture()
async def db_engine(tmp_path):
    db_path = tmp_path / "test.db"
    engine = create_async_engine(
        f"sqlite+aiosqlite:///{db_path}",
        future=True,
        echo=False
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture()
def session_maker(db_engine):
    return async_sessionmaker(db_engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture()
async def db_session(session_maker) -> AsyncGenerator[AsyncSession, None]:
    async with session_maker() as session:
        yield session


@pytest.fixture()
async def app(session_maker) -> FastAPI:
    app = FastAPI()
    app.include_router(auth.router, prefix="/api/v1/auth", tags=["Auth"])
    app.include_router(users.router, prefix="/api/v1/users", tags=["Users"])
    app.include_router(categories.router, prefix="/api/v1/categories", tags=["Categories"])
    app.include_router(expenses_router, prefix="/api/v1/expenses", tags=["Expenses"])
    app.include_router(incomes_router, prefix="/api/v1/incomes", tags=["Incomes"])
    app.include_router(budgets.router, prefix="/api/v1/budgets", tags=["Budgets"])
    app.include_router(recurring.router, prefix="/api/v1/recurring-transactions", tags=["Recurring Transactions"])

    # One session per request, like the real get_db
    async def override_get_db():
        async with session_maker() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db
    return app


@pytest.fixture()
async def client(app: FastAPI) -> AsyncGenerator[AsyncClient, None]:
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest.fixture()
def register_user(client):
    """Register a user; returns (auth headers, user payload)"""
    async def _register(email: str = "ana@example.com", password: str = "secret123"):
        resp = await client.post(
            "/api/v1/auth/register",
            json={"email": email, "password": password, "first_name": "Ana", "last_name": "Diaz"},
        )
        assert resp.status_code == 201, resp.text
        body = resp.json()
        return {"Authorization": f"Bearer {body['access_token']}"}, body["user"]

    return _register


@pytest.fixture()
async def auth_headers(register_user):
    headers, _ = await register_user()
    return headers
