"""
FastAPI Main Application with Scheduler
Personal finance API plus the daily recurring transaction sweep
"""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager
import logging
from typing import AsyncGenerator
from sqlalchemy import text

from app.config import settings
from app.core.logging import setup_logging
from app.infrastructure.db.database import init_db, close_db
from app.scheduler.main import RecurringScheduler

setup_logging(settings.LOG_LEVEL)
logger = logging.getLogger(__name__)

APP_VERSION = "1.0.0"

# Service instances
scheduler: RecurringScheduler | None = None


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator:
    """
    Application lifespan manager
    Handles startup and shutdown of the database and scheduler
    """
    global scheduler

    # ===================
    # STARTUP
    # ===================
    logger.info("=" * 60)
    logger.info(f"🚀 Starting Finance Tracker ({settings.APP_ENV})")
    logger.info("=" * 60)

    logger.info("📊 Initializing database...")
    await init_db()
    logger.info("✅ Database initialized")

    if settings.SCHEDULER_ENABLED:
        try:
            scheduler = RecurringScheduler()
            scheduler.start()
        except Exception as e:
            logger.error(f"❌ Failed to start scheduler: {e}")
            scheduler = None
    else:
        logger.info("⏰ Scheduler disabled")

    logger.info(f"   ✅ API Server: http://{settings.API_HOST}:{settings.API_PORT}")
    logger.info(f"   ✅ API Docs: http://{settings.API_HOST}:{settings.API_PORT}/docs")

    yield

    # ===================
    # SHUTDOWN
    # ===================
    logger.info("🛑 Shutting down Finance Tracker...")

    if scheduler:
        scheduler.stop()
        scheduler = None

    logger.info("📊 Closing database connections...")
    await close_db()
    logger.info("👋 Shutdown complete")


# Create FastAPI app
app = FastAPI(
    title="Finance Tracker",
    description="Personal expenses, incomes, budgets and recurring transactions",
    version=APP_VERSION,
    lifespan=lifespan,
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/health")
async def health_check():
    """Service health with a real database round trip"""
    db_status = "disconnected"
    db_error = None
    try:
        from app.infrastructure.db.database import engine
        if engine is None:
            db_status = "not_initialized"
        else:
            async with engine.begin() as conn:
                await conn.execute(text("SELECT 1"))
            db_status = "connected"
    except Exception as exc:
        db_status = "error"
        db_error = str(exc)

    scheduler_status = "disabled"
    if scheduler:
        scheduler_status = "running" if scheduler.running else "stopped"

    return {
        "status": "healthy" if db_status == "connected" else "degraded",
        "service": "Finance Tracker",
        "version": APP_VERSION,
        "services": {
            "api": "running",
            "scheduler": scheduler_status,
            "database": db_status,
        },
        "database_error": db_error,
    }


@app.get("/")
async def root():
    """Root endpoint"""
    return {
        "message": "💰 Finance Tracker API",
        "version": APP_VERSION,
        "docs": "/docs",
    }


# Import and include routers
from app.api.routes import auth, budgets, categories, recurring, users
from app.api.routes.ledger import expenses_router, incomes_router

app.include_router(auth.router, prefix="/api/v1/auth", tags=["Auth"])
app.include_router(users.router, prefix="/api/v1/users", tags=["Users"])
app.include_router(categories.router, prefix="/api/v1/categories", tags=["Categories"])
app.include_router(expenses_router, prefix="/api/v1/expenses", tags=["Expenses"])
app.include_router(incomes_router, prefix="/api/v1/incomes", tags=["Incomes"])
app.include_router(budgets.router, prefix="/api/v1/budgets", tags=["Budgets"])
app.include_router(recurring.router, prefix="/api/v1/recurring-transactions", tags=["Recurring Transactions"])


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("app.main:app", host=settings.API_HOST, port=settings.API_PORT, reload=settings.DEBUG)
