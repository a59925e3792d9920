"""
Database Models (SQLAlchemy ORM)
Users, ledgers, categories, budgets and recurring rules
"""

from sqlalchemy import (
    Column, Integer, String, Numeric, Date, DateTime,
    Boolean, ForeignKey, Text, Enum as SQLEnum, Index, CheckConstraint
)
from sqlalchemy.orm import relationship
import enum

from app.infrastructure.db.database import Base
from app.utils.time import now_local_naive


# Enums
class RecurringFrequencyEnum(str, enum.Enum):
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    YEARLY = "yearly"


class TransactionTypeEnum(str, enum.Enum):
    EXPENSE = "expense"
    INCOME = "income"


# Tables

class UserModel(Base):
    """Registered user"""
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    email = Column(String(255), nullable=False, unique=True, index=True)
    password_hash = Column(String(255), nullable=False)
    first_name = Column(String(100), nullable=False)
    last_name = Column(String(100), nullable=False)
    created_at = Column(DateTime, nullable=False, default=now_local_naive)
    updated_at = Column(DateTime, nullable=False, default=now_local_naive, onupdate=now_local_naive)

    tokens = relationship("AuthTokenModel", back_populates="user", cascade="all, delete-orphan")


class AuthTokenModel(Base):
    """Issued bearer tokens (SHA-256 digest only)"""
    __tablename__ = "auth_tokens"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    token_hash = Column(String(64), nullable=False, unique=True, index=True)
    created_at = Column(DateTime, nullable=False, default=now_local_naive)
    expires_at = Column(DateTime, nullable=False)

    user = relationship("UserModel", back_populates="tokens")


class CategoryModel(Base):
    """Shared category catalogue"""
    __tablename__ = "categories"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(100), nullable=False, unique=True)
    description = Column(Text, nullable=True)
    color = Column(String(7), nullable=False, default="#007bff")
    created_at = Column(DateTime, nullable=False, default=now_local_naive)
    updated_at = Column(DateTime, nullable=False, default=now_local_naive, onupdate=now_local_naive)


class ExpenseModel(Base):
    """Expense ledger entry"""
    __tablename__ = "expenses"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    category_id = Column(Integer, ForeignKey("categories.id", ondelete="SET NULL"), nullable=True)

    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    amount = Column(Numeric(10, 2), nullable=False)
    date = Column(Date, nullable=False)

    created_at = Column(DateTime, nullable=False, default=now_local_naive)
    updated_at = Column(DateTime, nullable=False, default=now_local_naive, onupdate=now_local_naive)

    category = relationship("CategoryModel", lazy="selectin")

    __table_args__ = (
        Index('ix_expenses_user_date', 'user_id', 'date'),
    )


class IncomeModel(Base):
    """Income ledger entry"""
    __tablename__ = "incomes"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    category_id = Column(Integer, ForeignKey("categories.id", ondelete="SET NULL"), nullable=True)

    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    amount = Column(Numeric(10, 2), nullable=False)
    date = Column(Date, nullable=False)

    created_at = Column(DateTime, nullable=False, default=now_local_naive)
    updated_at = Column(DateTime, nullable=False, default=now_local_naive, onupdate=now_local_naive)

    category = relationship("CategoryModel", lazy="selectin")

    __table_args__ = (
        Index('ix_incomes_user_date', 'user_id', 'date'),
    )


class BudgetModel(Base):
    """Monthly or annual spending budget"""
    __tablename__ = "budgets"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    category_id = Column(Integer, ForeignKey("categories.id", ondelete="SET NULL"), nullable=True)

    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    amount = Column(Numeric(10, 2), nullable=False)
    period = Column(String(20), nullable=False)  # monthly, annual
    year = Column(Integer, nullable=False)
    month = Column(Integer, nullable=True)  # 1-12 for monthly budgets

    created_at = Column(DateTime, nullable=False, default=now_local_naive)
    updated_at = Column(DateTime, nullable=False, default=now_local_naive, onupdate=now_local_naive)

    category = relationship("CategoryModel", lazy="selectin")

    __table_args__ = (
        Index('ix_budgets_user_period', 'user_id', 'year', 'month'),
    )


class RecurringTransactionModel(Base):
    """Recurring rule - template for periodic expenses/incomes"""
    __tablename__ = "recurring_transactions"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    category_id = Column(Integer, ForeignKey("categories.id", ondelete="SET NULL"), nullable=True)

    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    amount = Column(Numeric(10, 2), nullable=False)
    frequency = Column(SQLEnum(RecurringFrequencyEnum), nullable=False, default=RecurringFrequencyEnum.MONTHLY)
    type = Column(SQLEnum(TransactionTypeEnum), nullable=False, default=TransactionTypeEnum.EXPENSE)

    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=True)
    is_active = Column(Boolean, nullable=False, default=True, index=True)

    # Only written by the recurring sweep
    last_generated = Column(Date, nullable=True)

    created_at = Column(DateTime, nullable=False, default=now_local_naive)
    updated_at = Column(DateTime, nullable=False, default=now_local_naive, onupdate=now_local_naive)

    category = relationship("CategoryModel", lazy="selectin")

    __table_args__ = (
        CheckConstraint('amount > 0', name='ck_recurring_amount_positive'),
        CheckConstraint('end_date IS NULL OR end_date >= start_date', name='ck_recurring_end_after_start'),
    )
