"""
SQL database configuration and ORM models.

This module defines the SQLAlchemy ORM models and database initialization.
Plan bodies are stored as JSON columns in the persisted record shape.
"""

from datetime import datetime
from functools import lru_cache

from sqlalchemy import JSON, Column, DateTime, String, Text
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.orm import DeclarativeBase, sessionmaker

from timebox.core.config import get_settings


class Base(DeclarativeBase):
    """SQLAlchemy declarative base."""

    pass


# ===========================================
# ORM Models
# ===========================================


class DayPlanORM(Base):
    """Saved day plan snapshot."""

    __tablename__ = "day_plans"

    id = Column(String(64), primary_key=True)
    user_id = Column(String(255), nullable=False, index=True)
    date = Column(String(32), nullable=False, index=True)
    priorities = Column(JSON, nullable=False, default=list)
    brain_dump = Column(Text, nullable=False, default="")
    schedule = Column(JSON, nullable=False, default=list)
    tracker = Column(JSON, nullable=False, default=dict)
    manual_plans = Column(JSON, nullable=False, default=dict)
    created_at = Column(DateTime, default=datetime.utcnow, index=True)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)


class WeeklyPlanORM(Base):
    """Saved weekly plan snapshot."""

    __tablename__ = "weekly_plans"

    id = Column(String(64), primary_key=True)
    user_id = Column(String(255), nullable=False, index=True)
    week_start = Column(String(32), nullable=False, index=True)
    priorities = Column(JSON, nullable=False, default=list)
    brain_dump = Column(Text, nullable=False, default="")
    tracker = Column(JSON, nullable=False, default=dict)
    created_at = Column(DateTime, default=datetime.utcnow, index=True)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)


# ===========================================
# Database Session Management
# ===========================================


@lru_cache()
def get_engine():
    """Get async engine instance."""
    settings = get_settings()
    return create_async_engine(settings.DATABASE_URL, echo=False)


def get_session_factory():
    """Get async session factory."""
    engine = get_engine()
    return sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


async def init_db():
    """Initialize database tables."""
    engine = get_engine()
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
