# backend/app/core/database.py
"""
Moteur SQLAlchemy async + fabrique de sessions.

AsyncSessionLocal : une session par unité de travail, ouverte par l'appelant
(scripts/quiz_maintenance.py) puis passée aux services.
"""
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase

from app.core.config import settings

engine = create_async_engine(
    settings.DATABASE_URL,
    echo=settings.DEBUG,
    pool_pre_ping=True,
)

AsyncSessionLocal = async_sessionmaker(
    bind=engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


class Base(DeclarativeBase):
    pass
