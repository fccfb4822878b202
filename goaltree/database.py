# goaltree/database.py
from typing import AsyncGenerator
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.orm import declarative_base
from goaltree.config import settings, to_async_url

Base = declarative_base()


def make_engine(url: str, echo: bool = False) -> AsyncEngine:
    return create_async_engine(to_async_url(url), echo=echo)


def make_session_factory(bind: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(bind=bind, expire_on_commit=False, class_=AsyncSession)


async def create_tables(bind: AsyncEngine) -> None:
    # Import for side effects: registers both tables on Base.metadata
    from goaltree.models import goal, task  # noqa: F401

    async with bind.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


engine = make_engine(settings.async_database_url, echo=settings.SQL_ECHO)
AsyncSessionLocal = make_session_factory(engine)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    async with AsyncSessionLocal() as session:
        yield session
