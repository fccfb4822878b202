# goaltree/core/deps.py
from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession
from goaltree.database import get_db
from goaltree.repositories.goal_repository import GoalRepository


async def get_repository(db: AsyncSession = Depends(get_db)) -> GoalRepository:
    return GoalRepository(db)
