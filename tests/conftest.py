"""
Pytest configuration and fixtures.

Every test gets its own SQLite file database, engine and session, so no
state leaks between tests.
"""
from datetime import datetime, timedelta, timezone

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from goaltree.database import create_tables, get_db, make_engine, make_session_factory
from goaltree.models.enums import ContainerKind
from goaltree.repositories.goal_repository import GoalRepository
from goaltree.schemas.goal import GoalCreate
from goaltree.schemas.task import TaskCreate


class FakeClock:
    """Deterministic clock: every call is one second after the last."""

    def __init__(self, start: datetime = datetime(2025, 1, 6, 9, 0, tzinfo=timezone.utc)):
        self.now = start

    def __call__(self) -> datetime:
        self.now += timedelta(seconds=1)
        return self.now


def naive(value: datetime) -> datetime:
    # SQLite hands timestamps back without tzinfo
    return value.replace(tzinfo=None)


@pytest_asyncio.fixture
async def engine(tmp_path):
    engine = make_engine(f"sqlite+aiosqlite:///{tmp_path / 'goaltree.db'}")
    await create_tables(engine)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return make_session_factory(engine)


@pytest_asyncio.fixture
async def session(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def repo(session, clock):
    return GoalRepository(session, clock=clock)


@pytest_asyncio.fixture
async def sample_tree(repo):
    """Goal G (root) → Milestone M → Tasks T1, T2; Requirement R under G."""
    g = await repo.add_goal(GoalCreate(title="Buy a House", order=0))
    m = await repo.add_goal(GoalCreate(title="Financial Preparation", parent_id=g, kind=ContainerKind.milestone, order=1))
    t1 = await repo.add_task(TaskCreate(parent_id=m, title="Save down payment", order=0))
    t2 = await repo.add_task(TaskCreate(parent_id=m, title="Check credit score", order=1))
    r = await repo.add_goal(GoalCreate(title="Budget: $500k", parent_id=g, kind=ContainerKind.requirement, order=0))
    return {"g": g, "m": m, "t1": t1, "t2": t2, "r": r}


@pytest_asyncio.fixture
async def client(session_factory):
    from goaltree.main import app

    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client
    app.dependency_overrides.clear()
