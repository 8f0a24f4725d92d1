"""
Shared test fixtures

Integration tests run the FastAPI app in-process against a throwaway SQLite
database per test, swapped in through the get_db dependency.
"""
import os

# Must be set before app.config is imported
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///./test_peermatch.db")
os.environ.setdefault("AUTH_SECRET", "test-secret")

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from app.database import Base, get_db
from app.models import Peer, Student
from main import app


@pytest.fixture
async def db_engine(tmp_path):
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'peermatch.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(db_engine):
    return async_sessionmaker(db_engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def db_session(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
async def client(session_factory):
    """HTTP client bound to the app with get_db pointed at the test database"""

    async def override_get_db():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest.fixture
def make_student(db_session):
    async def _make(**fields):
        values = {"name": "Student", "subject": "Physics", "range_budget": 3000, "rating": 1, "experience": 1}
        values.update(fields)
        student = Student(**values)
        db_session.add(student)
        await db_session.commit()
        await db_session.refresh(student)
        return student

    return _make


@pytest.fixture
def make_peer(db_session):
    async def _make(**fields):
        values = {"name": "Peer", "domain": "Physics", "experience": 0, "rating": 0, "charges": 3000}
        values.update(fields)
        peer = Peer(**values)
        db_session.add(peer)
        await db_session.commit()
        await db_session.refresh(peer)
        return peer

    return _make
