"""Shared fixtures: a file-backed SQLite database per test."""

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine

import repe.models  # noqa: F401 - registers every table on Base.metadata
from repe.db.base import Base
from repe.db.session import Database
from repe.main import create_application


@pytest.fixture
async def database(tmp_path):
    database = Database(f"sqlite+aiosqlite:///{tmp_path / 'repe.db'}")
    async with database.engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield database
    await database.dispose()


@pytest.fixture
async def db(database):
    async with database.session() as session:
        yield session


@pytest.fixture
def client(tmp_path):
    db_path = tmp_path / "api.db"
    engine = create_engine(f"sqlite:///{db_path}")
    Base.metadata.create_all(engine)
    engine.dispose()

    app = create_application(database=Database(f"sqlite+aiosqlite:///{db_path}"))
    with TestClient(app) as c:
        yield c
