import os
from datetime import date

# Keep the app's own engine off disk; every test gets its own in-memory database below.
os.environ.setdefault("DATABASE_URL", "sqlite+pysqlite://")

import pytest
from fastapi import Depends
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

import srs_scheduler.models  # noqa: F401
from srs_scheduler.api.deps import get_db, get_schedule_service
from srs_scheduler.db.base import Base
from srs_scheduler.main import app
from srs_scheduler.services.scheduling import ScheduleService

MONDAY = date(2026, 10, 19)
SATURDAY = date(2026, 10, 24)


@pytest.fixture()
def engine():
    engine = create_engine(
        "sqlite+pysqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture()
def db_session(engine):
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture()
def client(engine):
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

    def override_get_db():
        db = TestingSessionLocal()
        try:
            yield db
        finally:
            db.close()

    def override_get_schedule_service(db: Session = Depends(get_db)) -> ScheduleService:
        return ScheduleService(db, today=lambda: MONDAY)

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_schedule_service] = override_get_schedule_service

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()
