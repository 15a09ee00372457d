# tests/conftest.py
import os

# must be set before app.core.config caches its settings
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("ASSIGN_FAILURE_RATE", "0")
os.environ.setdefault("SEED_DEMO_DATA", "false")

from datetime import datetime

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.core.config import Settings, get_settings
from app.core.database import Base, get_db, init_db
from app.main import app
from app.ticket.schemas import Priority, TicketOut, TicketStatus

engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def override_get_db():
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture
def fresh_db():
    init_db(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db_session(fresh_db):
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture
def settings():
    return Settings(DATABASE_URL="sqlite://", ASSIGN_FAILURE_RATE=0.0)


@pytest.fixture
def client(settings, fresh_db):
    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_settings] = lambda: settings
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


def make_ticket(
    id: str,
    created_at: str = "2024-01-15T09:00:00Z",
    priority: Priority = Priority.REGULAR,
    status: TicketStatus = TicketStatus.OPEN,
    assignee: str | None = None,
) -> TicketOut:
    if status != TicketStatus.OPEN and assignee is None:
        assignee = "agent-1"
    return TicketOut(
        id=id,
        title="Test Ticket",
        description="Test description for the ticket",
        priority=priority,
        status=status,
        created_at=datetime.fromisoformat(created_at.replace("Z", "+00:00")),
        assignee=assignee,
    )
