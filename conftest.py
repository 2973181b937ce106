"""
Common test fixtures for the campaign service test suite.

Provides:
- In-memory SQLite database session
- FastAPI TestClient with DB override
- A small, varied customer base for audience resolution
"""
import os

# Ensure settings are test-friendly before any campaign_service imports.
# `settings` is created at module level in campaign_service.core.config.
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("SECURITY_ENABLED", "false")
os.environ.setdefault("SEQUENCE_BACKEND", "database")
os.environ.setdefault("GOOGLE_CLIENT_ID", "test-client-id.apps.googleusercontent.com")
os.environ.setdefault("LOG_TO_FILE", "false")

import pytest
from datetime import datetime, timedelta
from sqlmodel import Session, SQLModel, create_engine
from sqlmodel.pool import StaticPool
from fastapi.testclient import TestClient


@pytest.fixture
def engine():
    """Create an in-memory SQLite engine with all tables."""
    from campaign_service import models  # noqa: F401

    _engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(_engine)
    return _engine


@pytest.fixture
def session(engine):
    """Provide a database session for tests."""
    with Session(engine) as s:
        yield s


@pytest.fixture
def client(session):
    """
    FastAPI TestClient with the DB session dependency overridden
    to use the in-memory test database.
    """
    from campaign_service.main import app
    from campaign_service.core.db import get_session

    def _override_get_session():
        yield session

    app.dependency_overrides[get_session] = _override_get_session
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
def customers(session):
    """
    Five customers covering every attribute type, including one with
    no city, age or email.
    """
    from campaign_service.models.customer import Customer

    now = datetime(2025, 6, 1)
    rows = [
        Customer(customer_id="C001", name="Alice", email="alice@example.com", city="NY",
                 gender="F", age=35, total_spend=1200.0, visits=12, last_active=now - timedelta(days=3)),
        Customer(customer_id="C002", name="Bob", email="bob@example.com", city="NY",
                 gender="M", age=20, total_spend=150.0, visits=2, last_active=now - timedelta(days=200)),
        Customer(customer_id="C003", name="Carol", email="carol@shop.io", city="LA",
                 gender="F", age=42, total_spend=5400.0, visits=30, last_active=now - timedelta(days=10)),
        Customer(customer_id="C004", name="Dave", email="dave@EXAMPLE.com", city="Chicago",
                 gender="M", age=31, total_spend=80.0, visits=1, last_active=None),
        Customer(customer_id="C005", name="Erin", email=None, city=None,
                 gender=None, age=None, total_spend=0.0, visits=0, last_active=None),
    ]
    for row in rows:
        session.add(row)
    session.commit()
    for row in rows:
        session.refresh(row)
    return rows
