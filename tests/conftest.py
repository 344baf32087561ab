"""
Pytest configuration and fixtures.

This file provides pytest-specific configuration and fixtures.
For seed helpers, see tests/__init__.py
"""

import os

# database.database builds its engine at import time
os.environ.setdefault("DATABASE_URL", "sqlite://")

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from database.models import Base
from database.uow import UnitOfWork
from core.selection.locks import PathLockRegistry


@pytest.fixture
def engine():
    """Fresh in-memory SQLite database per test."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def session(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def uow(session):
    return UnitOfWork.for_session(session)


@pytest.fixture
def locks():
    """Isolated lock registry so tests never contend on the process-wide one."""
    return PathLockRegistry()
