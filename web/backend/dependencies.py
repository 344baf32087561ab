#!/usr/bin/env python3
"""
FastAPI dependencies for dependency injection.
"""

from functools import lru_cache
from typing import Generator, Optional

from fastapi import Depends, Header, HTTPException
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker

from database.uow import UnitOfWork
from notification.service import NotificationService
from .config import get_config


class DatabaseManager:
    """Manages database connections and sessions."""

    def __init__(self, url: str, echo: bool = False):
        engine_kwargs = {'echo': echo, 'pool_pre_ping': True}  # Verify connections before using
        if url.startswith('postgresql'):
            engine_kwargs.update(pool_size=10, max_overflow=20)
        self.engine = create_engine(url, **engine_kwargs)
        self.SessionLocal = sessionmaker(
            autocommit=False,
            autoflush=False,
            bind=self.engine
        )

    def get_session(self) -> Generator[Session, None, None]:
        session = self.SessionLocal()
        try:
            yield session
        finally:
            session.close()


@lru_cache()
def get_db_manager() -> DatabaseManager:
    db_config = get_config().database
    return DatabaseManager(db_config.url, echo=db_config.echo)


def get_db() -> Generator[Session, None, None]:
    """
    FastAPI dependency that yields a database session.

    Route handlers commit explicitly; anything left uncommitted is rolled
    back when the session closes.
    """
    yield from get_db_manager().get_session()


def get_uow(db: Session = Depends(get_db)) -> UnitOfWork:
    return UnitOfWork.for_session(db)


@lru_cache()
def get_notifier() -> Optional[NotificationService]:
    """Notification dispatcher for announcements, or None when disabled."""
    config = get_config().notifications
    if not config.enabled:
        return None
    return NotificationService.from_config(config)


def get_actor_id(x_actor_id: Optional[int] = Header(None)) -> int:
    """Administrator id performing the action, supplied by the upstream gateway."""
    if x_actor_id is None:
        raise HTTPException(status_code=401, detail="Missing X-Actor-Id header")
    return x_actor_id
