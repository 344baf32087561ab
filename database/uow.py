import contextlib
import logging
from dataclasses import dataclass
from typing import Callable, Iterator, Optional

from sqlalchemy.orm import Session

from database.repositories import PeriodRepository, RegistrationRepository, NotificationLogRepository

logger = logging.getLogger(__name__)


@dataclass
class UnitOfWork:
    """Repositories sharing one Session (and therefore one transaction)."""
    session: Session
    periods: PeriodRepository
    registrations: RegistrationRepository
    notifications: NotificationLogRepository

    @classmethod
    def for_session(cls, session: Session) -> "UnitOfWork":
        return cls(
            session=session,
            periods=PeriodRepository(session),
            registrations=RegistrationRepository(session),
            notifications=NotificationLogRepository(session),
        )


@contextlib.contextmanager
def selection_uow(session_factory: Optional[Callable[[], Session]] = None) -> Iterator[UnitOfWork]:
    """Per-unit-of-work transaction scope.

    Yields a UnitOfWork bound to a fresh Session. Commits on success,
    rolls back on exception, always closes. A whole scoring, ranking or
    selection pass for a period runs inside one of these, so a failure in
    any path leaves the period untouched.

    Usage:
        with selection_uow() as uow:
            SelectionService(uow).run_selection(period_id, actor_id)
        # commit happens automatically on successful exit
    """
    if session_factory is None:
        from database.database import SessionLocal
        session_factory = SessionLocal

    session = session_factory()
    try:
        yield UnitOfWork.for_session(session)
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()
