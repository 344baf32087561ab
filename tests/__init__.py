#!/usr/bin/env python3
"""
Test suite configuration and utilities.

All tests run against an in-memory SQLite database (see tests/conftest.py),
so no external services are needed:

    python -m pytest tests/ -v

The helpers below seed periods, paths and registrations with sensible
defaults; pass keyword arguments to override any column.
"""

from datetime import date, datetime, timedelta, timezone
from typing import Any, Dict, Optional

from core.enums import PathType, PeriodStatus, RegistrationStatus
from database.models import Period, RegistrationPath, Registration

BASE_TIME = datetime(2025, 6, 1, 8, 0, 0, tzinfo=timezone.utc)

_nisn_counter = 0


def next_nisn() -> str:
    """Unique 10-digit NISN."""
    global _nisn_counter
    _nisn_counter += 1
    return f"{_nisn_counter:010d}"


def make_period(session, status: PeriodStatus = PeriodStatus.ACTIVE, **overrides) -> Period:
    values: Dict[str, Any] = dict(
        school_id=1,
        academic_year="2025/2026",
        level="SMP",
        start_date=date(2025, 6, 1),
        end_date=date(2025, 6, 30),
        status=status.value,
    )
    values.update(overrides)
    period = Period(**values)
    session.add(period)
    session.flush()
    return period


def make_path(
    session,
    period: Period,
    path_type: PathType = PathType.PROXIMITY,
    quota: int = 3,
    scoring_config: Optional[Dict[str, Any]] = None,
    **overrides
) -> RegistrationPath:
    values: Dict[str, Any] = dict(
        period_id=period.id,
        path_type=path_type.value,
        name=f"Jalur {path_type.value.replace('_', ' ').title()}",
        quota=quota,
        scoring_config=scoring_config if scoring_config is not None else {},
    )
    values.update(overrides)
    path = RegistrationPath(**values)
    session.add(path)
    session.flush()
    return path


def make_registration(
    session,
    period: Period,
    path: RegistrationPath,
    path_data: Optional[Dict[str, Any]] = None,
    status: RegistrationStatus = RegistrationStatus.VERIFIED,
    submitted_offset_minutes: int = 0,
    **overrides
) -> Registration:
    nisn = overrides.pop('student_nisn', None) or next_nisn()
    values: Dict[str, Any] = dict(
        school_id=period.school_id,
        user_id=100,
        period_id=period.id,
        path_id=path.id,
        registration_number=f"REG-{period.school_id}-{period.id}-{nisn[-5:]}",
        student_nisn=nisn,
        student_name=f"Student {nisn[-4:]}",
        student_email=f"student{nisn[-4:]}@example.com",
        path_data=path_data or {},
        status=status.value,
        submitted_at=BASE_TIME + timedelta(minutes=submitted_offset_minutes),
    )
    values.update(overrides)
    registration = Registration(**values)
    session.add(registration)
    session.flush()
    return registration
