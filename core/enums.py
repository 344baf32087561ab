#!/usr/bin/env python3
"""
Closed enumerations for admission workflow state.

Values are the strings stored in the database and exchanged over the API.
Each enum has a single ``parse`` entry point used at the system boundary;
internal code only ever handles enum members.
"""

from enum import Enum

from core.exceptions import ValidationException


class _ParseableEnum(str, Enum):
    """String enum with a validating constructor for raw wire values."""

    @classmethod
    def parse(cls, raw):
        if isinstance(raw, cls):
            return raw
        if isinstance(raw, str):
            value = raw.strip().lower()
            for member in cls:
                if member.value.lower() == value:
                    return member
        allowed = ', '.join(m.value for m in cls)
        raise ValidationException(f"Unknown {cls._label()}: {raw!r}. Allowed: {allowed}")

    @classmethod
    def _label(cls) -> str:
        return cls.__name__


class PathType(_ParseableEnum):
    """Competing admission channel within a period."""
    PROXIMITY = "zonasi"
    ACHIEVEMENT = "prestasi"
    AFFIRMATIVE = "afirmasi"
    PARENT_TRANSFER = "perpindahan_tugas"

    @classmethod
    def _label(cls) -> str:
        return "path type"


class PeriodStatus(_ParseableEnum):
    DRAFT = "draft"
    ACTIVE = "active"
    CLOSED = "closed"

    @classmethod
    def _label(cls) -> str:
        return "period status"


class RegistrationStatus(_ParseableEnum):
    DRAFT = "draft"
    SUBMITTED = "submitted"
    VERIFIED = "verified"
    REJECTED = "rejected"
    ACCEPTED = "accepted"
    ENROLLED = "enrolled"
    EXPIRED = "expired"

    @classmethod
    def _label(cls) -> str:
        return "registration status"


class SelectionOutcome(_ParseableEnum):
    """Result of quota allocation for one applicant."""
    ACCEPTED = "accepted"
    REJECTED = "rejected"

    @property
    def registration_status(self) -> RegistrationStatus:
        if self is SelectionOutcome.ACCEPTED:
            return RegistrationStatus.ACCEPTED
        return RegistrationStatus.REJECTED

    @classmethod
    def _label(cls) -> str:
        return "selection outcome"


class Level(_ParseableEnum):
    """Education level a period admits for."""
    SD = "SD"
    SMP = "SMP"
    SMA = "SMA"
    SMK = "SMK"

    @classmethod
    def _label(cls) -> str:
        return "education level"
