#!/usr/bin/env python3
"""
Registration Service - submission and administrator verification.

Moves a registration into (or out of) the selection pool:
    draft --submit--> submitted --verify--> verified
                                 --reject--> rejected (administrator reason)

Administrator rejections never carry allocated_at, so the selection engine
never re-processes them.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional

from core.config_loader import SelectionConfig
from core.enums import RegistrationStatus
from core.exceptions import NotFoundException, ValidationException
from database.models import Registration
from database.uow import UnitOfWork

logger = logging.getLogger(__name__)


@dataclass
class VerificationStats:
    period_id: int
    total: int
    submitted: int
    verified: int
    rejected: int

    @property
    def pending(self) -> int:
        return self.submitted


class RegistrationService:
    def __init__(self, uow: UnitOfWork, config: Optional[SelectionConfig] = None):
        self.uow = uow
        self.config = config or SelectionConfig()

    def _get_registration(self, registration_id: int) -> Registration:
        registration = self.uow.registrations.get_by_id(registration_id)
        if registration is None:
            raise NotFoundException(f"Registration {registration_id} not found")
        return registration

    def _ensure_not_announced(self, registration: Registration) -> None:
        period = self.uow.periods.get_by_id(registration.period_id)
        if period is not None and period.is_announced:
            raise ValidationException("Results for this period have already been announced")

    def submit(self, registration_id: int) -> Registration:
        """Draft -> Submitted; assigns the registration number."""
        registration = self._get_registration(registration_id)
        if registration.status_enum is not RegistrationStatus.DRAFT:
            raise ValidationException("Can only submit registrations in draft status")

        registration.registration_number = self.uow.registrations.next_registration_number(
            registration.school_id, registration.period_id
        )
        registration.submitted_at = datetime.now(timezone.utc)
        self.uow.registrations.update_status(registration, RegistrationStatus.SUBMITTED)

        logger.info(f"Registration {registration.id} submitted as {registration.registration_number}")
        return registration

    def verify(self, registration_id: int, admin_id: int) -> Registration:
        registration = self._get_registration(registration_id)
        if registration.status_enum is not RegistrationStatus.SUBMITTED:
            raise ValidationException("Can only verify registrations in submitted status")
        self._ensure_not_announced(registration)

        registration.verified_at = datetime.now(timezone.utc)
        registration.verified_by = admin_id
        self.uow.registrations.update_status(registration, RegistrationStatus.VERIFIED)

        logger.info(f"Registration {registration.id} verified by admin {admin_id}")
        return registration

    def reject(self, registration_id: int, reason: str, admin_id: int) -> Registration:
        """Submitted -> Rejected with an administrator reason."""
        registration = self._get_registration(registration_id)
        if registration.status_enum is not RegistrationStatus.SUBMITTED:
            raise ValidationException("Can only reject registrations in submitted status")

        reason = (reason or "").strip()
        min_length = self.config.rejection_reason_min_length
        if len(reason) < min_length:
            raise ValidationException(f"Rejection reason must be at least {min_length} characters")

        registration.verified_at = datetime.now(timezone.utc)
        registration.verified_by = admin_id
        self.uow.registrations.update_status(registration, RegistrationStatus.REJECTED, reason)

        logger.info(f"Registration {registration.id} rejected by admin {admin_id} with reason: {reason}")
        return registration

    def get_verification_stats(self, period_id: int) -> VerificationStats:
        if self.uow.periods.get_by_id(period_id) is None:
            raise NotFoundException(f"Period {period_id} not found")

        count = self.uow.registrations.count_by_status
        return VerificationStats(
            period_id=period_id,
            total=count(period_id),
            submitted=count(period_id, RegistrationStatus.SUBMITTED),
            verified=count(period_id, RegistrationStatus.VERIFIED),
            rejected=count(period_id, RegistrationStatus.REJECTED),
        )
