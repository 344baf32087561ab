#!/usr/bin/env python3
"""
Period Service - lifecycle transitions of an admission period.

Draft -> Active -> Closed. At most one period is active per
(school, academic year, level): activating one closes the others.
"""

import logging

from core.enums import PeriodStatus
from core.exceptions import NotFoundException, ValidationException
from database.models import Period
from database.uow import UnitOfWork

logger = logging.getLogger(__name__)


class PeriodService:
    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    def _get_period(self, period_id: int) -> Period:
        period = self.uow.periods.get_for_update(period_id)
        if period is None:
            raise NotFoundException(f"Period {period_id} not found")
        return period

    def activate(self, period_id: int) -> Period:
        period = self._get_period(period_id)
        status = period.status_enum

        if status is PeriodStatus.ACTIVE:
            raise ValidationException("Period is already active")
        if status is PeriodStatus.CLOSED:
            raise ValidationException("Closed periods cannot be reactivated")
        level = period.level_enum

        others = self.uow.periods.find_active_by_school_and_level(
            period.school_id, period.academic_year, level.value, exclude_id=period.id
        )
        for other in others:
            self.uow.periods.update_status(other, PeriodStatus.CLOSED)
            logger.info(f"Closed period {other.id} while activating period {period.id}")

        self.uow.periods.update_status(period, PeriodStatus.ACTIVE)
        logger.info(f"Period {period.id} activated")
        return period

    def close(self, period_id: int) -> Period:
        period = self._get_period(period_id)
        if period.status_enum is PeriodStatus.CLOSED:
            raise ValidationException("Period is already closed")

        self.uow.periods.update_status(period, PeriodStatus.CLOSED)
        logger.info(f"Period {period.id} closed")
        return period
