import logging
from datetime import datetime
from typing import List, Optional

from sqlalchemy import select

from core.enums import PeriodStatus
from database.models import Period, RegistrationPath
from database.repositories.base import BaseRepository

logger = logging.getLogger(__name__)


class PeriodRepository(BaseRepository):
    def get_by_id(self, period_id: int) -> Optional[Period]:
        stmt = select(Period).where(Period.id == period_id)
        return self.db.execute(stmt).scalar_one_or_none()

    def get_for_update(self, period_id: int) -> Optional[Period]:
        """Fetch a period with a row lock (no-op on backends without FOR UPDATE)."""
        stmt = select(Period).where(Period.id == period_id).with_for_update()
        return self.db.execute(stmt).scalar_one_or_none()

    def find_active_by_school_and_level(
        self,
        school_id: int,
        academic_year: str,
        level: str,
        exclude_id: Optional[int] = None
    ) -> List[Period]:
        stmt = select(Period).where(
            Period.school_id == school_id,
            Period.academic_year == academic_year,
            Period.level == level,
            Period.status == PeriodStatus.ACTIVE.value
        )
        if exclude_id is not None:
            stmt = stmt.where(Period.id != exclude_id)
        return list(self.db.execute(stmt).scalars().all())

    def update_status(self, period: Period, status: PeriodStatus) -> Period:
        period.status = status.value
        self.db.flush()
        return period

    def set_announcement_date(self, period: Period, when: datetime) -> Period:
        period.announcement_date = when
        self.db.flush()
        return period

    def find_paths_by_period(self, period_id: int) -> List[RegistrationPath]:
        stmt = (
            select(RegistrationPath)
            .where(RegistrationPath.period_id == period_id)
            .order_by(RegistrationPath.id)
        )
        return list(self.db.execute(stmt).scalars().all())

    def get_path_by_id(self, path_id: int) -> Optional[RegistrationPath]:
        stmt = select(RegistrationPath).where(RegistrationPath.id == path_id)
        return self.db.execute(stmt).scalar_one_or_none()
