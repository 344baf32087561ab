import logging
from datetime import datetime
from typing import Dict, List, Optional, Any

from sqlalchemy import select, func, and_, or_

from core.enums import RegistrationStatus
from database.models import Registration
from database.repositories.base import BaseRepository

logger = logging.getLogger(__name__)

REGISTRATION_NUMBER_FORMAT = "REG-{school_id}-{period_id}-{number:05d}"


def selection_pool_clause():
    """Registrations the selection engine may (re)score, (re)rank and (re)allocate.

    Verified registrations, plus registrations an earlier allocation run
    already accepted or rejected. Administrator rejections never carry
    allocated_at and are therefore excluded.
    """
    return or_(
        Registration.status == RegistrationStatus.VERIFIED.value,
        and_(
            Registration.status.in_([
                RegistrationStatus.ACCEPTED.value,
                RegistrationStatus.REJECTED.value,
            ]),
            Registration.allocated_at.isnot(None),
        ),
    )


class RegistrationRepository(BaseRepository):
    def get_by_id(self, registration_id: int) -> Optional[Registration]:
        stmt = select(Registration).where(Registration.id == registration_id)
        return self.db.execute(stmt).scalar_one_or_none()

    def find_by_number_and_nisn(self, registration_number: str, student_nisn: str) -> List[Registration]:
        stmt = select(Registration).where(
            Registration.registration_number == registration_number,
            Registration.student_nisn == student_nisn
        )
        return list(self.db.execute(stmt).scalars().all())

    def find_selection_pool(
        self,
        period_id: int,
        path_id: int,
        scored_only: bool = False
    ) -> List[Registration]:
        stmt = select(Registration).where(
            Registration.period_id == period_id,
            Registration.path_id == path_id,
            selection_pool_clause()
        )
        if scored_only:
            stmt = stmt.where(Registration.selection_score.isnot(None))
        stmt = stmt.order_by(Registration.id)
        return list(self.db.execute(stmt).scalars().all())

    def find_ranked(
        self,
        period_id: int,
        path_id: int,
        limit: int,
        offset: int
    ) -> List[Registration]:
        stmt = (
            select(Registration)
            .where(
                Registration.period_id == period_id,
                Registration.path_id == path_id,
                selection_pool_clause(),
                Registration.selection_score.isnot(None),
                Registration.ranking.isnot(None)
            )
            .order_by(Registration.ranking.asc())
            .limit(limit)
            .offset(offset)
        )
        return list(self.db.execute(stmt).scalars().all())

    def count_ranked(self, period_id: int, path_id: int) -> int:
        stmt = select(func.count(Registration.id)).where(
            Registration.period_id == period_id,
            Registration.path_id == path_id,
            selection_pool_clause(),
            Registration.selection_score.isnot(None),
            Registration.ranking.isnot(None)
        )
        return self.db.execute(stmt).scalar_one()

    def find_by_status(self, period_id: int, status: RegistrationStatus) -> List[Registration]:
        stmt = (
            select(Registration)
            .where(
                Registration.period_id == period_id,
                Registration.status == status.value
            )
            .order_by(Registration.path_id, Registration.ranking, Registration.id)
        )
        return list(self.db.execute(stmt).scalars().all())

    def count_by_status(
        self,
        period_id: int,
        status: Optional[RegistrationStatus] = None,
        path_id: Optional[int] = None
    ) -> int:
        stmt = select(func.count(Registration.id)).where(Registration.period_id == period_id)
        if status is not None:
            stmt = stmt.where(Registration.status == status.value)
        if path_id is not None:
            stmt = stmt.where(Registration.path_id == path_id)
        return self.db.execute(stmt).scalar_one()

    def score_statistics(self, period_id: int, path_id: int) -> Dict[str, Any]:
        stmt = select(
            func.count(Registration.id),
            func.min(Registration.selection_score),
            func.max(Registration.selection_score),
            func.avg(Registration.selection_score)
        ).where(
            Registration.period_id == period_id,
            Registration.path_id == path_id,
            selection_pool_clause(),
            Registration.selection_score.isnot(None)
        )
        count, lowest, highest, average = self.db.execute(stmt).one()
        return {
            'count': int(count or 0),
            'lowest_score': float(lowest) if lowest is not None else None,
            'highest_score': float(highest) if highest is not None else None,
            'average_score': round(float(average), 2) if average is not None else None,
        }

    def update_score(self, registration: Registration, score: float) -> None:
        registration.selection_score = score

    def update_ranking(self, registration: Registration, ranking: int) -> None:
        registration.ranking = ranking

    def apply_allocation(
        self,
        registration: Registration,
        status: RegistrationStatus,
        rejection_reason: Optional[str],
        allocated_at: datetime
    ) -> None:
        registration.status = status.value
        registration.rejection_reason = rejection_reason
        registration.allocated_at = allocated_at

    def update_status(
        self,
        registration: Registration,
        status: RegistrationStatus,
        rejection_reason: Optional[str] = None
    ) -> Registration:
        registration.status = status.value
        registration.rejection_reason = rejection_reason
        self.db.flush()
        return registration

    def next_registration_number(self, school_id: int, period_id: int) -> str:
        stmt = select(func.count(Registration.id)).where(
            Registration.school_id == school_id,
            Registration.period_id == period_id,
            Registration.registration_number.isnot(None)
        )
        count = self.db.execute(stmt).scalar_one()
        return REGISTRATION_NUMBER_FORMAT.format(
            school_id=school_id, period_id=period_id, number=count + 1
        )
