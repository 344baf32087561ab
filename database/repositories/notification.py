import logging
from typing import Any, Dict, List, Optional

from sqlalchemy import select

from database.models import NotificationLog
from database.repositories.base import BaseRepository

logger = logging.getLogger(__name__)


class NotificationLogRepository(BaseRepository):
    def record(
        self,
        registration_id: int,
        period_id: int,
        event_type: str,
        channel_type: str,
        recipient: Optional[str],
        subject: Optional[str],
        success: bool,
        notification_id: Optional[str] = None,
        error_message: Optional[str] = None,
        event_data: Optional[Dict[str, Any]] = None
    ) -> NotificationLog:
        entry = NotificationLog(
            registration_id=registration_id,
            period_id=period_id,
            event_type=event_type,
            channel_type=channel_type,
            recipient=recipient,
            subject=subject,
            notification_id=notification_id,
            sent_successfully=success,
            error_message=error_message,
            event_data=event_data or {},
        )
        self.db.add(entry)
        return entry

    def find_by_period(self, period_id: int) -> List[NotificationLog]:
        stmt = (
            select(NotificationLog)
            .where(NotificationLog.period_id == period_id)
            .order_by(NotificationLog.id)
        )
        return list(self.db.execute(stmt).scalars().all())
