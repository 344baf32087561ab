from sqlalchemy import Column, Integer, Text, TIMESTAMP, ForeignKey, Boolean, Index, func
from sqlalchemy.orm import relationship

from .base import Base, JSONBag, utcnow


class NotificationLog(Base):
    """
    Records every result notification dispatched during an announcement.

    Failures are recorded rather than raised so that one bad recipient
    never aborts the announcement.
    """
    __tablename__ = 'notification_log'

    id = Column(Integer, primary_key=True, autoincrement=True)
    registration_id = Column(Integer, ForeignKey('registrations.id', ondelete='CASCADE'), nullable=False)
    period_id = Column(Integer, ForeignKey('periods.id', ondelete='CASCADE'), nullable=False)

    event_type = Column(Text, nullable=False)  # selection_accepted | selection_rejected
    channel_type = Column(Text, nullable=False)  # email, webhook, in_app
    recipient = Column(Text, nullable=True)
    subject = Column(Text, nullable=True)

    notification_id = Column(Text, nullable=True)  # RQ job id or sync id
    sent_successfully = Column(Boolean, default=False)
    error_message = Column(Text, nullable=True)
    event_data = Column(JSONBag, default=dict)

    created_at = Column(TIMESTAMP(timezone=True), nullable=False, default=utcnow, server_default=func.now())

    registration = relationship("Registration")

    __table_args__ = (
        Index('idx_notification_log_period', 'period_id'),
        Index('idx_notification_log_registration', 'registration_id'),
    )
