from database.repositories.base import BaseRepository
from database.repositories.period import PeriodRepository
from database.repositories.registration import RegistrationRepository
from database.repositories.notification import NotificationLogRepository

__all__ = [
    'BaseRepository',
    'PeriodRepository',
    'RegistrationRepository',
    'NotificationLogRepository',
]
