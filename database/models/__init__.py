from .base import Base
from .period import Period, RegistrationPath
from .registration import Registration
from .notification import NotificationLog

__all__ = [
    'Base',
    'Period',
    'RegistrationPath',
    'Registration',
    'NotificationLog',
]
