from core.announcement.service import AnnouncementService
from core.announcement.models import (
    AnnouncementResult,
    PathSelectionSummary,
    SelectionSummary,
    ResultCheck,
)

__all__ = [
    'AnnouncementService',
    'AnnouncementResult',
    'PathSelectionSummary',
    'SelectionSummary',
    'ResultCheck',
]
