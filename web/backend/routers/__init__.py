"""API route handlers."""

from .selection import router as selection_router
from .announcements import router as announcements_router
from .periods import router as periods_router
from .registrations import router as registrations_router
