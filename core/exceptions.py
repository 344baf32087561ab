#!/usr/bin/env python3
"""
Exceptions raised by the selection engine.

The web layer maps these onto HTTP responses (see web/backend/exceptions.py);
the CLI prints them. Nothing in the engine retries on them.
"""

from typing import Optional


class ServiceException(Exception):
    """Base exception for service layer errors."""
    pass


class ValidationException(ServiceException):
    """Raised when a request violates a business rule or precondition."""
    pass


class NotFoundException(ServiceException):
    """Raised when a period, path or registration does not exist."""
    pass


class ScoringValidationError(ValidationException):
    """Raised when applicant data is missing or invalid for its path type."""

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message)
        self.field = field


class NotificationException(ServiceException):
    """Raised when a notification cannot be dispatched."""
    pass
