#!/usr/bin/env python3
"""
Request models for API endpoints.
"""

from pydantic import BaseModel, Field


class RejectRegistrationRequest(BaseModel):
    """Administrator rejection of a submitted registration."""
    reason: str = Field(..., description="Why the registration is rejected (at least 10 characters)")
