#!/usr/bin/env python3
"""
Announcement Models - results of announcing, summarizing and looking up a period.
"""

from datetime import datetime
from typing import List, Optional
from dataclasses import dataclass, field


@dataclass
class AnnouncementResult:
    period_id: int
    announcement_date: datetime
    total_notified: int = 0
    accepted_notified: int = 0
    rejected_notified: int = 0
    failed_notifications: int = 0  # applicants with at least one failed dispatch


@dataclass
class PathSelectionSummary:
    path_id: int
    path_name: str
    quota: int
    verified: int = 0
    accepted: int = 0
    rejected: int = 0
    remaining_quota: int = 0


@dataclass
class SelectionSummary:
    period_id: int
    verified: int = 0
    accepted: int = 0
    rejected: int = 0
    announcement_date: Optional[datetime] = None
    paths: List[PathSelectionSummary] = field(default_factory=list)


@dataclass
class ResultCheck:
    """Public view of one applicant's result."""
    registration_number: str
    student_name: str
    student_nisn: str
    path_name: str
    selection_score: Optional[float]
    ranking: Optional[int]
    status: str
    rejection_reason: Optional[str]
    announcement_date: Optional[datetime]
    reenrollment_deadline: Optional[datetime]
