#!/usr/bin/env python3
"""
Selection Models - result structures returned by SelectionService.
"""

from typing import List, Optional
from dataclasses import dataclass, field


@dataclass
class PathSelectionResult:
    """Allocation outcome for one path."""
    path_id: int
    path_name: str
    quota: int
    accepted: int = 0
    rejected: int = 0
    unscored: int = 0  # verified but never scored, left untouched


@dataclass
class SelectionResult:
    period_id: int
    total_accepted: int = 0
    total_rejected: int = 0
    paths: List[PathSelectionResult] = field(default_factory=list)


@dataclass
class RankingEntry:
    id: int
    registration_number: Optional[str]
    student_nisn: str
    student_name: str
    selection_score: Optional[float]
    ranking: Optional[int]
    status: str


@dataclass
class RankingPage:
    period_id: int
    path_id: int
    page: int
    page_size: int
    total: int
    rankings: List[RankingEntry] = field(default_factory=list)


@dataclass
class PathRankingStats:
    path_id: int
    path_name: str
    path_type: str
    quota: int
    total_registrations: int
    highest_score: Optional[float]
    lowest_score: Optional[float]
    average_score: Optional[float]
