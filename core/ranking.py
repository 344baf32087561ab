#!/usr/bin/env python3
"""
Ranking Engine - total order and dense ranks within one path.

Ordering:
1. selection_score, highest first
2. submission time, earliest first (created_at when never submitted)
3. id, lowest first, so the order is total and re-runs are identical

Ranks are 1..K with no gaps, even when scores are duplicated.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Iterable, List, Optional, Protocol, Tuple, runtime_checkable

from core.exceptions import ValidationException

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


@runtime_checkable
class Rankable(Protocol):
    id: Any
    selection_score: Optional[float]
    submitted_at: Optional[datetime]
    created_at: Optional[datetime]


@dataclass(frozen=True)
class RankedApplicant:
    applicant: Any
    ranking: int

    @property
    def selection_score(self) -> float:
        return float(self.applicant.selection_score)


def _as_utc(value: Optional[datetime]) -> datetime:
    if value is None:
        return _EPOCH
    # SQLite hands back naive timestamps
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def submission_time(applicant: Rankable) -> datetime:
    submitted = getattr(applicant, 'submitted_at', None)
    if submitted is not None:
        return _as_utc(submitted)
    return _as_utc(getattr(applicant, 'created_at', None))


def ranking_key(applicant: Rankable) -> Tuple[float, datetime, Any]:
    """Sort key: score desc, submission time asc, id asc."""
    return (-float(applicant.selection_score), submission_time(applicant), applicant.id)


def compare_applicants(a: Rankable, b: Rankable) -> int:
    """Three-way comparator; negative when ``a`` ranks ahead of ``b``."""
    ka, kb = ranking_key(a), ranking_key(b)
    return (ka > kb) - (ka < kb)


class RankingEngine:
    """Assigns dense 1-based ranks to scored applicants of one path."""

    def rank(self, applicants: Iterable[Rankable]) -> List[RankedApplicant]:
        candidates = list(applicants)
        unscored = [a.id for a in candidates if a.selection_score is None]
        if unscored:
            raise ValidationException(
                f"Cannot rank applicants without a selection score: {unscored}"
            )

        ordered = sorted(candidates, key=ranking_key)
        return [RankedApplicant(applicant=a, ranking=i) for i, a in enumerate(ordered, start=1)]
