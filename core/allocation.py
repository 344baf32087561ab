#!/usr/bin/env python3
"""
Allocation Engine - strict top-N quota cut over a ranked path.

An applicant with ranking <= quota is accepted, everyone else is rejected
with a quota reason. Applicants tied at the cutoff score are not expanded;
the ranking tie-break already decided their order.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, List, Optional, Sequence

from core.enums import SelectionOutcome
from core.exceptions import ValidationException

DEFAULT_QUOTA_REJECTION_REASON = "Quota exceeded: ranked outside the available capacity"


@dataclass(frozen=True)
class AllocationDecision:
    applicant: Any
    ranking: int
    outcome: SelectionOutcome
    rejection_reason: Optional[str] = None


@dataclass
class AllocationOutcome:
    accepted: List[AllocationDecision] = field(default_factory=list)
    rejected: List[AllocationDecision] = field(default_factory=list)

    @property
    def decisions(self) -> List[AllocationDecision]:
        return sorted(self.accepted + self.rejected, key=lambda d: d.ranking)


class AllocationEngine:
    """Partitions a ranked list into accepted / rejected against a quota."""

    def __init__(self, rejection_reason: str = DEFAULT_QUOTA_REJECTION_REASON):
        self.rejection_reason = rejection_reason

    def allocate(self, ranked: Sequence[Any], quota: int) -> AllocationOutcome:
        """
        Args:
            ranked: objects exposing ``applicant`` and ``ranking`` (RankedApplicant)
            quota: path capacity, >= 0

        Returns:
            AllocationOutcome with decisions ordered by ranking
        """
        if quota is None or quota < 0:
            raise ValidationException(f"Quota must be zero or positive, got {quota!r}")

        outcome = AllocationOutcome()
        for entry in sorted(ranked, key=lambda r: r.ranking):
            if entry.ranking <= quota:
                outcome.accepted.append(AllocationDecision(
                    applicant=entry.applicant,
                    ranking=entry.ranking,
                    outcome=SelectionOutcome.ACCEPTED,
                ))
            else:
                outcome.rejected.append(AllocationDecision(
                    applicant=entry.applicant,
                    ranking=entry.ranking,
                    outcome=SelectionOutcome.REJECTED,
                    rejection_reason=self.rejection_reason,
                ))
        return outcome
