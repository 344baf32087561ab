#!/usr/bin/env python3
"""
Selection Service - score, rank and allocate every path of a period.

Coordinates PathScorer -> RankingEngine -> AllocationEngine:
- calculate_scores: persist selection_score for every applicant in each path's pool
- update_rankings: persist dense ranks per path
- run_selection: rank, then accept top-N per path (N = quota), reject the rest

Each operation is idempotent and independently triggerable. Every path's
sequence runs under a per-path lock, and the caller wraps the whole pass in
one unit of work (database/uow.py) so a failure leaves the period untouched.
"""

import contextlib
import logging
from datetime import datetime, timezone
from typing import List, Optional

from core.allocation import AllocationEngine
from core.config_loader import SelectionConfig
from core.enums import PeriodStatus
from core.exceptions import NotFoundException, ScoringValidationError, ValidationException
from core.ranking import RankingEngine, RankedApplicant
from core.scorer import PathScorer
from core.selection.locks import PathLockRegistry, path_locks
from core.selection.models import (
    PathRankingStats,
    PathSelectionResult,
    RankingEntry,
    RankingPage,
    SelectionResult,
)
from database.models import Period, RegistrationPath
from database.uow import UnitOfWork

logger = logging.getLogger(__name__)


class SelectionService:
    """
    Orchestrates scoring, ranking and quota allocation for one period.

    Usage:
        with selection_uow() as uow:
            service = SelectionService(uow)
            service.calculate_scores(period_id)
            result = service.run_selection(period_id, actor_id=admin.id)
    """

    def __init__(
        self,
        uow: UnitOfWork,
        config: Optional[SelectionConfig] = None,
        scorer: Optional[PathScorer] = None,
        ranking_engine: Optional[RankingEngine] = None,
        allocation_engine: Optional[AllocationEngine] = None,
        locks: Optional[PathLockRegistry] = None
    ):
        self.uow = uow
        self.config = config or SelectionConfig()
        self.scorer = scorer or PathScorer()
        self.ranking_engine = ranking_engine or RankingEngine()
        self.allocation_engine = allocation_engine or AllocationEngine(
            rejection_reason=self.config.quota_rejection_reason
        )
        self.locks = locks or path_locks

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------
    def calculate_scores(self, period_id: int) -> int:
        """Score every applicant in each path's selection pool.

        Returns:
            Number of registrations scored

        Raises:
            NotFoundException: unknown period
            ValidationException: period already announced, or an applicant
                lacks a field its path requires
        """
        period = self._get_period(period_id, for_update=True)
        self._ensure_not_announced(period)

        total_calculated = 0
        paths = self.uow.periods.find_paths_by_period(period_id)

        with self._hold_paths(period_id, paths):
            for path in paths:
                registrations = self.uow.registrations.find_selection_pool(period_id, path.id)
                for registration in registrations:
                    try:
                        score = self.scorer.score_registration(registration, path)
                    except ScoringValidationError as e:
                        raise ScoringValidationError(
                            f"Registration {registration.id} ({path.name}): {e}", field=e.field
                        ) from e
                    self.uow.registrations.update_score(registration, score)
                    total_calculated += 1
            self.uow.session.flush()

        logger.info(f"Calculated scores for {total_calculated} registrations in period {period_id}")
        return total_calculated

    def update_rankings(self, period_id: int) -> int:
        """Rank the scored pool of every path; status is not touched.

        Returns:
            Number of registrations ranked
        """
        period = self._get_period(period_id, for_update=True)
        self._ensure_not_announced(period)

        total_ranked = 0
        paths = self.uow.periods.find_paths_by_period(period_id)

        with self._hold_paths(period_id, paths):
            for path in paths:
                total_ranked += len(self._rank_path(period_id, path))
            self.uow.session.flush()

        logger.info(f"Updated rankings for {total_ranked} registrations in period {period_id}")
        return total_ranked

    def run_selection(self, period_id: int, actor_id: Optional[int] = None) -> SelectionResult:
        """Rank and allocate every path of an active period.

        Previous engine decisions in the pool are fully overwritten, so
        re-running before announcement after a scoring correction is safe.

        Raises:
            NotFoundException: unknown period
            ValidationException: period not active, or already announced
        """
        period = self._get_period(period_id, for_update=True)
        if period.status_enum is not PeriodStatus.ACTIVE:
            raise ValidationException("Can only run selection for active periods")
        self._ensure_not_announced(period)

        result = SelectionResult(period_id=period_id)
        now = datetime.now(timezone.utc)
        paths = self.uow.periods.find_paths_by_period(period_id)

        with self._hold_paths(period_id, paths):
            for path in paths:
                path_result = self._allocate_path(period_id, path, now)
                result.paths.append(path_result)
                result.total_accepted += path_result.accepted
                result.total_rejected += path_result.rejected
            self.uow.session.flush()

        logger.info(
            f"Selection completed for period {period_id} by admin {actor_id}. "
            f"Accepted: {result.total_accepted}, Rejected: {result.total_rejected}"
        )
        return result

    def get_rankings(
        self,
        period_id: int,
        path_id: int,
        page: int = 1,
        page_size: Optional[int] = None
    ) -> RankingPage:
        """Ranked applicants of one path, best first, paginated."""
        self._get_period(period_id)
        path = self.uow.periods.get_path_by_id(path_id)
        if path is None or path.period_id != period_id:
            raise NotFoundException(f"Registration path {path_id} not found in period {period_id}")

        if page < 1:
            raise ValidationException("page must be >= 1")
        if page_size is None:
            page_size = self.config.rankings_page_size
        if page_size < 1 or page_size > self.config.max_rankings_page_size:
            raise ValidationException(
                f"page_size must be between 1 and {self.config.max_rankings_page_size}"
            )

        offset = (page - 1) * page_size
        registrations = self.uow.registrations.find_ranked(period_id, path_id, page_size, offset)
        total = self.uow.registrations.count_ranked(period_id, path_id)

        return RankingPage(
            period_id=period_id,
            path_id=path_id,
            page=page,
            page_size=page_size,
            total=total,
            rankings=[
                RankingEntry(
                    id=r.id,
                    registration_number=r.registration_number,
                    student_nisn=r.student_nisn,
                    student_name=r.student_name,
                    selection_score=r.selection_score,
                    ranking=r.ranking,
                    status=r.status,
                )
                for r in registrations
            ],
        )

    def get_ranking_stats(self, period_id: int) -> List[PathRankingStats]:
        """Per-path count / min / max / average of scored pool members."""
        self._get_period(period_id)

        stats = []
        for path in self.uow.periods.find_paths_by_period(period_id):
            s = self.uow.registrations.score_statistics(period_id, path.id)
            stats.append(PathRankingStats(
                path_id=path.id,
                path_name=path.name,
                path_type=path.path_type,
                quota=path.quota,
                total_registrations=s['count'],
                highest_score=s['highest_score'],
                lowest_score=s['lowest_score'],
                average_score=s['average_score'],
            ))
        return stats

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------
    def _get_period(self, period_id: int, for_update: bool = False) -> Period:
        # Mutating passes hold the period row so announce waits for them to commit
        if for_update:
            period = self.uow.periods.get_for_update(period_id)
        else:
            period = self.uow.periods.get_by_id(period_id)
        if period is None:
            raise NotFoundException(f"Period {period_id} not found")
        return period

    @staticmethod
    def _ensure_not_announced(period: Period) -> None:
        if period.is_announced:
            raise ValidationException(
                f"Results for period {period.id} were already announced; selection data is frozen"
            )

    def _hold_paths(self, period_id: int, paths: List[RegistrationPath]) -> contextlib.ExitStack:
        # Acquired in path id order so two passes never deadlock each other
        stack = contextlib.ExitStack()
        try:
            for path in sorted(paths, key=lambda p: p.id):
                stack.enter_context(self.locks.hold(period_id, path.id, self.uow.session))
        except BaseException:
            stack.close()
            raise
        return stack

    def _rank_path(self, period_id: int, path: RegistrationPath) -> List[RankedApplicant]:
        pool = self.uow.registrations.find_selection_pool(period_id, path.id, scored_only=True)
        ranked = self.ranking_engine.rank(pool)
        for entry in ranked:
            self.uow.registrations.update_ranking(entry.applicant, entry.ranking)
        return ranked

    def _allocate_path(self, period_id: int, path: RegistrationPath, now: datetime) -> PathSelectionResult:
        ranked = self._rank_path(period_id, path)
        outcome = self.allocation_engine.allocate(ranked, path.quota)

        for decision in outcome.decisions:
            self.uow.registrations.apply_allocation(
                decision.applicant,
                decision.outcome.registration_status,
                decision.rejection_reason,
                now,
            )

        unscored = len(self.uow.registrations.find_selection_pool(period_id, path.id)) - len(ranked)
        if unscored:
            logger.warning(
                f"Path {path.id} ({path.name}): {unscored} verified registrations have no score "
                f"and were left out of selection; run calculate-scores first"
            )

        logger.debug(
            f"Path {path.id} ({path.name}): quota={path.quota}, "
            f"accepted={len(outcome.accepted)}, rejected={len(outcome.rejected)}"
        )
        return PathSelectionResult(
            path_id=path.id,
            path_name=path.name,
            quota=path.quota,
            accepted=len(outcome.accepted),
            rejected=len(outcome.rejected),
            unscored=unscored,
        )
