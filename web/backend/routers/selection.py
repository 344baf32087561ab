#!/usr/bin/env python3
"""
Selection endpoints - score, rank and allocate a period.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query

from core.selection import SelectionService
from database.uow import UnitOfWork
from ..config import get_config
from ..dependencies import get_uow, get_actor_id
from ..models.responses import (
    ScoreCalculationResponse,
    RankingUpdateResponse,
    SelectionRunResponse,
    SelectionResultModel,
    RankingsResponse,
    RankingStatsResponse,
    PathRankingStatsModel,
)

router = APIRouter(prefix="/api/periods", tags=["selection"])


def _service(uow: UnitOfWork) -> SelectionService:
    return SelectionService(uow, config=get_config().selection)


@router.post("/{period_id}/calculate-scores", response_model=ScoreCalculationResponse)
def calculate_scores(
    period_id: int,
    uow: UnitOfWork = Depends(get_uow),
    actor_id: int = Depends(get_actor_id)
):
    """
    Score every verified applicant of the period against its path rules.

    Safe to call repeatedly until results are announced.
    """
    total = _service(uow).calculate_scores(period_id)
    uow.session.commit()
    return ScoreCalculationResponse(
        message=f"Calculated scores for {total} registrations",
        total_calculated=total
    )


@router.post("/{period_id}/update-rankings", response_model=RankingUpdateResponse)
def update_rankings(
    period_id: int,
    uow: UnitOfWork = Depends(get_uow),
    actor_id: int = Depends(get_actor_id)
):
    """Recompute per-path rankings from the current scores."""
    total = _service(uow).update_rankings(period_id)
    uow.session.commit()
    return RankingUpdateResponse(
        message=f"Updated rankings for {total} registrations",
        total_ranked=total
    )


@router.get("/{period_id}/rankings", response_model=RankingsResponse)
def get_rankings(
    period_id: int,
    path_id: int = Query(..., description="Registration path to list"),
    page: int = Query(1, ge=1),
    page_size: Optional[int] = Query(None, ge=1, description="Defaults to selection.rankings_page_size"),
    uow: UnitOfWork = Depends(get_uow)
):
    """Ranked applicants of one path, best first."""
    result = _service(uow).get_rankings(period_id, path_id, page=page, page_size=page_size)
    return RankingsResponse.model_validate(result)


@router.get("/{period_id}/stats", response_model=RankingStatsResponse)
def get_ranking_stats(period_id: int, uow: UnitOfWork = Depends(get_uow)):
    """Per-path count, lowest, highest and average score."""
    stats = _service(uow).get_ranking_stats(period_id)
    return RankingStatsResponse(
        period_id=period_id,
        paths=[PathRankingStatsModel.model_validate(s) for s in stats]
    )


@router.post("/{period_id}/run-selection", response_model=SelectionRunResponse)
def run_selection(
    period_id: int,
    uow: UnitOfWork = Depends(get_uow),
    actor_id: int = Depends(get_actor_id)
):
    """
    Accept the top-N applicants of every path (N = quota) and reject the rest.

    The period must be active and not yet announced.
    """
    result = _service(uow).run_selection(period_id, actor_id=actor_id)
    uow.session.commit()
    return SelectionRunResponse(
        message=(
            f"Selection completed. {result.total_accepted} accepted, "
            f"{result.total_rejected} rejected"
        ),
        result=SelectionResultModel.model_validate(result)
    )
