#!/usr/bin/env python3
"""
Announcement endpoints - publish results and public result lookup.
"""

import logging

from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import JSONResponse
from slowapi import Limiter
from slowapi.util import get_remote_address
from slowapi.errors import RateLimitExceeded

from core.announcement import AnnouncementService
from database.uow import UnitOfWork
from ..config import get_config
from ..dependencies import get_uow, get_actor_id, get_notifier
from ..models.responses import (
    AnnounceResponse,
    AnnouncementResultModel,
    SummaryResponse,
    SelectionSummaryModel,
    ResultCheckResponse,
)

logger = logging.getLogger(__name__)

limiter = Limiter(key_func=get_remote_address)

router = APIRouter(prefix="/api", tags=["announcements"])

NISN_LENGTH = 10


def add_rate_limit_handlers(app):
    """Add rate limit exception handlers to the FastAPI app."""
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)


async def _rate_limit_exceeded_handler(request: Request, exc: RateLimitExceeded):
    return JSONResponse(
        status_code=429,
        content={
            "success": False,
            "error": f"Rate limit exceeded: {exc.detail}",
            "type": "RateLimitExceeded"
        }
    )


def _check_result_limit() -> str:
    return get_config().web.check_result_rate_limit


@router.post("/periods/{period_id}/announce", response_model=AnnounceResponse)
def announce_results(
    period_id: int,
    uow: UnitOfWork = Depends(get_uow),
    actor_id: int = Depends(get_actor_id),
    notifier=Depends(get_notifier)
):
    """
    Publish the results of a period and notify applicants.

    Irreversible: afterwards scores, ranks and statuses are frozen and the
    public result lookup opens.
    """
    result = AnnouncementService(uow, notifier).announce(period_id, actor_id=actor_id)
    uow.session.commit()
    return AnnounceResponse(
        message=(
            f"Results announced successfully. {result.total_notified} notifications sent "
            f"({result.accepted_notified} accepted, {result.rejected_notified} rejected)"
        ),
        result=AnnouncementResultModel.model_validate(result)
    )


@router.get("/periods/{period_id}/summary", response_model=SummaryResponse)
def get_selection_summary(period_id: int, uow: UnitOfWork = Depends(get_uow)):
    """Verified / accepted / rejected counts with remaining quota per path."""
    summary = AnnouncementService(uow).get_summary(period_id)
    return SummaryResponse(summary=SelectionSummaryModel.model_validate(summary))


@router.get("/check-result", response_model=ResultCheckResponse)
@limiter.limit(_check_result_limit)
def check_result(
    request: Request,
    registration_number: str = Query(..., min_length=1),
    student_nisn: str = Query(..., min_length=NISN_LENGTH, max_length=NISN_LENGTH),
    uow: UnitOfWork = Depends(get_uow)
):
    """Public lookup of one applicant's result, available after announcement."""
    result = AnnouncementService(uow).check_result(registration_number, student_nisn)
    return ResultCheckResponse.model_validate(result)
