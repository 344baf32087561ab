#!/usr/bin/env python3
"""
Period endpoints - lifecycle transitions and verification statistics.
"""

from fastapi import APIRouter, Depends

from core.periods import PeriodService
from core.registrations import RegistrationService
from database.uow import UnitOfWork
from ..config import get_config
from ..dependencies import get_uow, get_actor_id
from ..models.responses import (
    PeriodResponse,
    PeriodModel,
    VerificationStatsResponse,
    VerificationStatsModel,
)

router = APIRouter(prefix="/api/periods", tags=["periods"])


@router.post("/{period_id}/activate", response_model=PeriodResponse)
def activate_period(
    period_id: int,
    uow: UnitOfWork = Depends(get_uow),
    actor_id: int = Depends(get_actor_id)
):
    """Activate a draft period, closing any other active period of the same school, year and level."""
    period = PeriodService(uow).activate(period_id)
    uow.session.commit()
    return PeriodResponse(message="Period activated", period=PeriodModel.model_validate(period))


@router.post("/{period_id}/close", response_model=PeriodResponse)
def close_period(
    period_id: int,
    uow: UnitOfWork = Depends(get_uow),
    actor_id: int = Depends(get_actor_id)
):
    period = PeriodService(uow).close(period_id)
    uow.session.commit()
    return PeriodResponse(message="Period closed", period=PeriodModel.model_validate(period))


@router.get("/{period_id}/verification-stats", response_model=VerificationStatsResponse)
def get_verification_stats(period_id: int, uow: UnitOfWork = Depends(get_uow)):
    stats = RegistrationService(uow, get_config().selection).get_verification_stats(period_id)
    return VerificationStatsResponse(stats=VerificationStatsModel.model_validate(stats))
