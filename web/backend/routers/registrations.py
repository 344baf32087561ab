#!/usr/bin/env python3
"""
Registration endpoints - submission and administrator verification.
"""

from fastapi import APIRouter, Depends

from core.registrations import RegistrationService
from database.uow import UnitOfWork
from ..config import get_config
from ..dependencies import get_uow, get_actor_id
from ..models.requests import RejectRegistrationRequest
from ..models.responses import RegistrationResponse, RegistrationModel

router = APIRouter(prefix="/api/registrations", tags=["registrations"])


def _service(uow: UnitOfWork) -> RegistrationService:
    return RegistrationService(uow, get_config().selection)


@router.post("/{registration_id}/submit", response_model=RegistrationResponse)
def submit_registration(registration_id: int, uow: UnitOfWork = Depends(get_uow)):
    """Submit a draft registration; assigns its registration number."""
    registration = _service(uow).submit(registration_id)
    uow.session.commit()
    return RegistrationResponse(
        message=f"Registration submitted as {registration.registration_number}",
        registration=RegistrationModel.model_validate(registration)
    )


@router.post("/{registration_id}/verify", response_model=RegistrationResponse)
def verify_registration(
    registration_id: int,
    uow: UnitOfWork = Depends(get_uow),
    actor_id: int = Depends(get_actor_id)
):
    registration = _service(uow).verify(registration_id, actor_id)
    uow.session.commit()
    return RegistrationResponse(
        message="Registration verified",
        registration=RegistrationModel.model_validate(registration)
    )


@router.post("/{registration_id}/reject", response_model=RegistrationResponse)
def reject_registration(
    registration_id: int,
    body: RejectRegistrationRequest,
    uow: UnitOfWork = Depends(get_uow),
    actor_id: int = Depends(get_actor_id)
):
    registration = _service(uow).reject(registration_id, body.reason, actor_id)
    uow.session.commit()
    return RegistrationResponse(
        message="Registration rejected",
        registration=RegistrationModel.model_validate(registration)
    )
