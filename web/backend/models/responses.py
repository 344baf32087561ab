#!/usr/bin/env python3
"""
Response models for API endpoints.

Service results are dataclasses or ORM rows; every model here reads them by
attribute (from_attributes).
"""

from datetime import date, datetime
from pydantic import BaseModel, ConfigDict, Field
from typing import List, Optional


class _FromAttributes(BaseModel):
    model_config = ConfigDict(from_attributes=True)


class ScoreCalculationResponse(BaseModel):
    success: bool = True
    message: str
    total_calculated: int


class RankingUpdateResponse(BaseModel):
    success: bool = True
    message: str
    total_ranked: int


class PathSelectionResultModel(_FromAttributes):
    path_id: int
    path_name: str
    quota: int
    accepted: int
    rejected: int
    unscored: int


class SelectionResultModel(_FromAttributes):
    period_id: int
    total_accepted: int
    total_rejected: int
    paths: List[PathSelectionResultModel] = []


class SelectionRunResponse(BaseModel):
    success: bool = True
    message: str
    result: SelectionResultModel


class RankingEntryModel(_FromAttributes):
    model_config = ConfigDict(
        from_attributes=True,
        json_schema_extra={
            "example": {
                "id": 42,
                "registration_number": "REG-1-3-00042",
                "student_nisn": "0012345678",
                "student_name": "Siti Aminah",
                "selection_score": 95.0,
                "ranking": 1,
                "status": "accepted"
            }
        }
    )

    id: int
    registration_number: Optional[str]
    student_nisn: str
    student_name: str
    selection_score: Optional[float] = Field(None, ge=0, le=100)
    ranking: Optional[int]
    status: str


class RankingsResponse(_FromAttributes):
    success: bool = True
    period_id: int
    path_id: int
    page: int
    page_size: int
    total: int
    rankings: List[RankingEntryModel] = []


class PathRankingStatsModel(_FromAttributes):
    path_id: int
    path_name: str
    path_type: str
    quota: int
    total_registrations: int
    highest_score: Optional[float]
    lowest_score: Optional[float]
    average_score: Optional[float]


class RankingStatsResponse(BaseModel):
    success: bool = True
    period_id: int
    paths: List[PathRankingStatsModel]


class AnnouncementResultModel(_FromAttributes):
    period_id: int
    announcement_date: datetime
    total_notified: int
    accepted_notified: int
    rejected_notified: int
    failed_notifications: int


class AnnounceResponse(BaseModel):
    success: bool = True
    message: str
    result: AnnouncementResultModel


class PathSelectionSummaryModel(_FromAttributes):
    path_id: int
    path_name: str
    quota: int
    verified: int
    accepted: int
    rejected: int
    remaining_quota: int


class SelectionSummaryModel(_FromAttributes):
    period_id: int
    verified: int
    accepted: int
    rejected: int
    announcement_date: Optional[datetime]
    paths: List[PathSelectionSummaryModel] = []


class SummaryResponse(BaseModel):
    success: bool = True
    summary: SelectionSummaryModel


class ResultCheckResponse(_FromAttributes):
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


class PeriodModel(_FromAttributes):
    id: int
    school_id: int
    academic_year: str
    level: str
    start_date: date
    end_date: date
    status: str
    announcement_date: Optional[datetime]
    reenrollment_deadline: Optional[datetime]


class PeriodResponse(BaseModel):
    success: bool = True
    message: str
    period: PeriodModel


class RegistrationModel(_FromAttributes):
    id: int
    period_id: int
    path_id: int
    registration_number: Optional[str]
    student_nisn: str
    student_name: str
    status: str
    rejection_reason: Optional[str]
    submitted_at: Optional[datetime]
    verified_at: Optional[datetime]
    verified_by: Optional[int]


class RegistrationResponse(BaseModel):
    success: bool = True
    message: str
    registration: RegistrationModel


class VerificationStatsModel(_FromAttributes):
    period_id: int
    total: int
    submitted: int
    verified: int
    rejected: int
    pending: int


class VerificationStatsResponse(BaseModel):
    success: bool = True
    stats: VerificationStatsModel
