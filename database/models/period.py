from sqlalchemy import Column, Integer, Text, String, TIMESTAMP, Date, ForeignKey, CheckConstraint, Index, func
from sqlalchemy.orm import relationship

from core.enums import Level, PeriodStatus, PathType
from .base import Base, JSONBag, utcnow


class Period(Base):
    """
    One admission cycle for one school, academic year and education level.

    Lifecycle: draft -> active -> closed. At most one active period exists per
    (school_id, academic_year, level); PeriodService.activate enforces it.
    announcement_date is stamped once when results are published.
    """
    __tablename__ = 'periods'

    id = Column(Integer, primary_key=True, autoincrement=True)
    school_id = Column(Integer, nullable=False)
    academic_year = Column(String(20), nullable=False)  # e.g. "2025/2026"
    level = Column(String(20), nullable=False)  # SD|SMP|SMA|SMK
    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=False)
    announcement_date = Column(TIMESTAMP(timezone=True), nullable=True)
    reenrollment_deadline = Column(TIMESTAMP(timezone=True), nullable=True)
    status = Column(Text, nullable=False, default=PeriodStatus.DRAFT.value)

    created_at = Column(TIMESTAMP(timezone=True), nullable=False, default=utcnow, server_default=func.now())
    updated_at = Column(TIMESTAMP(timezone=True), nullable=False, default=utcnow, server_default=func.now(), onupdate=utcnow)

    paths = relationship(
        "RegistrationPath",
        back_populates="period",
        cascade="all, delete-orphan",
        order_by="RegistrationPath.id",
    )

    __table_args__ = (
        CheckConstraint("status IN ('draft', 'active', 'closed')", name='ck_periods_status'),
        Index('idx_periods_school_id', 'school_id'),
        Index('idx_periods_status', 'status'),
        Index('idx_periods_school_year_level', 'school_id', 'academic_year', 'level'),
    )

    @property
    def status_enum(self) -> PeriodStatus:
        return PeriodStatus.parse(self.status)

    @property
    def level_enum(self) -> Level:
        return Level.parse(self.level)

    @property
    def is_announced(self) -> bool:
        return self.announcement_date is not None


class RegistrationPath(Base):
    """
    One competing admission channel (zonasi, prestasi, afirmasi,
    perpindahan_tugas) with its own quota and scoring configuration.
    """
    __tablename__ = 'registration_paths'

    id = Column(Integer, primary_key=True, autoincrement=True)
    period_id = Column(Integer, ForeignKey('periods.id', ondelete='CASCADE'), nullable=False)
    path_type = Column(String(50), nullable=False)
    name = Column(String(255), nullable=False)
    quota = Column(Integer, nullable=False)
    description = Column(Text, nullable=True)
    scoring_config = Column(JSONBag, default=dict)  # named weights, keys depend on path_type

    created_at = Column(TIMESTAMP(timezone=True), nullable=False, default=utcnow, server_default=func.now())
    updated_at = Column(TIMESTAMP(timezone=True), nullable=False, default=utcnow, server_default=func.now(), onupdate=utcnow)

    period = relationship("Period", back_populates="paths")

    __table_args__ = (
        CheckConstraint("quota > 0", name='ck_registration_paths_quota'),
        CheckConstraint(
            "path_type IN ('zonasi', 'prestasi', 'afirmasi', 'perpindahan_tugas')",
            name='ck_registration_paths_type',
        ),
        Index('idx_paths_period_id', 'period_id'),
    )

    @property
    def path_type_enum(self) -> PathType:
        return PathType.parse(self.path_type)
