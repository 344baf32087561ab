from sqlalchemy import Column, Integer, Text, String, TIMESTAMP, Date, Numeric, ForeignKey, CheckConstraint, Index, func
from sqlalchemy.orm import relationship

from core.enums import RegistrationStatus
from .base import Base, JSONBag, utcnow


class Registration(Base):
    """
    One student's application to one path within one period.

    Tracks:
    - Applicant data (student, parent, previous school)
    - Path-specific data bag (distance_km, rapor_average, flags...)
    - Selection results (selection_score, ranking, status, rejection_reason)

    allocated_at is set only by the allocation engine, which is how an
    engine rejection is told apart from an administrator rejection.
    """
    __tablename__ = 'registrations'

    id = Column(Integer, primary_key=True, autoincrement=True)
    school_id = Column(Integer, nullable=False)
    user_id = Column(Integer, nullable=False)
    period_id = Column(Integer, ForeignKey('periods.id', ondelete='CASCADE'), nullable=False)
    path_id = Column(Integer, ForeignKey('registration_paths.id'), nullable=False)
    registration_number = Column(String(50), unique=True, nullable=True)

    # Student data
    student_nisn = Column(String(20), nullable=False)
    student_nik = Column(String(20), nullable=True)
    student_name = Column(String(255), nullable=False)
    student_gender = Column(String(10), nullable=True)  # L|P
    student_birth_place = Column(String(100), nullable=True)
    student_birth_date = Column(Date, nullable=True)
    student_religion = Column(String(50), nullable=True)
    student_address = Column(Text, nullable=True)
    student_phone = Column(String(20), nullable=True)
    student_email = Column(String(255), nullable=True)

    # Parent data
    parent_name = Column(String(255), nullable=True)
    parent_nik = Column(String(20), nullable=True)
    parent_phone = Column(String(20), nullable=True)
    parent_occupation = Column(String(100), nullable=True)
    parent_income = Column(String(50), nullable=True)

    # Previous school
    previous_school_name = Column(String(255), nullable=True)
    previous_school_npsn = Column(String(20), nullable=True)
    previous_school_address = Column(Text, nullable=True)

    path_data = Column(JSONBag, default=dict)

    # Selection
    selection_score = Column(Numeric(5, 2, asdecimal=False), nullable=True)
    ranking = Column(Integer, nullable=True)

    status = Column(Text, nullable=False, default=RegistrationStatus.DRAFT.value)
    rejection_reason = Column(Text, nullable=True)
    admin_notes = Column(Text, nullable=True)

    submitted_at = Column(TIMESTAMP(timezone=True), nullable=True)
    verified_at = Column(TIMESTAMP(timezone=True), nullable=True)
    verified_by = Column(Integer, nullable=True)
    allocated_at = Column(TIMESTAMP(timezone=True), nullable=True)
    created_at = Column(TIMESTAMP(timezone=True), nullable=False, default=utcnow, server_default=func.now())
    updated_at = Column(TIMESTAMP(timezone=True), nullable=False, default=utcnow, server_default=func.now(), onupdate=utcnow)

    period = relationship("Period")
    path = relationship("RegistrationPath")

    __table_args__ = (
        CheckConstraint(
            "status IN ('draft', 'submitted', 'verified', 'rejected', 'accepted', 'enrolled', 'expired')",
            name='ck_registrations_status',
        ),
        Index('idx_registrations_school_id', 'school_id'),
        Index('idx_registrations_user_id', 'user_id'),
        Index('idx_registrations_period_id', 'period_id'),
        Index('idx_registrations_status', 'status'),
        Index('idx_registrations_ranking', 'path_id', 'ranking'),
        Index('idx_registrations_lookup', 'registration_number', 'student_nisn'),
    )

    @property
    def status_enum(self) -> RegistrationStatus:
        return RegistrationStatus.parse(self.status)
