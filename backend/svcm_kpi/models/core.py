"""
Core Schema ORM Models
사용자 프로필, KPI 레코드

- profiles: 외부 인증 시스템이 관리하는 사용자의 역할/부서 정보
- kpi_records: 부서별 일자별 품질 관측치 (불량률, 목표 대비 편차)
"""
from datetime import datetime
from uuid import uuid4

from sqlalchemy import (
    Column,
    String,
    Integer,
    Date,
    DateTime,
    ForeignKey,
    Text,
    Numeric,
    CheckConstraint,
    Index,
    Uuid,
)
from sqlalchemy.orm import relationship

from svcm_kpi.database import Base
from svcm_kpi.models.enums import Department, KpiStatus, UserRole


def _in_clause(column: str, enum_cls) -> str:
    values = ", ".join(f"'{member.value}'" for member in enum_cls)
    return f"{column} IN ({values})"


class Profile(Base):
    """사용자 프로필

    역할(role)과 부서(department)만 KPI 엔진이 읽습니다.
    department가 NULL이면 아직 부서를 지정하지 않은 사용자입니다.
    """

    __tablename__ = "profiles"
    __table_args__ = (
        CheckConstraint(_in_clause("role", UserRole), name="ck_profiles_role"),
        CheckConstraint(
            f"department IS NULL OR {_in_clause('department', Department)}",
            name="ck_profiles_department",
        ),
    )

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid4)
    full_name = Column(String(255), nullable=False)
    email = Column(String(255), nullable=False, unique=True)
    role = Column(String(50), default=UserRole.EMPLOYEE.value, nullable=False)
    department = Column(String(50), nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    # Relationships
    created_records = relationship(
        "KpiRecord", back_populates="creator", foreign_keys="KpiRecord.created_by"
    )

    def __repr__(self):
        return f"<Profile(id={self.id}, role='{self.role}', department='{self.department}')>"


class KpiRecord(Base):
    """KPI 레코드

    부서 하나의 특정 일자 품질 관측치.
    defect_percentage/variance는 입력 시점에 KPI 검증기가 한 번만 계산하여 저장하며,
    조회 측에서 다시 계산하지 않습니다.
    """

    __tablename__ = "kpi_records"
    __table_args__ = (
        CheckConstraint(_in_clause("department", Department), name="ck_kpi_records_department"),
        CheckConstraint(_in_clause("status", KpiStatus), name="ck_kpi_records_status"),
        CheckConstraint("total_production > 0", name="ck_kpi_records_total_production"),
        CheckConstraint("actual_defects >= 0", name="ck_kpi_records_actual_defects"),
        CheckConstraint("expected_defects >= 0", name="ck_kpi_records_expected_defects"),
        Index("idx_kpi_records_department_entry_date", "department", "entry_date"),
    )

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid4)
    department = Column(String(50), nullable=False)
    entry_date = Column(Date, nullable=False)

    total_production = Column(Integer, nullable=False)
    expected_defects = Column(Numeric(10, 2, asdecimal=False), nullable=False, default=0)  # 목표 불량률 (%)
    actual_defects = Column(Integer, nullable=False)

    # 파생 필드 (입력 시점 계산값)
    defect_percentage = Column(Numeric(10, 2, asdecimal=False), nullable=True)
    variance = Column(Numeric(10, 2, asdecimal=False), nullable=True)  # 목표 없음이면 NULL

    reason_for_defects = Column(Text, nullable=True)
    corrective_action = Column(Text, nullable=True)
    responsible_officer = Column(String(255), nullable=True)

    status = Column(String(20), default=KpiStatus.PENDING.value, nullable=False)
    created_by = Column(Uuid(as_uuid=True), ForeignKey("profiles.id", ondelete="SET NULL"), nullable=True)
    approved_by = Column(Uuid(as_uuid=True), ForeignKey("profiles.id", ondelete="SET NULL"), nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    # Relationships
    creator = relationship("Profile", back_populates="created_records", foreign_keys=[created_by])

    def __repr__(self):
        return (
            f"<KpiRecord(id={self.id}, department='{self.department}', "
            f"entry_date={self.entry_date}, defect_percentage={self.defect_percentage})>"
        )
