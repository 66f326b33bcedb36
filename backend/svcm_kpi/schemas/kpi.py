"""
KPI Pydantic Schemas
KPI 입력, 레코드, 요약, 추세 차트 스키마

- KpiSubmission: 입력 폼 원본 값 (문자열/숫자 혼재)
- KpiRecordDraft: 검증 완료된 저장 대상 (파생 필드 포함)
- KpiSummary: 현재 레코드 기준 대시보드 요약
- TrendPoint: 추세 차트 포인트
"""
import datetime as dt
from datetime import date, datetime
from typing import Any, Dict, List, Optional, Union
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from svcm_kpi.models.enums import (
    Department,
    GapDirection,
    KpiStatus,
    PerformanceTier,
    TargetMode,
    UserRole,
)

RawNumber = Union[int, float, str]


# =====================================================
# 입력
# =====================================================

class KpiSubmission(BaseModel):
    """KPI 입력 폼 원본 값"""

    total_production: Optional[RawNumber] = Field(None, description="총 생산 수량")
    expected_defects: Optional[RawNumber] = Field(None, description="목표 불량률 (%)")
    actual_defects: Optional[RawNumber] = Field(None, description="실제 불량 수량")

    reason_for_defects: Optional[str] = Field(None, description="불량 원인")
    corrective_action: Optional[str] = Field(None, description="시정 조치")
    responsible_officer: Optional[str] = Field(None, description="담당자")


class KpiPreviewRequest(BaseModel):
    """실시간 미리보기 요청 (입력 중인 값)"""

    total_production: Optional[RawNumber] = None
    expected_defects: Optional[RawNumber] = None
    actual_defects: Optional[RawNumber] = None


class KpiRecordDraft(BaseModel):
    """검증 완료된 KPI 레코드 (저장 전)"""

    department: Department
    entry_date: date
    total_production: int
    expected_defects: float
    actual_defects: int
    defect_percentage: float
    variance: Optional[float] = None
    reason_for_defects: Optional[str] = None
    corrective_action: Optional[str] = None
    responsible_officer: Optional[str] = None
    status: KpiStatus = KpiStatus.PENDING
    created_by: Optional[UUID] = None

    # 저장되지 않는 메타 정보
    target_mode: TargetMode = Field(TargetMode.DIRECT, exclude=True)


# =====================================================
# 응답
# =====================================================

class KpiRecordResponse(BaseModel):
    """KPI 레코드 응답"""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    department: Department
    entry_date: date
    total_production: int
    expected_defects: float
    actual_defects: int
    defect_percentage: Optional[float] = None
    variance: Optional[float] = None
    reason_for_defects: Optional[str] = None
    corrective_action: Optional[str] = None
    responsible_officer: Optional[str] = None
    status: KpiStatus
    created_by: Optional[UUID] = None
    approved_by: Optional[UUID] = None
    created_at: Optional[datetime] = None


class KpiPreview(BaseModel):
    """입력 폼 실시간 계산 결과"""

    total_production: int = 0
    expected_defects: float = 0.0
    actual_defects: int = 0
    defect_percentage: float = 0.0
    variance: float = 0.0
    gap_direction: GapDirection = GapDirection.BELOW_EXPECTED
    gap_label: str = "Below Expected"
    quality_gap_status: str = Field(..., description="목표 없는 입력 폼의 갭 상태 문구")


class KpiSummary(BaseModel):
    """현재 레코드 기준 요약 (레코드 없으면 모든 값 0)"""

    has_record: bool = False
    record_id: Optional[UUID] = None
    entry_date: Optional[date] = None

    total_products: int = 0
    actual_defects: int = 0
    expected_defects_count: float = 0.0
    actual_defects_pct: float = 0.0
    expected_defects_pct: float = 0.0
    defects_gap: float = 0.0
    percentage_gap: float = 0.0

    performance_ratio: Optional[float] = None
    performance_tier: PerformanceTier = PerformanceTier.UNDEFINED
    gap_direction: GapDirection = GapDirection.BELOW_EXPECTED
    action_required: bool = False


class TrendPoint(BaseModel):
    """추세 차트 포인트"""

    date: dt.date
    label: str = Field(..., description="차트 X축 표시 (예: Jan 5)")
    expected_pct: float = 0.0
    actual_pct: float = 0.0
    variance: float = 0.0


class RecordTableRow(BaseModel):
    """최근 KPI 레코드 테이블 행"""

    id: UUID
    entry_date: date
    date_display: str
    department: Optional[Department] = None
    department_display: Optional[str] = None
    total_production: int
    actual_defects: int
    defect_percentage_display: str
    defect_flag: bool
    variance_display: str
    variance_flag: bool
    responsible_officer: str
    reason_for_defects: str
    corrective_action: str
    status: KpiStatus


class RecordListResponse(BaseModel):
    """레코드 목록 응답"""

    scope: str = Field(..., description="all / 부서 코드 / none")
    show_department: bool = False
    rows: List[RecordTableRow] = Field(default_factory=list)
    records: List[KpiRecordResponse] = Field(default_factory=list)


class TrendResponse(BaseModel):
    """추세 차트 응답"""

    scope: str
    points: List[TrendPoint] = Field(default_factory=list)
    chart: Dict[str, Any] = Field(default_factory=dict)


class SummaryResponse(KpiSummary):
    """요약 응답"""

    scope: str


class ResetResponse(BaseModel):
    """전체 삭제 결과"""

    deleted: int


# =====================================================
# 프로필
# =====================================================

class DepartmentUpdate(BaseModel):
    """부서 지정 요청"""

    department: Department


class ProfileResponse(BaseModel):
    """프로필 응답"""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    full_name: str
    email: str
    role: UserRole
    department: Optional[Department] = None
