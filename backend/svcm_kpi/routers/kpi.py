"""
KPI Router
KPI 입력 / 대시보드 조회 API

- GET    /records            최근 KPI 레코드 테이블
- GET    /summary            현재 레코드 요약
- GET    /trend              목표 대비 불량률 추세 차트
- POST   /records            KPI 레코드 입력
- POST   /preview            입력 중 실시간 계산
- DELETE /records            전체 레코드 삭제 (admin)
- PUT    /profile/department 사용자 부서 지정
"""
import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from svcm_kpi.auth.dependencies import get_current_profile
from svcm_kpi.database import get_db
from svcm_kpi.models import Department, Profile
from svcm_kpi.schemas.kpi import (
    DepartmentUpdate,
    KpiPreview,
    KpiPreviewRequest,
    KpiRecordResponse,
    KpiSubmission,
    ProfileResponse,
    RecordListResponse,
    ResetResponse,
    SummaryResponse,
    TrendResponse,
)
from svcm_kpi.services.kpi_metrics import preview_metrics
from svcm_kpi.services.kpi_service import KpiDashboardService

logger = logging.getLogger(__name__)

router = APIRouter()


def get_kpi_service(db: Session = Depends(get_db)) -> KpiDashboardService:
    return KpiDashboardService(db)


@router.get("/records", response_model=RecordListResponse)
async def list_records(
    department: Optional[Department] = Query(None, description="부서 필터 (admin만 적용)"),
    profile: Profile = Depends(get_current_profile),
    service: KpiDashboardService = Depends(get_kpi_service),
):
    """최근 KPI 레코드 조회"""
    return service.list_records(profile, department)


@router.get("/summary", response_model=SummaryResponse)
async def get_summary(
    department: Optional[Department] = Query(None, description="부서 필터 (admin만 적용)"),
    profile: Profile = Depends(get_current_profile),
    service: KpiDashboardService = Depends(get_kpi_service),
):
    """현재 레코드 기준 KPI 요약"""
    return service.get_summary(profile, department)


@router.get("/trend", response_model=TrendResponse)
async def get_trend(
    department: Optional[Department] = Query(None, description="부서 필터 (admin만 적용)"),
    profile: Profile = Depends(get_current_profile),
    service: KpiDashboardService = Depends(get_kpi_service),
):
    """목표 대비 불량률 추세"""
    return service.get_trend(profile, department)


@router.post("/records", response_model=KpiRecordResponse, status_code=status.HTTP_201_CREATED)
async def submit_record(
    submission: KpiSubmission,
    profile: Profile = Depends(get_current_profile),
    service: KpiDashboardService = Depends(get_kpi_service),
):
    """KPI 레코드 입력"""
    return service.submit(profile, submission)


@router.post("/preview", response_model=KpiPreview)
async def preview_record(
    request: KpiPreviewRequest,
    profile: Profile = Depends(get_current_profile),
):
    """입력 중인 값으로 불량률/편차 미리보기"""
    return preview_metrics(
        request.total_production,
        request.expected_defects,
        request.actual_defects,
    )


@router.delete("/records", response_model=ResetResponse)
async def reset_records(
    profile: Profile = Depends(get_current_profile),
    service: KpiDashboardService = Depends(get_kpi_service),
):
    """전체 KPI 레코드 삭제 (admin 전용)"""
    return service.reset_all(profile)


@router.put("/profile/department", response_model=ProfileResponse)
async def update_department(
    body: DepartmentUpdate,
    profile: Profile = Depends(get_current_profile),
    service: KpiDashboardService = Depends(get_kpi_service),
):
    """사용자 부서 지정"""
    return service.set_department(profile, body.department)
