"""
KPI Dashboard Service
KPI 입력 / 조회 흐름 조합

- submit: 역할별 입력 변형 결정 → 검증 → 저장
- list_records / get_summary / get_trend: 데이터 범위 결정 → 조회 → 표시용 변환
- reset_all: 전체 레코드 삭제 (admin 전용)
- set_department: 부서 미지정 사용자의 부서 지정
"""
import logging
from typing import Any, Optional

from sqlalchemy.orm import Session

from svcm_kpi.config import Settings, settings as default_settings
from svcm_kpi.models.core import KpiRecord, Profile
from svcm_kpi.models.enums import TargetMode, UserRole, parse_enum
from svcm_kpi.repositories import KpiRecordRepository, ProfileRepository
from svcm_kpi.schemas.kpi import (
    KpiRecordResponse,
    KpiSubmission,
    RecordListResponse,
    ResetResponse,
    SummaryResponse,
    TrendResponse,
)
from svcm_kpi.services.chart_builder import get_chart_builder
from svcm_kpi.services.data_scope_service import DataScope, get_user_data_scope
from svcm_kpi.services.kpi_summary import summarize_current
from svcm_kpi.services.kpi_table import build_record_rows
from svcm_kpi.services.kpi_validator import resolve_target_mode, validate_submission
from svcm_kpi.services.trend_series import TREND_WINDOW, build_trend_series, build_variance_chart
from svcm_kpi.utils.errors import InvalidInputError, SubmissionNotAllowedError
from svcm_kpi.utils.metrics import kpi_records_submitted_total, kpi_submissions_rejected_total

logger = logging.getLogger(__name__)

RECORDS_TABLE_LIMIT = 10


class KpiDashboardService:
    """KPI 대시보드 서비스"""

    def __init__(self, db: Session, settings: Optional[Settings] = None):
        self.db = db
        self.settings = settings or default_settings
        self.records = KpiRecordRepository(db)
        self.profiles = ProfileRepository(db)

    # =====================================================
    # 입력
    # =====================================================

    def submit(self, profile: Profile, submission: KpiSubmission) -> KpiRecord:
        """
        KPI 레코드 입력

        Raises:
            SubmissionNotAllowedError: 입력 권한 없는 역할
            InvalidInputError: 검증 실패 (저장 시도 없음)
            ServiceError: 저장 실패
        """
        try:
            mode = resolve_target_mode(profile.role, self.settings.admin_target_mode)

            department_average = None
            if mode == TargetMode.DEPARTMENT_AVERAGE and profile.department:
                department_average = self.records.average_expected_defects(profile.department)

            draft = validate_submission(
                submission,
                department=profile.department,
                created_by=profile.id,
                mode=mode,
                department_average=department_average,
                require_explanations=profile.role == UserRole.QUALITY_CIRCLE_LEADER.value,
            )
        except SubmissionNotAllowedError:
            kpi_submissions_rejected_total.labels(reason="not_allowed").inc()
            logger.warning(f"KPI submission not allowed: profile={profile.id}, role={profile.role}")
            raise
        except InvalidInputError as e:
            kpi_submissions_rejected_total.labels(reason="invalid_input").inc()
            logger.info(f"KPI submission rejected: profile={profile.id}, reason={e.message}")
            raise

        record = self.records.insert(draft)
        kpi_records_submitted_total.labels(
            department=draft.department.value,
            target_mode=draft.target_mode.value,
        ).inc()
        return record

    # =====================================================
    # 조회
    # =====================================================

    def _scope(self, profile: Profile, department: Any = None) -> DataScope:
        return get_user_data_scope(profile, requested_department=department)

    def list_records(self, profile: Profile, department: Any = None) -> RecordListResponse:
        """최근 KPI 레코드 테이블"""
        scope = self._scope(profile, department)
        if scope.no_scope:
            return RecordListResponse(scope=scope.label, show_department=scope.show_department_column)

        records = self.records.query(limit=RECORDS_TABLE_LIMIT, scope=scope)
        return RecordListResponse(
            scope=scope.label,
            show_department=scope.show_department_column,
            rows=build_record_rows(records, scope),
            records=[KpiRecordResponse.model_validate(record) for record in records],
        )

    def get_summary(self, profile: Profile, department: Any = None) -> SummaryResponse:
        """현재 레코드 기준 요약"""
        scope = self._scope(profile, department)
        records = [] if scope.no_scope else self.records.query(scope=scope)
        summary = summarize_current(records)
        return SummaryResponse(scope=scope.label, **summary.model_dump())

    def get_trend(self, profile: Profile, department: Any = None) -> TrendResponse:
        """목표 대비 불량률 추세 차트"""
        scope = self._scope(profile, department)
        records = [] if scope.no_scope else self.records.query(limit=TREND_WINDOW, scope=scope)

        points = build_trend_series(records)
        chart = get_chart_builder().to_chartjs(build_variance_chart(points))
        return TrendResponse(scope=scope.label, points=points, chart=chart)

    # =====================================================
    # 관리
    # =====================================================

    def reset_all(self, profile: Profile) -> ResetResponse:
        """전체 KPI 레코드 삭제 (admin 전용)"""
        if parse_enum(UserRole, profile.role, "role") != UserRole.ADMIN:
            logger.warning(f"Reset denied for profile={profile.id}, role={profile.role}")
            raise SubmissionNotAllowedError("Only administrators can reset KPI records")

        deleted = self.records.delete_all()
        logger.warning(f"KPI records reset by admin {profile.id}: deleted={deleted}")
        return ResetResponse(deleted=deleted)

    def set_department(self, profile: Profile, department: Any) -> Profile:
        """사용자 부서 지정"""
        if department is None:
            raise InvalidInputError("department is required")
        return self.profiles.update_department(profile.id, department)
