"""
KPI Record Validator
KPI 입력값 검증 및 저장용 Draft 생성

입력 변형 (TargetMode):
- direct: 제출자가 목표 불량률을 직접 입력 → variance 계산
- none: 목표 없음 (품질분임조장 개별 입력) → expected_defects=0, variance=NULL
- department_average: 부서 과거 레코드의 목표 불량률 평균을 목표로 사용 → variance 계산

defect_percentage/variance는 여기서만 계산합니다. 저장 계층이나 조회 측은 재계산하지 않습니다.
"""
import logging
import math
from datetime import date
from typing import Any, Optional
from uuid import UUID

from svcm_kpi.models.enums import Department, TargetMode, UserRole, parse_enum
from svcm_kpi.schemas.kpi import KpiRecordDraft, KpiSubmission
from svcm_kpi.services.kpi_metrics import defect_percentage, round2, variance
from svcm_kpi.utils.errors import InvalidInputError, SubmissionNotAllowedError

logger = logging.getLogger(__name__)

TOTAL_PRODUCTION_ERROR = "Total production must be greater than 0"

# 저장 컬럼 범위 (INTEGER, NUMERIC(10, 2))
MAX_WHOLE_NUMBER = 2**31 - 1
MAX_PERCENTAGE = 99999999.99


def _check_whole_range(value: int, field: str) -> int:
    if abs(value) > MAX_WHOLE_NUMBER:
        raise InvalidInputError(f"{field} must not exceed {MAX_WHOLE_NUMBER}")
    return value


def parse_whole_number(raw: Any, field: str) -> int:
    """
    정수 필드 파싱

    앞뒤 공백 허용, 정수값 float(예: 12.0) 허용.
    그 외(빈 값, 소수, 문자열)는 InvalidInputError.
    """
    if raw is None or isinstance(raw, bool):
        raise InvalidInputError(f"{field} is required")

    if isinstance(raw, int):
        return _check_whole_range(raw, field)

    text = str(raw).strip()
    if not text:
        raise InvalidInputError(f"{field} is required")

    try:
        return _check_whole_range(int(text), field)
    except ValueError:
        pass

    try:
        value = float(text)
    except ValueError:
        raise InvalidInputError(f"{field} must be a whole number")

    if not math.isfinite(value) or not value.is_integer():
        raise InvalidInputError(f"{field} must be a whole number")
    return _check_whole_range(int(value), field)


def parse_percentage(raw: Any, field: str) -> float:
    """목표 불량률(%) 파싱 - 0 이상의 유한한 실수"""
    if raw is None or isinstance(raw, bool):
        raise InvalidInputError(f"{field} is required")

    text = str(raw).strip()
    if not text:
        raise InvalidInputError(f"{field} is required")

    try:
        value = float(text)
    except ValueError:
        raise InvalidInputError(f"{field} must be a number")

    if not math.isfinite(value):
        raise InvalidInputError(f"{field} must be a number")
    if value < 0:
        raise InvalidInputError(f"{field} must not be negative")
    if value > MAX_PERCENTAGE:
        raise InvalidInputError(f"{field} must not exceed {MAX_PERCENTAGE}")
    return value


def _clean_text(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    stripped = value.strip()
    return stripped or None


def resolve_target_mode(role: Any, admin_mode: Any = TargetMode.DIRECT) -> TargetMode:
    """
    역할별 입력 변형 결정

    - admin: 설정된 변형 (direct 또는 department_average)
    - quality_circle_leader: none
    - 그 외 역할: 입력 불가
    """
    role = parse_enum(UserRole, role, "role")
    if role == UserRole.ADMIN:
        return parse_enum(TargetMode, admin_mode, "admin_target_mode")
    if role == UserRole.QUALITY_CIRCLE_LEADER:
        return TargetMode.NONE
    raise SubmissionNotAllowedError(
        f"Role '{role.value}' is not allowed to submit KPI records"
    )


def validate_submission(
    submission: KpiSubmission,
    *,
    department: Any,
    created_by: Optional[UUID] = None,
    mode: TargetMode = TargetMode.DIRECT,
    department_average: Optional[float] = None,
    require_explanations: bool = False,
    today: Optional[date] = None,
) -> KpiRecordDraft:
    """
    KPI 입력 검증

    Args:
        submission: 입력 폼 원본 값
        department: 제출자 부서
        created_by: 제출자 프로필 ID
        mode: 목표 산정 방식
        department_average: department_average 모드의 부서 평균 목표 (과거 레코드 없으면 None)
        require_explanations: 불량 원인/시정 조치 필수 여부 (품질분임조장 폼)
        today: 입력 일자 (기본: 오늘)

    Returns:
        저장 가능한 KpiRecordDraft

    Raises:
        InvalidInputError: 검증 실패 (저장 시도 없음)
    """
    if department is None:
        raise InvalidInputError("Select your department before submitting KPI records")
    department = parse_enum(Department, department, "department")
    mode = parse_enum(TargetMode, mode, "target_mode")

    total = parse_whole_number(submission.total_production, "total_production")
    if total <= 0:
        raise InvalidInputError(TOTAL_PRODUCTION_ERROR)

    actual = parse_whole_number(submission.actual_defects, "actual_defects")
    if actual < 0:
        raise InvalidInputError("actual_defects must not be negative")

    reason = _clean_text(submission.reason_for_defects)
    action = _clean_text(submission.corrective_action)
    if require_explanations:
        if reason is None:
            raise InvalidInputError("reason_for_defects is required")
        if action is None:
            raise InvalidInputError("corrective_action is required")

    pct = defect_percentage(actual, total)
    if pct > MAX_PERCENTAGE:
        raise InvalidInputError("actual_defects is too large for total_production")

    if mode == TargetMode.NONE:
        # "목표 0"과 "목표 없음"을 구분하기 위해 variance는 NULL
        expected = 0.0
        var = None
    else:
        # 저장 컬럼 정밀도(소수점 2자리)와 계산에 쓰는 목표값을 일치시킴
        if mode == TargetMode.DIRECT:
            expected = round2(parse_percentage(submission.expected_defects, "expected_defects"))
        else:
            expected = round2(department_average) if department_average is not None else 0.0
        var = variance(expected, actual, total)

    draft = KpiRecordDraft(
        department=department,
        entry_date=today or date.today(),
        total_production=total,
        expected_defects=expected,
        actual_defects=actual,
        defect_percentage=pct,
        variance=var,
        reason_for_defects=reason,
        corrective_action=action,
        responsible_officer=_clean_text(submission.responsible_officer),
        created_by=created_by,
        target_mode=mode,
    )

    logger.debug(
        f"Validated KPI submission: department={department.value}, mode={mode.value}, "
        f"defect_percentage={pct}, variance={var}"
    )
    return draft
