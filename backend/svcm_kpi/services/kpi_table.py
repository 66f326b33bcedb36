"""
KPI Records Table
최근 KPI 레코드 테이블 표시용 행 생성

표시 규칙:
- 날짜: Jan 5, 2025
- 불량률: 3.00% (5% 초과 시 강조)
- 편차: +0.50% / -4.00%, 목표 없음은 "—" (양수 시 강조)
- 부서 컬럼은 admin 화면에서만 표시
"""
from typing import Any, Iterable, List, Optional

from svcm_kpi.models.enums import Department, KpiStatus
from svcm_kpi.schemas.kpi import RecordTableRow
from svcm_kpi.services.data_scope_service import DataScope

PLACEHOLDER = "—"
DEFECT_HIGHLIGHT_THRESHOLD = 5.0


def format_entry_date(value: Any) -> str:
    return f"{value.strftime('%b')} {value.day}, {value.year}"


def format_percentage(value: Optional[float]) -> str:
    return f"{float(value or 0):.2f}%"


def format_variance(value: Optional[float]) -> str:
    if value is None:
        return PLACEHOLDER
    return f"{float(value):+.2f}%"


def _text(value: Optional[str]) -> str:
    if value is None or not str(value).strip():
        return PLACEHOLDER
    return value


def build_record_rows(records: Iterable[Any], scope: DataScope) -> List[RecordTableRow]:
    """레코드 목록을 입력 순서 그대로 테이블 행으로 변환"""
    rows = []
    for record in records:
        department = None
        department_display = None
        if scope.show_department_column:
            department = Department(record.department)
            department_display = department.display_name

        defect_pct = float(record.defect_percentage or 0)
        variance = float(record.variance) if record.variance is not None else None

        rows.append(RecordTableRow(
            id=record.id,
            entry_date=record.entry_date,
            date_display=format_entry_date(record.entry_date),
            department=department,
            department_display=department_display,
            total_production=record.total_production,
            actual_defects=record.actual_defects,
            defect_percentage_display=format_percentage(defect_pct),
            defect_flag=defect_pct > DEFECT_HIGHLIGHT_THRESHOLD,
            variance_display=format_variance(variance),
            variance_flag=variance is not None and variance > 0,
            responsible_officer=_text(record.responsible_officer),
            reason_for_defects=_text(record.reason_for_defects),
            corrective_action=_text(record.corrective_action),
            status=KpiStatus(record.status),
        ))
    return rows
