"""
KPI Summary Service
현재 레코드 선택 및 대시보드 요약 계산

현재 레코드: entry_date가 가장 최근인 레코드
(동일 일자는 created_at이 늦은 것, 그 다음 id가 큰 것)

요약 값:
- expected_defects_count = total_production × expected_pct / 100
- defects_gap = actual_defects - expected_defects_count
- percentage_gap = actual_pct - expected_pct
- performance_tier: actual / expected_count × 100 기준 (<=80 excellent, <=100 good, >100 critical)
"""
import logging
from datetime import date, datetime
from typing import Any, Iterable, Optional, Tuple

from svcm_kpi.models.enums import PerformanceTier
from svcm_kpi.schemas.kpi import KpiSummary
from svcm_kpi.services.kpi_metrics import gap_direction, round2

logger = logging.getLogger(__name__)

EXCELLENT_THRESHOLD = 80.0
GOOD_THRESHOLD = 100.0


def recency_key(record: Any) -> Tuple[date, datetime, str]:
    """레코드 최신성 정렬 키 (entry_date, created_at, id)"""
    created_at = getattr(record, "created_at", None) or datetime.min
    return (record.entry_date, created_at, str(record.id))


def select_current_record(records: Iterable[Any]) -> Optional[Any]:
    """
    현재 레코드 선택

    입력 순서와 무관하게 가장 최근 레코드를 반환합니다.
    레코드가 없으면 None (빈 상태).
    """
    records = list(records)
    if not records:
        return None
    return max(records, key=recency_key)


def performance_tier(ratio: Optional[float]) -> PerformanceTier:
    """실제/예상 불량 비율(%)로 성과 등급 결정. 비율 계산 불가(None)면 undefined"""
    if ratio is None:
        return PerformanceTier.UNDEFINED
    if ratio <= EXCELLENT_THRESHOLD:
        return PerformanceTier.EXCELLENT
    if ratio <= GOOD_THRESHOLD:
        return PerformanceTier.GOOD
    return PerformanceTier.CRITICAL


def summarize(record: Optional[Any]) -> KpiSummary:
    """
    현재 레코드로부터 요약 계산

    불량률은 저장된 defect_percentage를 그대로 사용합니다.
    레코드가 없으면 모든 값이 0인 빈 요약을 반환합니다.
    """
    if record is None:
        return KpiSummary()

    total = record.total_production or 0
    actual = record.actual_defects or 0
    expected_pct = float(record.expected_defects or 0)
    actual_pct = float(record.defect_percentage or 0)

    expected_count = total * expected_pct / 100 if total > 0 else 0.0

    ratio = None
    if expected_count > 0:
        ratio = actual / expected_count * 100

    percentage_gap = round2(actual_pct - expected_pct)

    return KpiSummary(
        has_record=True,
        record_id=record.id,
        entry_date=record.entry_date,
        total_products=total,
        actual_defects=actual,
        expected_defects_count=expected_count,
        actual_defects_pct=actual_pct,
        expected_defects_pct=expected_pct,
        defects_gap=actual - expected_count,
        percentage_gap=percentage_gap,
        performance_ratio=round2(ratio) if ratio is not None else None,
        performance_tier=performance_tier(ratio),
        gap_direction=gap_direction(percentage_gap),
        action_required=percentage_gap > 0,
    )


def summarize_current(records: Iterable[Any]) -> KpiSummary:
    """레코드 집합에서 현재 레코드를 골라 요약"""
    return summarize(select_current_record(records))
