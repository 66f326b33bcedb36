"""
Trend Series Builder
최근 KPI 레코드로 목표 대비 불량률 추세 차트 생성

- 최신 TREND_WINDOW개 레코드만 사용
- 차트에는 오래된 것부터 (왼쪽 → 오른쪽) 표시
- NULL 값(목표 없음 등)은 차트 포인트에서만 0으로 표시
"""
import logging
from typing import Any, Dict, Iterable, List

from svcm_kpi.schemas.kpi import TrendPoint
from svcm_kpi.services.chart_builder import ChartConfig, ChartType, get_chart_builder
from svcm_kpi.services.kpi_summary import recency_key

logger = logging.getLogger(__name__)

TREND_WINDOW = 10

VARIANCE_CHART_ID = "kpi-variance"
VARIANCE_CHART_TITLE = "Expected vs Actual Defect Rate"
EMPTY_CHART_MESSAGE = "No data available. Submit KPI records to see the variance chart."

SERIES_LABELS = {
    "expected_pct": "Expected %",
    "actual_pct": "Actual %",
    "variance": "Variance",
}


def _or_zero(value: Any) -> float:
    return float(value) if value is not None else 0.0


def format_point_label(value: Any) -> str:
    """X축 표시용 날짜 (예: Jan 5)"""
    return f"{value.strftime('%b')} {value.day}"


def build_trend_series(records: Iterable[Any], window: int = TREND_WINDOW) -> List[TrendPoint]:
    """
    추세 포인트 생성

    입력 순서와 무관하게 최신 window개를 골라 오래된 순으로 반환합니다.
    """
    ordered = sorted(records, key=recency_key)
    if window > 0:
        ordered = ordered[-window:]
    else:
        ordered = []

    return [
        TrendPoint(
            date=record.entry_date,
            label=format_point_label(record.entry_date),
            expected_pct=_or_zero(record.expected_defects),
            actual_pct=_or_zero(record.defect_percentage),
            variance=_or_zero(record.variance),
        )
        for record in ordered
    ]


def build_variance_chart(points: List[TrendPoint]) -> ChartConfig:
    """목표/실제 불량률 및 편차 바 차트 설정 생성"""
    data: List[Dict[str, Any]] = [
        {
            "label": point.label,
            "date": point.date,
            "expected_pct": point.expected_pct,
            "actual_pct": point.actual_pct,
            "variance": point.variance,
        }
        for point in points
    ]

    return get_chart_builder().build_chart(
        chart_id=VARIANCE_CHART_ID,
        chart_type=ChartType.BAR,
        data=data,
        x_field="label",
        y_fields=list(SERIES_LABELS),
        title=VARIANCE_CHART_TITLE,
        subtitle=None if data else EMPTY_CHART_MESSAGE,
        x_label="Entry Date",
        y_label="Defect Rate (%)",
        series_labels=SERIES_LABELS,
        y_unit="%",
    )
