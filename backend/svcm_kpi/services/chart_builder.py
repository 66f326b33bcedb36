"""
Chart Builder Service
KPI 대시보드 차트 설정 생성

- 지원 차트 타입: bar (목표 대비 편차)
- Chart.js v4 호환 설정 출력
"""
import logging
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)


class ChartType(str, Enum):
    """지원 차트 타입"""
    BAR = "bar"


class AxisConfig(BaseModel):
    """축 설정"""
    field: str
    label: str
    type: str = "category"  # category, linear
    unit: Optional[str] = None  # 눈금 표시 단위 (예: %)
    position: str = "bottom"


class SeriesConfig(BaseModel):
    """시리즈 설정"""
    name: str
    field: str
    color: Optional[str] = None


class LegendConfig(BaseModel):
    """범례 설정"""
    display: bool = True
    position: str = "top"


class TooltipConfig(BaseModel):
    """툴팁 설정"""
    enabled: bool = True
    mode: str = "index"
    intersect: bool = False


class ChartConfig(BaseModel):
    """완전한 차트 설정"""
    chart_id: str
    type: ChartType
    title: str
    subtitle: Optional[str] = None
    x_axis: Optional[AxisConfig] = None
    y_axis: Optional[AxisConfig] = None
    series: List[SeriesConfig]
    data: List[Dict[str, Any]] = Field(default_factory=list)
    legend: LegendConfig = Field(default_factory=LegendConfig)
    tooltip: TooltipConfig = Field(default_factory=TooltipConfig)


class ChartBuilder:
    """
    Chart Builder 서비스

    시리즈 필드 목록과 데이터 행을 받아 ChartConfig를 만들고,
    to_chartjs()로 프론트엔드 렌더링용 dict로 변환합니다.
    """

    # KPI 시리즈 기본 색상 (목표 / 실제 / 편차 순)
    DEFAULT_COLORS = [
        "#3b82f6",  # Blue
        "#ef4444",  # Red
        "#f59e0b",  # Amber
        "#10b981",  # Emerald
        "#6b7280",  # Gray
    ]

    TEXT_COLOR = "#333333"
    GRID_COLOR = "#e0e0e0"

    def build_chart(
        self,
        chart_id: str,
        chart_type: ChartType,
        data: List[Dict[str, Any]],
        x_field: str,
        y_fields: List[str],
        title: str,
        subtitle: Optional[str] = None,
        x_label: Optional[str] = None,
        y_label: Optional[str] = None,
        series_labels: Optional[Dict[str, str]] = None,
        colors: Optional[List[str]] = None,
        y_unit: Optional[str] = None,
    ) -> ChartConfig:
        """
        차트 설정 생성

        Args:
            chart_id: 차트 고유 ID
            chart_type: 차트 타입
            data: 차트 데이터 행
            x_field: X축 필드명
            y_fields: 시리즈 필드명 목록
            title: 차트 제목
            subtitle: 부제목 (빈 상태 안내 등)
            x_label: X축 레이블
            y_label: Y축 레이블
            series_labels: 필드명 → 범례 표시명
            colors: 색상 목록
            y_unit: Y축 단위

        Returns:
            ChartConfig
        """
        if chart_type != ChartType.BAR:
            raise ValueError(f"Unsupported chart type: {chart_type}")

        colors = colors or self.DEFAULT_COLORS
        series_labels = series_labels or {}

        series = [
            SeriesConfig(
                name=series_labels.get(field, field),
                field=field,
                color=colors[i % len(colors)],
            )
            for i, field in enumerate(y_fields)
        ]

        x_axis = AxisConfig(field=x_field, label=x_label or x_field, type="category")
        y_axis = AxisConfig(
            field=y_fields[0] if y_fields else "value",
            label=y_label or (y_fields[0] if y_fields else "Value"),
            type="linear",
            unit=y_unit,
            position="left",
        )

        return ChartConfig(
            chart_id=chart_id,
            type=chart_type,
            title=title,
            subtitle=subtitle,
            x_axis=x_axis,
            y_axis=y_axis,
            series=series,
            data=self._normalize_data(data),
            legend=LegendConfig(display=len(series) > 1),
        )

    def _normalize_data(self, data: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        """데이터 정규화 (JSON 직렬화 가능하도록)"""
        normalized = []
        for row in data:
            new_row = {}
            for key, value in row.items():
                if isinstance(value, Decimal):
                    new_row[key] = float(value)
                elif isinstance(value, (date, datetime)):
                    new_row[key] = value.isoformat()
                else:
                    new_row[key] = value
            normalized.append(new_row)
        return normalized

    def to_chartjs(self, config: ChartConfig) -> Dict[str, Any]:
        """ChartConfig를 Chart.js 형식으로 변환"""
        labels: List[Any] = []
        if config.x_axis:
            labels = [row.get(config.x_axis.field) for row in config.data]

        datasets = [
            {
                "label": series.name,
                "data": [row.get(series.field) for row in config.data],
                "backgroundColor": series.color,
                "borderColor": series.color,
            }
            for series in config.series
        ]

        options: Dict[str, Any] = {
            "responsive": True,
            "maintainAspectRatio": False,
            "plugins": {
                "title": {
                    "display": bool(config.title),
                    "text": config.title,
                    "color": self.TEXT_COLOR,
                },
                "subtitle": {
                    "display": bool(config.subtitle),
                    "text": config.subtitle or "",
                    "color": self.TEXT_COLOR,
                },
                "legend": {
                    "display": config.legend.display,
                    "position": config.legend.position,
                },
                "tooltip": {
                    "enabled": config.tooltip.enabled,
                    "mode": config.tooltip.mode,
                    "intersect": config.tooltip.intersect,
                },
            },
            "scales": {},
        }

        if config.x_axis:
            options["scales"]["x"] = {
                "type": config.x_axis.type,
                "title": {"display": True, "text": config.x_axis.label, "color": self.TEXT_COLOR},
                "grid": {"color": self.GRID_COLOR},
                "ticks": {"color": self.TEXT_COLOR},
            }

        if config.y_axis:
            options["scales"]["y"] = {
                "position": config.y_axis.position,
                "title": {"display": True, "text": config.y_axis.label, "color": self.TEXT_COLOR},
                "grid": {"color": self.GRID_COLOR},
                "ticks": {"color": self.TEXT_COLOR},
            }
            if config.y_axis.unit:
                options["scales"]["y"]["ticks"]["unit"] = config.y_axis.unit

        return {
            "type": config.type.value,
            "data": {"labels": labels, "datasets": datasets},
            "options": options,
        }


# 전역 인스턴스
_chart_builder: Optional[ChartBuilder] = None


def get_chart_builder() -> ChartBuilder:
    """ChartBuilder 싱글톤 인스턴스 반환"""
    global _chart_builder
    if _chart_builder is None:
        _chart_builder = ChartBuilder()
    return _chart_builder
