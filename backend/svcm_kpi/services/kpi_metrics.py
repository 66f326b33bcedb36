"""
KPI Metrics Calculator
불량률 및 목표 대비 편차 계산

- defect_percentage: 실제 불량 / 총 생산 × 100 (소수점 2자리)
- variance: 불량률 - 목표 불량률 (소수점 2자리, 양수 = 목표보다 나쁨)

모든 함수는 순수 함수이며 실패 경로가 없습니다.
총 생산이 0이면 0을 반환합니다 (입력 중 실시간 미리보기에서 호출되므로).
"""
import logging
from decimal import Decimal, ROUND_HALF_UP, InvalidOperation, localcontext
from typing import Any, Optional, Union

from svcm_kpi.models.enums import GapDirection
from svcm_kpi.schemas.kpi import KpiPreview

logger = logging.getLogger(__name__)

Number = Union[int, float, Decimal]

_TWO_PLACES = Decimal("0.01")
_HUNDRED = Decimal(100)
_BASE_PRECISION = 28

QUALITY_GAP_ACTION_REQUIRED = "Negative Gap - Action Required"
QUALITY_GAP_ON_TRACK = "Positive Gap - On Track"


def _to_decimal(value: Number) -> Decimal:
    if isinstance(value, Decimal):
        return value
    # float는 최단 10진 표현으로 변환 (2.675 -> Decimal("2.675"))
    return Decimal(str(value))


def _precision_for(*values: Decimal) -> int:
    """값의 정수부 자릿수를 모두 담을 수 있는 연산 정밀도"""
    digits = max((v.adjusted() for v in values if v.is_finite() and v), default=0)
    return _BASE_PRECISION + max(digits, 0) + 3


def round2(value: Number) -> float:
    """소수점 2자리 반올림 (0.5는 0에서 먼 쪽으로)"""
    decimal_value = _to_decimal(value)
    if not decimal_value.is_finite():
        return float(decimal_value)
    with localcontext() as ctx:
        ctx.prec = _precision_for(decimal_value)
        return float(decimal_value.quantize(_TWO_PLACES, rounding=ROUND_HALF_UP))


def defect_percentage(actual: int, total: int) -> float:
    """
    불량률 계산

    Args:
        actual: 실제 불량 수량
        total: 총 생산 수량

    Returns:
        actual / total × 100 (소수점 2자리). total이 0 이하면 0
    """
    if total <= 0:
        return 0.0
    numerator = Decimal(actual) * _HUNDRED
    with localcontext() as ctx:
        ctx.prec = _precision_for(numerator)
        ratio = numerator / Decimal(total)
    return round2(ratio)


def variance(expected_pct: Number, actual: int, total: int) -> float:
    """
    목표 대비 편차 계산

    저장되는 불량률(소수점 2자리)에서 목표 불량률을 뺀 값.
    양수면 실제 불량률이 목표를 초과 (Above Expected).

    Returns:
        편차 (소수점 2자리). total이 0 이하면 0
    """
    if total <= 0:
        return 0.0
    actual_pct = _to_decimal(defect_percentage(actual, total))
    expected = _to_decimal(expected_pct)
    with localcontext() as ctx:
        ctx.prec = _precision_for(actual_pct, expected)
        gap = actual_pct - expected
    return round2(gap)

def gap_direction(variance_value: Optional[Number]) -> GapDirection:
    """편차 방향 (0 또는 None은 Below Expected)"""
    if variance_value is not None and variance_value > 0:
        return GapDirection.ABOVE_EXPECTED
    return GapDirection.BELOW_EXPECTED


def gap_label(variance_value: Optional[Number]) -> str:
    """편차 표시 문구"""
    return gap_direction(variance_value).label


def quality_gap_status(defect_pct: Number) -> str:
    """목표 없는 입력(품질분임조장)의 갭 상태 문구"""
    if defect_pct > 0:
        return QUALITY_GAP_ACTION_REQUIRED
    return QUALITY_GAP_ON_TRACK


def _lenient_int(raw: Any) -> int:
    try:
        return int(float(str(raw).strip()))
    except (TypeError, ValueError, OverflowError):
        return 0


def _lenient_float(raw: Any) -> float:
    try:
        value = float(str(raw).strip())
    except (TypeError, ValueError):
        return 0.0
    # NaN/inf는 미리보기에 노출하지 않음
    if value != value or value in (float("inf"), float("-inf")):
        return 0.0
    return value


def preview_metrics(
    total_raw: Any = None,
    expected_raw: Any = None,
    actual_raw: Any = None,
) -> KpiPreview:
    """
    입력 중인 값으로 실시간 미리보기 계산

    파싱할 수 없는 값은 0으로 취급합니다. 캐시 없이 호출 시마다 새로 계산합니다.
    """
    total = _lenient_int(total_raw)
    expected = _lenient_float(expected_raw)
    actual = _lenient_int(actual_raw)

    pct = defect_percentage(actual, total)
    var = variance(expected, actual, total)
    direction = gap_direction(var)

    return KpiPreview(
        total_production=total,
        expected_defects=expected,
        actual_defects=actual,
        defect_percentage=pct,
        variance=var,
        gap_direction=direction,
        gap_label=direction.label,
        quality_gap_status=quality_gap_status(pct),
    )


def verify_derived_fields(record: Any) -> bool:
    """
    저장된 파생 필드가 원본 필드로부터 재계산한 값과 일치하는지 확인

    variance가 NULL인 레코드(목표 없음)는 불량률만 비교합니다.
    """
    total = record.total_production
    actual = record.actual_defects
    expected = record.expected_defects or 0

    try:
        stored_pct = _to_decimal(record.defect_percentage)
    except (TypeError, InvalidOperation):
        return False

    if _to_decimal(defect_percentage(actual, total)) != stored_pct:
        return False

    if record.variance is None:
        return True

    return _to_decimal(variance(expected, actual, total)) == _to_decimal(record.variance)
