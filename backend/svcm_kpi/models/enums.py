"""
KPI 도메인 열거형
부서, 레코드 상태, 사용자 역할 등 프로세스 전역 고정 집합
"""
from enum import Enum
from typing import Optional, Type, TypeVar, Union

from svcm_kpi.utils.errors import InvalidInputError

E = TypeVar("E", bound=Enum)


def _humanize(value: str) -> str:
    """snake_case 값을 화면 표시용 이름으로 변환 (sales_marketing -> Sales Marketing)"""
    return " ".join(word.capitalize() for word in value.split("_"))


class Department(str, Enum):
    """부서"""
    SALES_MARKETING = "sales_marketing"
    WAREHOUSE = "warehouse"
    PROCUREMENT = "procurement"
    QUALITY_ASSURANCE = "quality_assurance"
    RESEARCH_DEVELOPMENT = "research_development"
    PRODUCTION = "production"

    @property
    def display_name(self) -> str:
        return _humanize(self.value)


class KpiStatus(str, Enum):
    """KPI 레코드 상태 (승인 워크플로우는 외부에서 전이)"""
    PENDING = "pending"
    COMPLETED = "completed"


class UserRole(str, Enum):
    """사용자 역할"""
    ADMIN = "admin"
    DEPARTMENT_HEAD = "department_head"
    EMPLOYEE = "employee"
    QUALITY_CIRCLE_LEADER = "quality_circle_leader"

    @property
    def display_name(self) -> str:
        return _humanize(self.value)


class TargetMode(str, Enum):
    """
    KPI 입력 시 목표 불량률 산정 방식

    - direct: 제출자가 목표 불량률(%)을 직접 입력
    - none: 목표 없음 (expected_defects=0, variance=NULL)
    - department_average: 부서 과거 레코드 목표치 평균을 목표로 사용
    """
    DIRECT = "direct"
    NONE = "none"
    DEPARTMENT_AVERAGE = "department_average"


class PerformanceTier(str, Enum):
    """실제 불량 / 예상 불량 비율 기반 성과 등급"""
    EXCELLENT = "excellent"  # <= 80%
    GOOD = "good"            # <= 100%
    CRITICAL = "critical"    # > 100%
    UNDEFINED = "undefined"  # 예상 불량 수 0 (비율 계산 불가)


class GapDirection(str, Enum):
    """목표 대비 편차 방향 (양수 = 목표보다 나쁨)"""
    ABOVE_EXPECTED = "above_expected"
    BELOW_EXPECTED = "below_expected"

    @property
    def label(self) -> str:
        if self is GapDirection.ABOVE_EXPECTED:
            return "Above Expected"
        return "Below Expected"


def parse_enum(enum_cls: Type[E], value: Union[str, E, None], field: str) -> Optional[E]:
    """
    문자열을 열거형으로 변환

    None은 그대로 반환하고, 정의되지 않은 값이면 InvalidInputError를 발생시킵니다.
    """
    if value is None or isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(str(value).strip())
    except ValueError:
        allowed = ", ".join(member.value for member in enum_cls)
        raise InvalidInputError(f"{field} must be one of: {allowed}")
