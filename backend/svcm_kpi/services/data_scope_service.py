# -*- coding: utf-8 -*-
"""
Data Scope Service
사용자별 KPI 레코드 조회 범위 필터링

역할 기반 Data Scope Filter:
- admin: 전체 부서 조회 (표 형식 화면에서 부서 컬럼 표시)
- 기타 역할: 본인 부서만 조회 (다른 부서 요청은 무시)
- 부서 미지정 사용자: 조회 범위 없음 (전체 조회로 해석하지 않음)
"""
import logging
from dataclasses import dataclass
from typing import Any, Callable, Iterable, List, Optional, TypeVar

from sqlalchemy import false
from sqlalchemy.orm import Query

from svcm_kpi.models.enums import Department, UserRole, parse_enum
from svcm_kpi.utils.errors import InvalidInputError

logger = logging.getLogger(__name__)

T = TypeVar("T")

SCOPE_ALL = "all"
SCOPE_NONE = "none"


@dataclass(frozen=True)
class DataScope:
    """
    사용자의 데이터 접근 범위

    Attributes:
        viewer_id: 사용자 ID
        role: 사용자 역할
        department: 조회 대상 부서 (admin이 부서를 좁히지 않았으면 None)
        all_access: 전체 부서 접근 여부 (admin)
        no_scope: 부서 미지정으로 조회 범위 없음
    """
    viewer_id: str
    role: UserRole
    department: Optional[Department] = None
    all_access: bool = False
    no_scope: bool = False

    @property
    def show_department_column(self) -> bool:
        """표 형식 화면에서 부서 컬럼 표시 여부 (admin만)"""
        return self.role == UserRole.ADMIN

    @property
    def query_department(self) -> Optional[Department]:
        """Records Service 조회 조건 부서 (None은 전체 조회인 경우에만)"""
        if self.no_scope:
            return None
        return self.department

    @property
    def label(self) -> str:
        """응답 표시용 범위 이름"""
        if self.no_scope:
            return SCOPE_NONE
        if self.department is not None:
            return self.department.value
        return SCOPE_ALL

    def can_access_department(self, department: Any) -> bool:
        """특정 부서 레코드에 접근 가능한지 확인"""
        if self.no_scope:
            return False
        if self.all_access and self.department is None:
            return True
        try:
            department = parse_enum(Department, department, "department")
        except InvalidInputError:
            return False
        return department == self.department


def resolve_data_scope(
    role: Any,
    department: Any,
    *,
    viewer_id: str = "",
    requested_department: Any = None,
) -> DataScope:
    """
    역할과 부서로 조회 범위 결정 (I/O 없음)

    Args:
        role: 사용자 역할
        department: 사용자 프로필 부서 (미지정이면 None)
        viewer_id: 사용자 ID
        requested_department: 요청 부서 (admin만 범위를 좁힐 수 있음)

    Returns:
        DataScope 객체
    """
    role = parse_enum(UserRole, role, "role")
    department = parse_enum(Department, department, "department")
    requested = parse_enum(Department, requested_department, "department")

    # admin은 전체 접근 (요청 시 특정 부서로 좁힘)
    if role == UserRole.ADMIN:
        return DataScope(
            viewer_id=viewer_id,
            role=role,
            department=requested,
            all_access=True,
        )

    # 부서 미지정 사용자
    if department is None:
        return DataScope(viewer_id=viewer_id, role=role, no_scope=True)

    if requested is not None and requested != department:
        logger.warning(
            f"Ignoring department override '{requested.value}' for viewer {viewer_id} "
            f"(role={role.value}, department={department.value})"
        )

    return DataScope(viewer_id=viewer_id, role=role, department=department)


def get_user_data_scope(profile: Any, requested_department: Any = None) -> DataScope:
    """
    프로필의 데이터 접근 범위 조회

    Args:
        profile: Profile 객체 (role, department 속성)
        requested_department: 요청 부서

    Returns:
        DataScope 객체
    """
    viewer_id = str(profile.id) if getattr(profile, "id", None) else ""
    return resolve_data_scope(
        profile.role,
        profile.department,
        viewer_id=viewer_id,
        requested_department=requested_department,
    )


def apply_department_filter(
    query: Query,
    scope: DataScope,
    department_column: Any,
) -> Query:
    """
    쿼리에 부서 필터 적용

    Args:
        query: SQLAlchemy 쿼리
        scope: 데이터 범위
        department_column: 부서 컬럼 (e.g., KpiRecord.department)

    Returns:
        필터링된 쿼리
    """
    if scope.no_scope:
        # 접근 가능한 부서가 없으면 빈 결과 반환
        return query.filter(false())

    department = scope.query_department
    if department is None:
        return query

    return query.filter(department_column == department.value)


def filter_records_by_scope(
    items: Iterable[T],
    scope: DataScope,
    get_department: Optional[Callable[[T], Any]] = None,
) -> List[T]:
    """
    인메모리 리스트에 Data Scope 필터 적용

    DB 쿼리가 아닌 Python 리스트에서 필터링할 때 사용합니다.

    사용 예시:
        visible = filter_records_by_scope(records, scope)
    """
    def department_of(item: T) -> Any:
        if get_department is not None:
            return get_department(item)
        return item.department

    return [item for item in items if scope.can_access_department(department_of(item))]
