# -*- coding: utf-8 -*-
"""
KPI Repository
KPI 레코드 / 프로필 데이터 접근 계층 (Records Service)

- 검증기가 만든 Draft를 그대로 저장 (파생 필드 재계산 없음)
- 조회는 entry_date 내림차순, 같은 일자는 created_at 내림차순
"""
import logging
from typing import Any, List, Optional
from uuid import UUID

from sqlalchemy import func
from sqlalchemy.orm import Session

from svcm_kpi.models.core import KpiRecord, Profile
from svcm_kpi.models.enums import Department, parse_enum
from svcm_kpi.repositories.base_repository import BaseRepository
from svcm_kpi.schemas.kpi import KpiRecordDraft
from svcm_kpi.services.data_scope_service import DataScope, apply_department_filter

logger = logging.getLogger(__name__)


class KpiRecordRepository(BaseRepository[KpiRecord]):
    """KPI 레코드 Repository"""

    def __init__(self, db: Session):
        super().__init__(db, KpiRecord)

    def insert(self, draft: KpiRecordDraft) -> KpiRecord:
        """검증된 Draft 저장"""
        values = draft.model_dump()
        values["department"] = draft.department.value
        values["status"] = draft.status.value

        record = self.create(KpiRecord(**values))
        logger.info(
            f"KPI record stored: id={record.id}, department={record.department}, "
            f"entry_date={record.entry_date}"
        )
        return record

    def query(
        self,
        department: Any = None,
        limit: Optional[int] = None,
        scope: Optional[DataScope] = None,
    ) -> List[KpiRecord]:
        """
        KPI 레코드 조회

        Args:
            department: 부서 필터 (None이면 전체)
            limit: 최대 건수
            scope: 사용자 데이터 범위 (지정 시 범위 밖 레코드 제외)

        Returns:
            최신순 레코드 목록
        """
        department = parse_enum(Department, department, "department")

        with self._guard("query"):
            q = self.db.query(KpiRecord)
            if scope is not None:
                q = apply_department_filter(q, scope, KpiRecord.department)
            if department is not None:
                q = q.filter(KpiRecord.department == department.value)

            q = q.order_by(KpiRecord.entry_date.desc(), KpiRecord.created_at.desc())
            if limit is not None:
                q = q.limit(limit)
            return q.all()

    def average_expected_defects(self, department: Any) -> Optional[float]:
        """
        부서의 목표 불량률 평균

        부서의 모든 기존 레코드 대상 (목표 없음 레코드는 0으로 포함).
        레코드가 없으면 None.
        """
        department = parse_enum(Department, department, "department")

        with self._guard("query"):
            avg = (
                self.db.query(func.avg(KpiRecord.expected_defects))
                .filter(KpiRecord.department == department.value)
                .scalar()
            )
        return float(avg) if avg is not None else None

    def delete_all(self) -> int:
        """전체 KPI 레코드 삭제 (삭제 건수 반환)"""
        with self._guard("delete_all"):
            deleted = self.db.query(KpiRecord).delete(synchronize_session=False)
            self.db.commit()
        logger.info(f"Deleted all KPI records: {deleted}")
        return deleted


class ProfileRepository(BaseRepository[Profile]):
    """프로필 Repository"""

    def __init__(self, db: Session):
        super().__init__(db, Profile)

    def update_department(self, profile_id: UUID, department: Any) -> Profile:
        """프로필 부서 지정"""
        department = parse_enum(Department, department, "department")
        profile = self.get_by_id_or_404(profile_id)

        with self._guard("update_profile_department"):
            profile.department = department.value if department else None
            self.db.commit()
            self.db.refresh(profile)
        logger.info(f"Profile {profile_id} department set to {profile.department}")
        return profile
