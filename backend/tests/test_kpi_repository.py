"""
KPI Repository 테스트

Records Service 저장/조회/삭제 및 실패 처리 테스트
"""
from datetime import date
from unittest.mock import patch

import pytest
from sqlalchemy.exc import OperationalError

from svcm_kpi.models import Department, KpiRecord, UserRole
from svcm_kpi.repositories import KpiRecordRepository, ProfileRepository
from svcm_kpi.schemas.kpi import KpiRecordDraft
from svcm_kpi.services.data_scope_service import resolve_data_scope
from svcm_kpi.services.kpi_metrics import verify_derived_fields
from svcm_kpi.utils.errors import NotFoundError, ServiceError


def _draft(department=Department.PRODUCTION, entry_date=date(2025, 1, 5), **overrides) -> KpiRecordDraft:
    values = dict(
        department=department,
        entry_date=entry_date,
        total_production=1000,
        expected_defects=2.5,
        actual_defects=30,
        defect_percentage=3.0,
        variance=0.5,
    )
    values.update(overrides)
    return KpiRecordDraft(**values)


class TestKpiRecordRepository:
    """KPI 레코드 Repository 테스트"""

    def test_insert_persists_draft_fields(self, db_session):
        """Draft 필드를 그대로 저장"""
        repo = KpiRecordRepository(db_session)
        record = repo.insert(_draft(reason_for_defects="Mold wear"))

        stored = db_session.get(KpiRecord, record.id)
        assert stored.department == "production"
        assert stored.defect_percentage == 3.0
        assert stored.variance == 0.5
        assert stored.status == "pending"
        assert stored.reason_for_defects == "Mold wear"
        assert stored.created_at is not None
        assert verify_derived_fields(stored) is True

    def test_insert_null_variance(self, db_session):
        """목표 없음 레코드는 variance NULL"""
        repo = KpiRecordRepository(db_session)
        record = repo.insert(_draft(expected_defects=0.0, variance=None))

        assert db_session.get(KpiRecord, record.id).variance is None

    def test_query_orders_newest_first(self, db_session):
        """entry_date 내림차순"""
        repo = KpiRecordRepository(db_session)
        for day in (3, 7, 5):
            repo.insert(_draft(entry_date=date(2025, 1, day)))

        records = repo.query()
        assert [r.entry_date.day for r in records] == [7, 5, 3]

    def test_query_limit_and_department(self, db_session):
        """부서 필터와 건수 제한"""
        repo = KpiRecordRepository(db_session)
        for day in range(1, 6):
            repo.insert(_draft(entry_date=date(2025, 1, day)))
        repo.insert(_draft(department=Department.WAREHOUSE))

        assert len(repo.query(department="production", limit=3)) == 3
        assert len(repo.query(department=Department.WAREHOUSE)) == 1

    def test_query_with_scope(self, db_session):
        """데이터 범위 적용"""
        repo = KpiRecordRepository(db_session)
        repo.insert(_draft(department=Department.PRODUCTION))
        repo.insert(_draft(department=Department.WAREHOUSE))

        employee = resolve_data_scope("employee", "warehouse")
        assert [r.department for r in repo.query(scope=employee)] == ["warehouse"]

        admin = resolve_data_scope("admin", None)
        assert len(repo.query(scope=admin)) == 2

        unassigned = resolve_data_scope("employee", None)
        assert repo.query(scope=unassigned) == []

    def test_average_expected_defects(self, db_session):
        """부서 목표 평균 (목표 없음 레코드는 0으로 포함)"""
        repo = KpiRecordRepository(db_session)
        assert repo.average_expected_defects("production") is None

        repo.insert(_draft(expected_defects=2.0, variance=1.0))
        repo.insert(_draft(expected_defects=3.0, variance=0.0))
        repo.insert(_draft(expected_defects=0.0, variance=None))
        repo.insert(_draft(department=Department.WAREHOUSE, expected_defects=9.0, variance=-6.0))

        assert repo.average_expected_defects(Department.PRODUCTION) == pytest.approx(5.0 / 3)

    def test_delete_all(self, db_session):
        """전체 삭제 건수 반환"""
        repo = KpiRecordRepository(db_session)
        repo.insert(_draft())
        repo.insert(_draft(department=Department.WAREHOUSE))

        assert repo.delete_all() == 2
        assert repo.query() == []

    def test_failure_raises_service_error(self, db_session):
        """DB 실패는 메시지 그대로 ServiceError"""
        repo = KpiRecordRepository(db_session)
        failure = OperationalError("SELECT", {}, Exception("database is locked"))

        with patch.object(db_session, "query", side_effect=failure):
            with pytest.raises(ServiceError) as exc_info:
                repo.query()

        assert exc_info.value.message == str(failure)
        assert exc_info.value.operation == "query"

    def test_insert_failure_rolls_back(self, db_session):
        """저장 실패 시 롤백"""
        repo = KpiRecordRepository(db_session)
        failure = OperationalError("INSERT", {}, Exception("disk I/O error"))

        with patch.object(db_session, "commit", side_effect=failure), \
                patch.object(db_session, "rollback", wraps=db_session.rollback) as rollback:
            with pytest.raises(ServiceError):
                repo.insert(_draft())

        rollback.assert_called_once()
        assert repo.query() == []


class TestProfileRepository:
    """프로필 Repository 테스트"""

    def test_update_department(self, db_session, make_profile):
        """부서 지정"""
        profile = make_profile(UserRole.EMPLOYEE)
        repo = ProfileRepository(db_session)

        updated = repo.update_department(profile.id, "procurement")
        assert updated.department == "procurement"

    def test_update_missing_profile(self, db_session):
        """없는 프로필"""
        from uuid import uuid4

        with pytest.raises(NotFoundError):
            ProfileRepository(db_session).update_department(uuid4(), "procurement")
