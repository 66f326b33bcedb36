"""
KPI Router 테스트

KPI API 엔드포인트 테스트
"""
from unittest.mock import patch

import pytest
from httpx import AsyncClient
from sqlalchemy.exc import OperationalError

from svcm_kpi import database
from svcm_kpi.models import Department, UserRole


def _headers(profile) -> dict:
    return {"X-Profile-Id": str(profile.id)}


class TestAuthentication:
    """프로필 식별 테스트"""

    @pytest.mark.asyncio
    async def test_missing_header(self, client: AsyncClient):
        """헤더 없으면 401"""
        response = await client.get("/api/v1/kpi/records")

        assert response.status_code == 401
        assert response.json()["error"]["category"] == "auth"

    @pytest.mark.asyncio
    async def test_invalid_header(self, client: AsyncClient):
        """형식 오류 401"""
        response = await client.get("/api/v1/kpi/summary", headers={"X-Profile-Id": "not-a-uuid"})
        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_unknown_profile(self, client: AsyncClient):
        """없는 프로필 401"""
        response = await client.get(
            "/api/v1/kpi/summary",
            headers={"X-Profile-Id": "00000000-0000-0000-0000-000000000001"},
        )
        assert response.status_code == 401
        assert response.json()["error"]["message"] == "Profile not found"


class TestSubmitEndpoint:
    """POST /records 테스트"""

    @pytest.mark.asyncio
    async def test_submit_created(self, client: AsyncClient, admin_profile, sample_submission_data):
        """admin 입력 201"""
        response = await client.post(
            "/api/v1/kpi/records",
            json=sample_submission_data,
            headers=_headers(admin_profile),
        )

        assert response.status_code == 201
        data = response.json()
        assert data["department"] == "quality_assurance"
        assert data["defect_percentage"] == 3.0
        assert data["variance"] == 0.5
        assert data["status"] == "pending"

    @pytest.mark.asyncio
    async def test_invalid_input_400(self, client: AsyncClient, admin_profile, sample_submission_data):
        """검증 실패 400 (사유 그대로)"""
        sample_submission_data["total_production"] = "0"
        response = await client.post(
            "/api/v1/kpi/records",
            json=sample_submission_data,
            headers=_headers(admin_profile),
        )

        assert response.status_code == 400
        error = response.json()["error"]
        assert error["category"] == "validation"
        assert error["message"] == "Total production must be greater than 0"
        assert error["retryable"] is False

    @pytest.mark.asyncio
    async def test_not_allowed_403(self, client: AsyncClient, employee_profile, sample_submission_data):
        """입력 권한 없음 403"""
        response = await client.post(
            "/api/v1/kpi/records",
            json=sample_submission_data,
            headers=_headers(employee_profile),
        )

        assert response.status_code == 403
        assert response.json()["error"]["category"] == "permission"


class TestReadEndpoints:
    """조회 엔드포인트 테스트"""

    @pytest.mark.asyncio
    async def test_dashboard_flow(self, client: AsyncClient, admin_profile, sample_submission_data):
        """입력 후 목록/요약/추세 조회"""
        headers = _headers(admin_profile)
        await client.post("/api/v1/kpi/records", json=sample_submission_data, headers=headers)

        records = (await client.get("/api/v1/kpi/records", headers=headers)).json()
        assert records["scope"] == "all"
        assert records["show_department"] is True
        assert records["rows"][0]["variance_display"] == "+0.50%"
        assert records["rows"][0]["department_display"] == "Quality Assurance"

        summary = (await client.get("/api/v1/kpi/summary", headers=headers)).json()
        assert summary["has_record"] is True
        assert summary["expected_defects_count"] == 25.0
        assert summary["performance_tier"] == "critical"
        assert summary["gap_direction"] == "above_expected"

        trend = (await client.get("/api/v1/kpi/trend", headers=headers)).json()
        assert len(trend["points"]) == 1
        assert trend["chart"]["type"] == "bar"

    @pytest.mark.asyncio
    async def test_department_query_param(self, client: AsyncClient, admin_profile):
        """admin 부서 필터"""
        response = await client.get(
            "/api/v1/kpi/records",
            params={"department": "warehouse"},
            headers=_headers(admin_profile),
        )

        assert response.status_code == 200
        assert response.json()["scope"] == "warehouse"
        assert response.json()["rows"] == []

    @pytest.mark.asyncio
    async def test_unknown_department_param(self, client: AsyncClient, admin_profile):
        """정의되지 않은 부서 422"""
        response = await client.get(
            "/api/v1/kpi/records",
            params={"department": "marketing"},
            headers=_headers(admin_profile),
        )
        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_empty_summary(self, client: AsyncClient, employee_profile):
        """레코드 없는 부서 요약"""
        response = await client.get("/api/v1/kpi/summary", headers=_headers(employee_profile))

        assert response.status_code == 200
        data = response.json()
        assert data["scope"] == "production"
        assert data["total_products"] == 0
        assert data["performance_tier"] == "undefined"


class TestPreviewEndpoint:
    """POST /preview 테스트"""

    @pytest.mark.asyncio
    async def test_preview(self, client: AsyncClient, leader_profile):
        response = await client.post(
            "/api/v1/kpi/preview",
            json={"total_production": "500", "expected_defects": "5.0", "actual_defects": "5"},
            headers=_headers(leader_profile),
        )

        assert response.status_code == 200
        data = response.json()
        assert data["defect_percentage"] == 1.0
        assert data["variance"] == -4.0
        assert data["gap_label"] == "Below Expected"


class TestAdminEndpoints:
    """관리 엔드포인트 테스트"""

    @pytest.mark.asyncio
    async def test_reset_by_admin(self, client: AsyncClient, admin_profile, sample_submission_data):
        headers = _headers(admin_profile)
        await client.post("/api/v1/kpi/records", json=sample_submission_data, headers=headers)

        response = await client.delete("/api/v1/kpi/records", headers=headers)
        assert response.status_code == 200
        assert response.json() == {"deleted": 1}

    @pytest.mark.asyncio
    async def test_reset_denied(self, client: AsyncClient, leader_profile):
        response = await client.delete("/api/v1/kpi/records", headers=_headers(leader_profile))
        assert response.status_code == 403

    @pytest.mark.asyncio
    async def test_set_department(self, client: AsyncClient, make_profile):
        viewer = make_profile(UserRole.EMPLOYEE, None)
        response = await client.put(
            "/api/v1/kpi/profile/department",
            json={"department": Department.PROCUREMENT.value},
            headers=_headers(viewer),
        )

        assert response.status_code == 200
        assert response.json()["department"] == "procurement"


class TestAppEndpoints:
    """기본 엔드포인트 테스트"""

    @pytest.mark.asyncio
    async def test_root(self, client: AsyncClient):
        response = await client.get("/")
        assert response.status_code == 200
        assert response.json()["status"] == "ok"

    @pytest.mark.asyncio
    async def test_health(self, client: AsyncClient):
        response = await client.get("/health")
        assert response.status_code == 200
        assert response.json()["checks"]["database"] == "ok"

    @pytest.mark.asyncio
    async def test_health_reports_database_failure(self, client: AsyncClient):
        """DB 연결 실패 시 unhealthy"""
        failure = OperationalError("SELECT 1", {}, Exception("connection refused"))
        with patch.object(database.engine, "connect", side_effect=failure):
            response = await client.get("/health")

        assert response.status_code == 200
        assert response.json() == {"status": "unhealthy", "checks": {"database": "error"}}
