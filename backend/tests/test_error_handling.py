"""
Error Handling 테스트
에러 분류 및 포맷팅 테스트
"""
import pytest

from svcm_kpi.utils.errors import (
    ERROR_MESSAGES,
    ErrorCategory,
    InvalidInputError,
    KpiError,
    NotFoundError,
    ServiceError,
    SubmissionNotAllowedError,
    UserFriendlyError,
    classify_error,
    format_error_response,
)


class TestErrorCategory:
    """에러 카테고리 테스트"""

    def test_error_categories_exist(self):
        """모든 필수 카테고리가 존재하는지 확인"""
        for cat in ["VALIDATION", "AUTHENTICATION", "AUTHORIZATION", "NOT_FOUND", "SERVICE", "INTERNAL"]:
            assert hasattr(ErrorCategory, cat), f"Missing category: {cat}"

    def test_error_messages_defined(self):
        """에러 메시지가 정의되어 있는지 확인"""
        for key in ["connection_error", "duplicate_key"]:
            assert key in ERROR_MESSAGES, f"Missing error message: {key}"


class TestKpiErrors:
    """KPI 예외 계층 테스트"""

    @pytest.mark.parametrize(
        "error_cls,category,status",
        [
            (InvalidInputError, ErrorCategory.VALIDATION, 400),
            (SubmissionNotAllowedError, ErrorCategory.AUTHORIZATION, 403),
            (NotFoundError, ErrorCategory.NOT_FOUND, 404),
            (ServiceError, ErrorCategory.SERVICE, 503),
        ],
    )
    def test_category_and_status(self, error_cls, category, status):
        error = error_cls("boom")

        assert isinstance(error, KpiError)
        assert error.category == category
        assert error.http_status == status
        assert error.retryable is False
        assert str(error) == "boom"

    def test_service_error_keeps_operation(self):
        error = ServiceError("connection reset", operation="insert")
        assert error.operation == "insert"


class TestClassifyError:
    """에러 분류 테스트"""

    def test_kpi_error_message_passed_through(self):
        """KPI 예외 메시지는 그대로"""
        result = classify_error(InvalidInputError("Total production must be greater than 0"))

        assert result.category == ErrorCategory.VALIDATION
        assert result.message_en == "Total production must be greater than 0"
        assert result.message_ko == "Total production must be greater than 0"
        assert result.http_status == 400

    def test_service_error_operation_as_detail(self):
        result = classify_error(ServiceError("db down", operation="query"))

        assert result.http_status == 503
        assert result.technical_detail == "query"

    def test_classify_connection_error(self):
        """DB 연결 에러 분류"""
        result = classify_error(Exception("Connection refused by server"))

        assert result.category == ErrorCategory.DATABASE
        assert result.retryable is True

    def test_classify_duplicate_error(self):
        """중복 키 에러 분류"""
        result = classify_error(Exception("UNIQUE constraint failed: profiles.email"))
        assert result.category == ErrorCategory.CONFLICT

    def test_classify_unknown_error(self):
        """알 수 없는 에러"""
        result = classify_error(ValueError("something odd"))

        assert result.category == ErrorCategory.INTERNAL
        assert result.http_status == 500
        assert result.technical_detail == "something odd"


class TestFormatErrorResponse:
    """에러 응답 포맷팅 테스트"""

    def test_english_response(self):
        error = ERROR_MESSAGES["connection_error"]
        response = format_error_response(error, lang="en")

        assert response["error"]["category"] == "database"
        assert response["error"]["message"] == "Database connection failed."
        assert response["error"]["suggestion"] == "Please try again in a moment."
        assert response["error"]["retryable"] is True
        assert "detail" not in response["error"]

    def test_korean_response(self):
        error = ERROR_MESSAGES["duplicate_key"]
        response = format_error_response(error, lang="ko-KR")

        assert response["error"]["message"] == "이미 존재하는 데이터입니다."

    def test_technical_detail_included(self):
        error = UserFriendlyError(
            category=ErrorCategory.INTERNAL,
            message_ko="오류",
            message_en="Error",
            technical_detail="stack info",
        )
        response = format_error_response(error, include_technical=True)

        assert response["error"]["detail"] == "stack info"
        assert "suggestion" not in response["error"]
