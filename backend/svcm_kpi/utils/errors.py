"""
SVCM KPI - 에러 유틸리티
사용자 친화적 에러 메시지 및 에러 분류

KPI 엔진의 에러 분류:
- InvalidInputError: 입력 검증 실패 (I/O 이전에 거부, 메시지 그대로 노출)
- SubmissionNotAllowedError: 역할상 KPI 입력 불가
- ServiceError: Records Service(DB) 조회/저장 실패 (재시도하지 않음)

빈 조회 결과와 0 나눗셈은 에러가 아니며, 각 컴포넌트가 정의된 빈 상태/센티널 값을 반환합니다.
"""
import logging
from enum import Enum
from typing import Optional, Dict, Any
from dataclasses import dataclass

logger = logging.getLogger(__name__)


class ErrorCategory(str, Enum):
    """에러 카테고리"""
    VALIDATION = "validation"        # 입력 검증 실패
    AUTHENTICATION = "auth"          # 인증 실패
    AUTHORIZATION = "permission"     # 권한 부족
    NOT_FOUND = "not_found"          # 리소스 없음
    CONFLICT = "conflict"            # 충돌 (중복 등)
    SERVICE = "service"              # Records Service 오류
    DATABASE = "database"            # DB 오류
    INTERNAL = "internal"            # 내부 서버 오류


class KpiError(Exception):
    """KPI 엔진 예외 기본 클래스"""

    category: ErrorCategory = ErrorCategory.INTERNAL
    http_status: int = 500
    retryable: bool = False

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class InvalidInputError(KpiError):
    """입력값 검증 실패 (생산량 0 이하, 숫자 파싱 실패 등)"""

    category = ErrorCategory.VALIDATION
    http_status = 400


class SubmissionNotAllowedError(KpiError):
    """KPI 입력/관리 권한 없음"""

    category = ErrorCategory.AUTHORIZATION
    http_status = 403


class NotFoundError(KpiError):
    """리소스 없음"""

    category = ErrorCategory.NOT_FOUND
    http_status = 404


class ServiceError(KpiError):
    """
    Records Service 실패

    하위 예외 메시지를 변경 없이 그대로 전달합니다.
    재시도 정책은 호출자(오케스트레이터)의 몫입니다.
    """

    category = ErrorCategory.SERVICE
    http_status = 503

    def __init__(self, message: str, operation: Optional[str] = None):
        super().__init__(message)
        self.operation = operation


@dataclass
class UserFriendlyError:
    """사용자 친화적 에러"""
    category: ErrorCategory
    message_ko: str
    message_en: str
    suggestion_ko: Optional[str] = None
    suggestion_en: Optional[str] = None
    technical_detail: Optional[str] = None
    http_status: int = 500
    retryable: bool = False


# 에러 메시지 매핑
ERROR_MESSAGES: Dict[str, UserFriendlyError] = {
    # 데이터베이스 에러
    "connection_error": UserFriendlyError(
        category=ErrorCategory.DATABASE,
        message_ko="데이터베이스 연결에 실패했습니다.",
        message_en="Database connection failed.",
        suggestion_ko="잠시 후 다시 시도해 주세요.",
        suggestion_en="Please try again in a moment.",
        http_status=503,
        retryable=True,
    ),
    "duplicate_key": UserFriendlyError(
        category=ErrorCategory.CONFLICT,
        message_ko="이미 존재하는 데이터입니다.",
        message_en="Data already exists.",
        suggestion_ko="다른 값을 입력해 주세요.",
        suggestion_en="Please enter a different value.",
        http_status=409,
        retryable=False,
    ),
}


def classify_error(exception: Exception) -> UserFriendlyError:
    """
    예외를 분류하여 사용자 친화적 에러로 변환

    KpiError는 메시지를 그대로 노출합니다 (입력 거부 사유, Records Service 메시지).

    Args:
        exception: 발생한 예외

    Returns:
        UserFriendlyError
    """
    if isinstance(exception, KpiError):
        return UserFriendlyError(
            category=exception.category,
            message_ko=exception.message,
            message_en=exception.message,
            technical_detail=getattr(exception, "operation", None),
            http_status=exception.http_status,
            retryable=exception.retryable,
        )

    error_str = str(exception).lower()

    # DB 에러
    if "connection" in error_str and ("refused" in error_str or "failed" in error_str):
        return ERROR_MESSAGES["connection_error"]
    if "duplicate" in error_str or "unique" in error_str:
        return ERROR_MESSAGES["duplicate_key"]

    # 기본 에러
    return UserFriendlyError(
        category=ErrorCategory.INTERNAL,
        message_ko="예기치 않은 오류가 발생했습니다.",
        message_en="An unexpected error occurred.",
        suggestion_ko="문제가 지속되면 관리자에게 문의하세요.",
        suggestion_en="If the problem persists, please contact the administrator.",
        technical_detail=str(exception),
        http_status=500,
        retryable=False,
    )


def format_error_response(
    error: UserFriendlyError,
    lang: str = "en",
    include_technical: bool = False,
) -> Dict[str, Any]:
    """
    에러를 API 응답 형식으로 포맷

    Args:
        error: UserFriendlyError
        lang: 언어 (ko 또는 en)
        include_technical: 기술적 세부사항 포함 여부

    Returns:
        에러 응답 딕셔너리
    """
    is_korean = lang.lower().startswith("ko")

    response = {
        "error": {
            "category": error.category.value,
            "message": error.message_ko if is_korean else error.message_en,
            "retryable": error.retryable,
        }
    }

    suggestion = error.suggestion_ko if is_korean else error.suggestion_en
    if suggestion:
        response["error"]["suggestion"] = suggestion

    if include_technical and error.technical_detail:
        response["error"]["detail"] = error.technical_detail

    return response
