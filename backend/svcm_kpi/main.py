"""
SVCM KPI Backend - FastAPI Main Application
"""
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from prometheus_client import make_asgi_app
from starlette.exceptions import HTTPException as StarletteHTTPException
import logging

# Sentry 초기화 (가장 먼저 실행되어야 함)
import sentry_sdk
from sentry_sdk.integrations.fastapi import FastApiIntegration
from sentry_sdk.integrations.sqlalchemy import SqlalchemyIntegration
from sentry_sdk.integrations.logging import LoggingIntegration

from svcm_kpi.config import settings

# Sentry 설정
if settings.sentry_dsn:
    sentry_sdk.init(
        dsn=settings.sentry_dsn,
        environment=settings.environment,
        release=f"svcm-kpi@{settings.app_version}",
        traces_sample_rate=settings.sentry_traces_sample_rate,
        integrations=[
            FastApiIntegration(transaction_style="endpoint"),
            SqlalchemyIntegration(),
            LoggingIntegration(level=logging.INFO, event_level=logging.ERROR),
        ],
        send_default_pii=False,
        attach_stacktrace=True,
    )
from svcm_kpi.utils.errors import KpiError, ErrorCategory, classify_error, format_error_response
from svcm_kpi.database import check_db_connection, init_db

# 로깅 설정
if settings.log_format == "json":
    logging.basicConfig(
        level=settings.log_level,
        format='{"time": "%(asctime)s", "level": "%(levelname)s", "message": "%(message)s"}',
    )
else:
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    앱 시작/종료 시 실행되는 이벤트
    - 시작: DB 테이블 생성
    """
    logger.info("Starting SVCM KPI Backend...")

    try:
        init_db()
        logger.info("Database initialized successfully")
    except Exception as e:
        logger.warning(f"Database initialization skipped: {e}")

    yield

    logger.info("Shutting down SVCM KPI Backend...")


# FastAPI 앱 생성
app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    description="Manufacturing quality KPI metrics and aggregation",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=settings.cors_allow_credentials,
    allow_methods=["*"],
    allow_headers=["*"],
)
logger.info(f"CORS middleware enabled for origins: {settings.cors_origins_list}")

# Prometheus 메트릭 엔드포인트
if settings.metrics_enabled:
    metrics_app = make_asgi_app()
    app.mount("/metrics", metrics_app)


# ========== 전역 예외 핸들러 ==========


def _request_lang(request: Request) -> str:
    lang = request.headers.get("Accept-Language", "en")
    return "ko" if "ko" in lang else "en"


@app.exception_handler(KpiError)
async def kpi_exception_handler(request: Request, exc: KpiError):
    """KPI 엔진 예외 핸들러 - 입력 거부 사유를 그대로 전달"""
    if exc.http_status >= 500:
        logger.error(f"{type(exc).__name__} on {request.url.path}: {exc.message}")

    user_error = classify_error(exc)
    return JSONResponse(
        status_code=exc.http_status,
        content=format_error_response(user_error, lang=_request_lang(request)),
    )


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    """HTTP 예외 핸들러"""
    category = ErrorCategory.AUTHENTICATION if exc.status_code == 401 else ErrorCategory.INTERNAL
    if exc.status_code == 404:
        category = ErrorCategory.NOT_FOUND

    return JSONResponse(
        status_code=exc.status_code,
        content={
            "error": {
                "category": category.value,
                "message": str(exc.detail),
                "retryable": False,
            }
        },
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Pydantic 유효성 검사 에러 핸들러"""
    error_details = []
    for error in exc.errors():
        loc = " -> ".join(str(part) for part in error["loc"])
        error_details.append(f"{loc}: {error['msg']}")

    if _request_lang(request) == "ko":
        message = "입력 데이터가 올바르지 않습니다."
    else:
        message = "Invalid input data."

    return JSONResponse(
        status_code=422,
        content={
            "error": {
                "category": ErrorCategory.VALIDATION.value,
                "message": message,
                "details": error_details,
                "retryable": False,
            }
        },
    )


@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception):
    """일반 예외 핸들러 - 예상치 못한 에러 처리"""
    logger.error(f"Unhandled exception: {exc}", exc_info=True)

    user_error = classify_error(exc)
    return JSONResponse(
        status_code=user_error.http_status,
        content=format_error_response(user_error, lang=_request_lang(request)),
    )


@app.get("/")
async def root():
    """루트 엔드포인트"""
    return {
        "app": settings.app_name,
        "version": settings.app_version,
        "environment": settings.environment,
        "status": "ok",
    }


@app.get("/health")
async def health_check():
    """헬스 체크 엔드포인트"""
    db_status = "ok" if check_db_connection() else "error"

    return {
        "status": "healthy" if db_status == "ok" else "unhealthy",
        "checks": {
            "database": db_status,
        },
    }


# ========== 라우터 등록 ==========

from svcm_kpi.routers import kpi
app.include_router(kpi.router, prefix="/api/v1/kpi", tags=["kpi"])
