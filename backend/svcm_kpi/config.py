"""
환경 설정 모듈
Pydantic Settings를 사용하여 .env 파일에서 환경변수를 로드합니다.
"""
from typing import List, Literal, Optional

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """애플리케이션 설정"""

    # Application
    app_name: str = "SVCM KPI"
    app_version: str = "0.1.0"
    environment: str = "development"

    # Database
    database_url: str = "sqlite:///./svcm_kpi.db"
    database_pool_size: int = 20
    database_max_overflow: int = 40

    # KPI 입력 정책
    # admin 입력 폼의 목표 불량률 산정 방식 (direct: 직접 입력, department_average: 부서 평균)
    admin_target_mode: Literal["direct", "department_average"] = "direct"

    # CORS
    cors_origins: str = "http://localhost:5173,http://localhost:3000"
    cors_allow_credentials: bool = True

    # Logging
    log_level: str = "INFO"
    log_format: str = "json"

    # Monitoring
    metrics_enabled: bool = True
    sentry_dsn: Optional[str] = None
    sentry_traces_sample_rate: float = 0.1

    @property
    def cors_origins_list(self) -> List[str]:
        """CORS origins를 리스트로 변환"""
        return [origin.strip() for origin in self.cors_origins.split(",")]

    @property
    def is_sqlite(self) -> bool:
        return self.database_url.startswith("sqlite")

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = False


# 전역 설정 인스턴스
settings = Settings()
