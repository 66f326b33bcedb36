"""
Database 연결 및 세션 관리
SQLAlchemy를 사용한 DB 세션 팩토리
"""
import logging
from typing import Generator

from sqlalchemy import create_engine, event, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import declarative_base, sessionmaker, Session

from svcm_kpi.config import settings

logger = logging.getLogger(__name__)

# SQLAlchemy Base 클래스
Base = declarative_base()


def _engine_options() -> dict:
    """DB 종류별 엔진 옵션"""
    if settings.is_sqlite:
        # SQLite는 커넥션 풀 크기 옵션을 지원하지 않음
        return {"connect_args": {"check_same_thread": False}}
    return {
        "pool_size": settings.database_pool_size,
        "max_overflow": settings.database_max_overflow,
        "pool_pre_ping": True,  # 연결 유효성 체크
    }


# Database Engine 생성
engine = create_engine(
    settings.database_url,
    echo=settings.environment == "development",  # 개발 환경에서 SQL 로그 출력
    **_engine_options(),
)


@event.listens_for(Engine, "connect")
def enable_sqlite_foreign_keys(dbapi_conn, connection_record):
    """SQLite에서 kpi_records.created_by → profiles 외래 키 제약 활성화"""
    connection_type = type(dbapi_conn).__module__
    if "sqlite" not in connection_type.lower():
        return

    cursor = dbapi_conn.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


# SessionLocal 팩토리
SessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=engine,
)


def get_db() -> Generator[Session, None, None]:
    """요청 단위 DB 세션 (FastAPI Depends)"""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def init_db():
    """profiles, kpi_records 테이블 생성 (이미 존재하면 무시)"""
    from svcm_kpi.models import core  # noqa: F401

    Base.metadata.create_all(bind=engine)


def check_db_connection() -> bool:
    """/health 용 SELECT 1 확인"""
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        return True
    except SQLAlchemyError as e:
        logger.error(f"Database health check failed: {e}")
        return False
