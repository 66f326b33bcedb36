# -*- coding: utf-8 -*-
"""
Base Repository
모든 Repository의 기본 클래스

SQLAlchemy 예외는 롤백 후 ServiceError로 변환합니다 (메시지는 그대로 전달, 재시도 없음).
"""
import logging
from contextlib import contextmanager
from typing import Generic, Iterator, List, Optional, Type, TypeVar
from uuid import UUID

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from svcm_kpi.utils.errors import NotFoundError, ServiceError
from svcm_kpi.utils.metrics import kpi_service_errors_total

logger = logging.getLogger(__name__)

T = TypeVar('T')


class BaseRepository(Generic[T]):
    """
    기본 Repository 클래스
    공통 조회/생성 메서드 제공
    """

    def __init__(self, db: Session, model: Type[T]):
        self.db = db
        self.model = model

    @contextmanager
    def _guard(self, operation: str) -> Iterator[None]:
        """DB 작업 실패 시 롤백 후 ServiceError 발생"""
        try:
            yield
        except SQLAlchemyError as e:
            self.db.rollback()
            kpi_service_errors_total.labels(operation=operation).inc()
            logger.error(f"{self.model.__name__} {operation} failed: {e}")
            raise ServiceError(str(e), operation=operation) from e

    def get_by_id(self, id: UUID) -> Optional[T]:
        """ID로 조회"""
        with self._guard("get_by_id"):
            return self.db.query(self.model).filter(
                self.model.id == id  # type: ignore
            ).first()

    def get_by_id_or_404(self, id: UUID) -> T:
        """ID로 조회 (없으면 404)"""
        resource = self.get_by_id(id)
        if not resource:
            raise NotFoundError(f"{self.model.__name__} not found: {id}")
        return resource

    def create(self, obj: T) -> T:
        """생성"""
        with self._guard("insert"):
            self.db.add(obj)
            self.db.commit()
            self.db.refresh(obj)
        return obj
