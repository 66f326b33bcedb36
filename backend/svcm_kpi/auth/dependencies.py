"""
FastAPI 인증 의존성
Depends(get_current_profile) 형태로 사용

자격 증명 검증은 외부 인증 시스템(게이트웨이)이 담당하며,
KPI 엔진은 X-Profile-Id 헤더로 전달된 프로필만 조회합니다.
"""
import logging
from typing import Optional
from uuid import UUID

from fastapi import Depends, Header, HTTPException, status
from sqlalchemy.orm import Session

from svcm_kpi.database import get_db
from svcm_kpi.models import Profile
from svcm_kpi.repositories import ProfileRepository

logger = logging.getLogger(__name__)

PROFILE_HEADER = "X-Profile-Id"


async def get_current_profile(
    x_profile_id: Optional[str] = Header(None, alias=PROFILE_HEADER),
    db: Session = Depends(get_db),
) -> Profile:
    """
    현재 사용자 프로필 조회

    Args:
        x_profile_id: 프로필 ID 헤더
        db: 데이터베이스 세션

    Returns:
        Profile 객체

    Raises:
        HTTPException 401: 헤더 없음, 형식 오류, 프로필 없음
    """
    if not x_profile_id:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
        )

    try:
        profile_id = UUID(x_profile_id.strip())
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid profile ID format",
        )

    profile = ProfileRepository(db).get_by_id(profile_id)
    if not profile:
        logger.warning(f"Unknown profile id in {PROFILE_HEADER}: {profile_id}")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Profile not found",
        )

    return profile
