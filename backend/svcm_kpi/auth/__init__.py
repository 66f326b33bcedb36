"""
인증 모듈
외부 인증 시스템이 전달한 사용자 식별자로 프로필 조회
"""
from .dependencies import get_current_profile, PROFILE_HEADER

__all__ = [
    "get_current_profile",
    "PROFILE_HEADER",
]
