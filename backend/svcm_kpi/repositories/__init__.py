# -*- coding: utf-8 -*-
"""
Repositories
데이터 접근 계층
"""
from .base_repository import BaseRepository
from .kpi_repository import KpiRecordRepository, ProfileRepository

__all__ = [
    "BaseRepository",
    "KpiRecordRepository",
    "ProfileRepository",
]
