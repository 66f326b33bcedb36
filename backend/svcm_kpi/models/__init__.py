"""
SQLAlchemy ORM Models
"""
from svcm_kpi.models.core import (
    Profile,
    KpiRecord,
)
from svcm_kpi.models.enums import (
    Department,
    KpiStatus,
    UserRole,
    TargetMode,
    PerformanceTier,
    GapDirection,
    parse_enum,
)

__all__ = [
    "Profile",
    "KpiRecord",
    "Department",
    "KpiStatus",
    "UserRole",
    "TargetMode",
    "PerformanceTier",
    "GapDirection",
    "parse_enum",
]
