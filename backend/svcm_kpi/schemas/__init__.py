"""
Pydantic Schemas
"""
from svcm_kpi.schemas.kpi import (
    KpiSubmission,
    KpiPreviewRequest,
    KpiRecordDraft,
    KpiRecordResponse,
    KpiPreview,
    KpiSummary,
    TrendPoint,
    RecordTableRow,
    RecordListResponse,
    TrendResponse,
    SummaryResponse,
    ResetResponse,
    DepartmentUpdate,
    ProfileResponse,
)

__all__ = [
    "KpiSubmission",
    "KpiPreviewRequest",
    "KpiRecordDraft",
    "KpiRecordResponse",
    "KpiPreview",
    "KpiSummary",
    "TrendPoint",
    "RecordTableRow",
    "RecordListResponse",
    "TrendResponse",
    "SummaryResponse",
    "ResetResponse",
    "DepartmentUpdate",
    "ProfileResponse",
]
