# ===================================================
# SVCM KPI - Prometheus Custom Metrics
# KPI Submission, Rejection, Records Service Metrics
# ===================================================

from prometheus_client import Counter

# ========== KPI Submission Metrics ==========

# 저장된 KPI 레코드 수
kpi_records_submitted_total = Counter(
    "kpi_records_submitted_total",
    "Total KPI records accepted and persisted",
    ["department", "target_mode"]  # target_mode: direct, none, department_average
)

# 검증 단계에서 거부된 제출 수
kpi_submissions_rejected_total = Counter(
    "kpi_submissions_rejected_total",
    "Total KPI submissions rejected before persistence",
    ["reason"]  # reason: invalid_input, not_allowed
)


# ========== Records Service Metrics ==========

# Records Service 실패 수
kpi_service_errors_total = Counter(
    "kpi_service_errors_total",
    "Total Records Service failures",
    ["operation"]  # operation: insert, query, delete_all, update_profile_department
)
