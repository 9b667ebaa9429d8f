"""Prometheus metrics shared by the app and services"""

from prometheus_client import Counter, Histogram

REQUEST_COUNT = Counter(
    "healthsync_http_requests_total",
    "Total HTTP requests",
    ["method", "path", "status"],
)
REQUEST_LATENCY = Histogram(
    "healthsync_http_request_duration_seconds",
    "HTTP request duration in seconds",
    ["method", "path"],
)
SYNC_CHANGES_APPENDED = Counter(
    "healthsync_sync_changes_appended_total",
    "Change log rows appended by incremental sync",
    ["data_type", "action"],
)
