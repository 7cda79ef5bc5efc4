"""
Prometheus metrics for the key service.

Custom metrics for business logic and performance monitoring.
"""

from prometheus_client import Counter, Histogram

# HTTP metrics
http_requests_total = Counter(
    "http_requests_total",
    "Total HTTP requests",
    ["method", "endpoint", "status_code"],
)

http_request_duration_seconds = Histogram(
    "http_request_duration_seconds",
    "HTTP request duration in seconds",
    ["method", "endpoint"],
    buckets=[0.01, 0.05, 0.1, 0.5, 1.0, 2.0, 5.0, 10.0],
)

# Key metrics
key_validations_total = Counter(
    "key_validations_total",
    "Consuming validations by outcome",
    ["outcome"],
)

key_status_checks_total = Counter(
    "key_status_checks_total",
    "Non-consuming status checks",
    ["found"],
)

keys_created_total = Counter(
    "keys_created_total",
    "Total keys created",
)

keys_revoked_total = Counter(
    "keys_revoked_total",
    "Total keys revoked",
)

keys_expired_total = Counter(
    "keys_expired_total",
    "Keys transitioned to expired",
    ["trigger"],
)

# Client agent metrics
degraded_validations_total = Counter(
    "degraded_validations_total",
    "Client validations answered from the local mirror",
    ["operation"],
)

# Error metrics
errors_total = Counter(
    "errors_total",
    "Total errors",
    ["error_type", "endpoint"],
)
