"""Application metrics (prometheus_client).

Every metric the service exports is declared here; other modules import
the one they need and increment it at the point of action.  Counters only
go up, so tests assert on deltas against the default registry.
"""

from __future__ import annotations

from prometheus_client import Counter, Gauge, Histogram

# --- HTTP (fed by MetricsMiddleware) ---

REQUEST_COUNT = Counter(
    "http_requests_total",
    "Total HTTP requests by method, endpoint, and status code",
    ["method", "endpoint", "status_code"],
)

REQUEST_DURATION = Histogram(
    "http_request_duration_seconds",
    "HTTP request duration in seconds",
    ["method", "endpoint"],
    buckets=[0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0],
)

ACTIVE_REQUESTS = Gauge(
    "http_active_requests",
    "Number of HTTP requests currently being processed",
)

# --- Domain ---

ENROLLMENTS = Counter(
    "enrollments_total",
    "Enrollment attempts by outcome",
    ["result"],  # created|already_enrolled|course_not_found
)

TOPIC_COMPLETIONS = Counter(
    "topic_completions_total",
    "Topic completion requests by outcome",
    ["result"],  # created|already_completed
)

COURSES_COMPLETED = Counter(
    "courses_completed_total",
    "Enrollments that reached 100% progress",
)

AUTHORIZATION_DENIALS = Counter(
    "authorization_denials_total",
    "Mutations rejected by the ownership policy",
    ["resource"],  # course|topic
)
