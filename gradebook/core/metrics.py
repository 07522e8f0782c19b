"""Prometheus metric inventory.

Every metric the service exports is declared here; the owning module imports
it and increments or observes at the point of action. Counters only go up,
so tests assert on deltas.
"""

from __future__ import annotations

from prometheus_client import Counter, Gauge, Histogram

# ---------------------------------------------------------------------------
# HTTP metrics (MetricsMiddleware)
# ---------------------------------------------------------------------------

REQUEST_COUNT = Counter(
    "http_requests_total",
    "Total HTTP requests by method, endpoint, and status code",
    ["method", "endpoint", "status_code"],
)

REQUEST_DURATION = Histogram(
    "http_request_duration_seconds",
    "HTTP request duration in seconds",
    ["method", "endpoint"],
    # Gradebook queries scan a whole course, so the tail runs longer
    # than plain CRUD.
    buckets=[0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0],
)

ACTIVE_REQUESTS = Gauge(
    "http_active_requests",
    "Number of HTTP requests currently being processed",
)

# ---------------------------------------------------------------------------
# Domain metrics
# ---------------------------------------------------------------------------

SUBMISSIONS_TOTAL = Counter(
    "submissions_total",
    "Accepted learner submissions",
    ["kind"],  # created|resubmitted
)

AUTO_GRADED_TOTAL = Counter(
    "auto_graded_submissions_total",
    "Test/quiz submissions scored by the auto-grader",
    ["outcome"],  # graded|needs_review
)

GRADING_TRANSITIONS = Counter(
    "grading_transitions_total",
    "Teacher actions applied to submissions",
    ["to_status"],  # GRADED|RETURNED
)

VALIDATION_REJECTIONS = Counter(
    "validation_rejections_total",
    "Inputs rejected with ValidationError",
    ["operation"],  # submit|submit_test|grade|return|create_assignment
)

WRITE_CONFLICTS = Counter(
    "submission_write_conflicts_total",
    "Submission writes rejected by the version check",
)
