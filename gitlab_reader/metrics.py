"""Metrics for gitlab-reader."""

from prometheus_client import Counter, Histogram

DEFAULT_BUCKETS_EXTERNAL_API = (0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0)

gitlab_request = Counter(
    # Same naming convention as other external API clients
    # (<prefix>_external_api_<component>_requests_total)
    "gitlab_reader_external_api_gitlab_requests_total",
    "Total number of GitLab API requests",
    ["method", "verb"],
)

gitlab_request_duration = Histogram(
    "gitlab_reader_external_api_gitlab_request_duration_seconds",
    "GitLab API request duration in seconds",
    ["method", "verb"],
    buckets=DEFAULT_BUCKETS_EXTERNAL_API,
)
