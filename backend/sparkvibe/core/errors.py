"""
Error taxonomy shared by the domain services.

- InvalidArgument:    rejected before any mutation (HTTP 400)
- NotFound:           unknown user / reference (HTTP 404)
- ServiceUnavailable: persistence unreachable; surfaced, never retried here (HTTP 503)
- UpstreamDegraded:   LLM or push service failed; recovered inside the domain
"""
from __future__ import annotations

__all__ = [
    "SparkVibeError",
    "InvalidArgument",
    "NotFound",
    "ServiceUnavailable",
    "UpstreamDegraded",
]


class SparkVibeError(Exception):
    code = "error"
    status_code = 500


class InvalidArgument(SparkVibeError):
    code = "invalid_argument"
    status_code = 400


class NotFound(SparkVibeError):
    code = "not_found"
    status_code = 404


class ServiceUnavailable(SparkVibeError):
    code = "service_unavailable"
    status_code = 503


class UpstreamDegraded(SparkVibeError):
    code = "upstream_degraded"
    status_code = 502
