from __future__ import annotations

from healthprobe.checks.results import CheckResult
from healthprobe.models import HealthCheck

SINGLE_UNHEALTHY_MESSAGE = "Service unhealthy!"


def format_unhealthy(check: HealthCheck, result: CheckResult) -> str:
    if result.error:
        return f"{check.url} is unhealthy ({result.error})"
    return f"{check.url} is unhealthy"
