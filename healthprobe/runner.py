from __future__ import annotations

import logging
import sys
from typing import Iterable, TextIO

from healthprobe.checks.results import CheckResult
from healthprobe.formatting import format_unhealthy
from healthprobe.models import HealthCheck

logger = logging.getLogger(__name__)

Outcome = tuple[HealthCheck, CheckResult]


def run_check(check: HealthCheck) -> CheckResult:
    res = check.do()
    if res.ok:
        logger.debug(
            "%s healthy: HTTP %s in %sms", check.url, res.status_code, res.latency_ms
        )
    else:
        logger.warning("%s unhealthy after %sms: %s", check.url, res.latency_ms, res.error)
    return res


def run_all(checks: Iterable[HealthCheck], out: TextIO | None = None) -> list[Outcome]:
    """
    Evaluate checks one at a time, in order, writing one line to `out`
    (stdout by default) for every unhealthy check.
    """
    out = out or sys.stdout
    outcomes: list[Outcome] = []
    for check in checks:
        res = run_check(check)
        if not res.ok:
            print(format_unhealthy(check, res), file=out)
        outcomes.append((check, res))
    return outcomes


def unhealthy(outcomes: Iterable[Outcome]) -> list[Outcome]:
    return [(c, r) for c, r in outcomes if not r.ok]
