from __future__ import annotations

import math
import re
from datetime import timedelta
from typing import Any
from urllib.parse import urlparse

from pydantic import BaseModel, ConfigDict, Field, StrictInt, field_serializer, field_validator

from healthprobe.checks.http_check import run_http
from healthprobe.checks.results import CheckResult

_UNIT_NS = {
    "ns": 1,
    "us": 1_000,
    "µs": 1_000,
    "μs": 1_000,
    "ms": 1_000_000,
    "s": 1_000_000_000,
    "m": 60 * 1_000_000_000,
    "h": 3600 * 1_000_000_000,
}
# int64 nanoseconds, the range JSON configs were written for
MAX_DURATION_NS = 2**63 - 1
_DURATION_PART = re.compile(r"(\d+\.?\d*|\.\d+)(ns|us|µs|μs|ms|s|m|h)")


def parse_duration(value: Any) -> timedelta:
    """
    Accepts a timedelta, an integer count of nanoseconds, or a duration
    string such as "2s", "1m30s" or "250ms". Negative values and values
    past the int64 nanosecond range are rejected.
    """
    if isinstance(value, timedelta):
        ns: int | float = duration_to_ns(value)
    elif isinstance(value, bool):
        raise ValueError("duration must be an integer or a duration string")
    elif isinstance(value, int):
        ns = value
    elif isinstance(value, str):
        ns = _parse_duration_string(value)
    else:
        raise ValueError("duration must be an integer or a duration string")

    if ns < 0:
        raise ValueError("duration must not be negative")
    if ns > MAX_DURATION_NS:
        raise ValueError("duration out of range")

    # timedelta stops at microseconds; round up so a nonzero timeout stays nonzero
    if isinstance(ns, int):
        us = -(-ns // 1000)
    else:
        us = math.ceil(ns / 1000)
    return timedelta(microseconds=us)


def _parse_duration_string(text: str) -> float:
    s = text.strip()
    if s in {"0", "+0", "-0"}:
        return 0
    sign = 1
    if s[:1] in {"+", "-"}:
        sign = -1 if s[0] == "-" else 1
        s = s[1:]
    if not s:
        raise ValueError(f"invalid duration {text!r}")

    total = 0.0
    pos = 0
    while pos < len(s):
        m = _DURATION_PART.match(s, pos)
        if m is None:
            raise ValueError(f"invalid duration {text!r}")
        total += float(m.group(1)) * _UNIT_NS[m.group(2)]
        pos = m.end()
    return sign * total


def duration_to_ns(td: timedelta) -> int:
    return td // timedelta(microseconds=1) * 1000


class HealthCheck(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore", populate_by_name=True)

    url: str = Field(..., alias="URL", min_length=1)
    response_timeout: timedelta = Field(default=timedelta(0), alias="ResponseTimeout")
    healthy_status_code: StrictInt = Field(..., alias="HealthyStatusCode", ge=100, le=599)

    @field_validator("url")
    @classmethod
    def _absolute_http_url(cls, v: str) -> str:
        parsed = urlparse(v)
        if parsed.scheme not in {"http", "https"} or not parsed.netloc:
            raise ValueError(f"not an absolute http(s) URL: {v!r}")
        return v

    @field_validator("response_timeout", mode="before")
    @classmethod
    def _parse_timeout(cls, v: Any) -> timedelta:
        return parse_duration(v)

    @field_serializer("response_timeout")
    def _timeout_as_ns(self, v: timedelta) -> int:
        return duration_to_ns(v)

    @property
    def timeout_seconds(self) -> float | None:
        # zero means no timeout
        if not self.response_timeout:
            return None
        return self.response_timeout.total_seconds()

    def do(self) -> CheckResult:
        return run_http(
            self.url,
            expected_status=self.healthy_status_code,
            timeout_s=self.timeout_seconds,
        )

    def to_config(self) -> dict[str, Any]:
        """JSON config form, with ResponseTimeout in nanoseconds."""
        return self.model_dump(by_alias=True)
