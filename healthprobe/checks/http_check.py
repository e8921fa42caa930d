from __future__ import annotations

import time
import requests
from urllib3.util import Timeout

from healthprobe.checks.results import CheckResult
from healthprobe.errors import NetworkError


def _network_error(exc: requests.RequestException, timeout_s: float | None) -> NetworkError:
    if isinstance(exc, requests.Timeout):
        err = NetworkError(f"timed out after {timeout_s}s: {exc}")
    elif isinstance(exc, requests.ConnectionError):
        err = NetworkError(f"connection error: {exc.__class__.__name__}: {exc}")
    else:
        err = NetworkError(f"request failed: {exc.__class__.__name__}: {exc}")
    err.__cause__ = exc
    return err


def _check_deadline(deadline: float | None) -> None:
    if deadline is not None and time.perf_counter() > deadline:
        raise requests.Timeout("response not complete before deadline")


def run_http(url: str, expected_status: int, timeout_s: float | None = None) -> CheckResult:
    # 0 and None both mean no timeout
    timeout = timeout_s or None
    start = time.perf_counter()
    # socket timeouts apply per read, the deadline covers the whole exchange
    deadline = start + timeout if timeout else None
    try:
        # The comparison must see the first response, so redirects stay unfollowed.
        r = requests.get(
            url,
            timeout=Timeout(total=timeout) if timeout else None,
            allow_redirects=False,
            stream=True,
        )
        try:
            _check_deadline(deadline)
            for _ in r.iter_content(chunk_size=8192):
                _check_deadline(deadline)
            _check_deadline(deadline)
        finally:
            r.close()
    except requests.RequestException as e:
        latency_ms = int((time.perf_counter() - start) * 1000)
        err = _network_error(e, timeout)
        return CheckResult(ok=False, latency_ms=latency_ms, error=str(err), cause=err)

    latency_ms = int((time.perf_counter() - start) * 1000)
    if r.status_code != expected_status:
        return CheckResult(
            ok=False,
            latency_ms=latency_ms,
            status_code=r.status_code,
            error=f"expected HTTP {expected_status}, got {r.status_code}",
        )
    return CheckResult(ok=True, latency_ms=latency_ms, status_code=r.status_code)
