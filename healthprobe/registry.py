from __future__ import annotations

import json
from datetime import timedelta
from pathlib import Path
from typing import Any, Iterable

import yaml
from pydantic import ValidationError

from healthprobe.errors import ConfigDecodeError, ConfigReadError
from healthprobe.models import HealthCheck

DEFAULT_URL = "http://localhost:8080/healthz"

STATIC_CHECKS: tuple[HealthCheck, ...] = (
    HealthCheck(
        url="http://localhost:8080/healthz",
        response_timeout=timedelta(seconds=2),
        healthy_status_code=200,
    ),
    HealthCheck(
        url="http://localhost:8080/healthz2",
        response_timeout=timedelta(seconds=2),
        healthy_status_code=301,
    ),
    HealthCheck(
        url="http://localhost:8080/healthz3",
        response_timeout=timedelta(seconds=10),
        healthy_status_code=200,
    ),
)

_YAML_SUFFIXES = {".yml", ".yaml"}


def _decode(path: Path, raw: bytes) -> Any:
    try:
        if path.suffix.lower() in _YAML_SUFFIXES:
            return yaml.safe_load(raw)
        return json.loads(raw)
    except (ValueError, yaml.YAMLError) as exc:
        raise ConfigDecodeError(f"Malformed checks file {path}: {exc}") from exc


def load_checks(path: str | Path) -> list[HealthCheck]:
    path = Path(path)
    try:
        raw = path.read_bytes()
    except OSError as exc:
        raise ConfigReadError(f"Cannot read checks file {path}: {exc}") from exc

    data = _decode(path, raw)
    if not isinstance(data, list):
        raise ConfigDecodeError(
            f"Checks file {path} must contain a list of checks, got {type(data).__name__}"
        )

    checks: list[HealthCheck] = []
    for i, item in enumerate(data):
        if not isinstance(item, dict):
            raise ConfigDecodeError(f"Check #{i} in {path} is not an object")
        try:
            checks.append(HealthCheck.model_validate(item))
        except ValidationError as exc:
            raise ConfigDecodeError(f"Invalid check #{i} in {path}: {exc}") from exc
    return checks


def dump_checks(checks: Iterable[HealthCheck]) -> str:
    return json.dumps([c.to_config() for c in checks], indent=2)


def single_check(
    url: str = DEFAULT_URL,
    healthy_status_code: int = 200,
    response_timeout: Any = timedelta(seconds=2),
) -> HealthCheck:
    try:
        return HealthCheck(
            url=url,
            healthy_status_code=healthy_status_code,
            response_timeout=response_timeout,
        )
    except ValidationError as exc:
        raise ConfigDecodeError(f"Invalid check for {url}: {exc}") from exc
