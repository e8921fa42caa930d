from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import NoReturn, Optional

import typer

from healthprobe.config import settings
from healthprobe.errors import ConfigError
from healthprobe.formatting import SINGLE_UNHEALTHY_MESSAGE
from healthprobe.models import HealthCheck
from healthprobe.registry import DEFAULT_URL, STATIC_CHECKS, load_checks, single_check
from healthprobe.runner import run_all, run_check, unhealthy
from healthprobe.testserver import serve as serve_fixture

logger = logging.getLogger(__name__)

app = typer.Typer(name="healthprobe", help="Probe HTTP endpoints for an expected status code")


@app.callback()
def _configure_logging(
    log_level: str = typer.Option(settings.HEALTHCHECK_LOG_LEVEL, "--log-level", help="Logging level"),
) -> None:
    level = logging.getLevelName(log_level.upper())
    if not isinstance(level, int):
        raise typer.BadParameter(f"unknown log level {log_level!r}", param_hint="--log-level")
    logging.basicConfig(
        level=level,
        stream=sys.stderr,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        force=True,
    )


def _fail_config(exc: ConfigError) -> NoReturn:
    typer.echo(f"healthprobe: {exc}", err=True)
    raise typer.Exit(code=1)


@app.command()
def single(
    url: str = typer.Argument(DEFAULT_URL, help="Endpoint to probe"),
    expect: int = typer.Option(200, "--expect", "-e", help="Healthy status code"),
    timeout: str = typer.Option("2s", "--timeout", "-t", help="Response timeout, e.g. 2s; 0 disables"),
) -> None:
    """Probe one endpoint; exit 1 when it is unhealthy."""
    try:
        check = single_check(url, healthy_status_code=expect, response_timeout=timeout)
    except ConfigError as exc:
        _fail_config(exc)

    res = run_check(check)
    if not res.ok:
        typer.echo(SINGLE_UNHEALTHY_MESSAGE)
        raise typer.Exit(code=1)


@app.command()
def run(
    config: Optional[Path] = typer.Option(None, "--config", "-c", help="JSON (or YAML) checks file"),
    static: bool = typer.Option(False, "--static", help="Use the built-in check list"),
    strict: bool = typer.Option(
        settings.HEALTHCHECK_STRICT, "--strict/--no-strict", help="Exit 1 if any check is unhealthy"
    ),
) -> None:
    """
    Probe every configured endpoint in order and print one line per unhealthy
    endpoint. Exits 0 regardless of check outcomes unless --strict is set.
    """
    checks: list[HealthCheck]
    if static:
        checks = list(STATIC_CHECKS)
    else:
        path = config or Path(settings.HEALTHCHECK_CONFIG_PATH)
        try:
            checks = load_checks(path)
        except ConfigError as exc:
            _fail_config(exc)
        logger.info("Loaded %d checks from %s", len(checks), path)

    failed = unhealthy(run_all(checks))
    if failed and strict:
        raise typer.Exit(code=1)


@app.command()
def serve(
    host: str = typer.Option("0.0.0.0", "--host"),
    port: int = typer.Option(settings.HEALTHCHECK_SERVER_PORT, "--port", "-p"),
    slow_delay: float = typer.Option(3.0, "--slow-delay", help="Seconds /healthz3 waits before answering"),
) -> None:
    """Run the three-endpoint fixture server."""
    serve_fixture(host=host, port=port, slow_delay_s=slow_delay)


def cli() -> None:
    app()


if __name__ == "__main__":
    cli()
