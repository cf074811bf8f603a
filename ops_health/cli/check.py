"""Check command: run one health check cycle from the command line.

Exit codes:
- 0: ready (healthy or degraded)
- 1: not ready (unhealthy)
- 2: the configured status has no checks
"""

import asyncio
import json
from pathlib import Path

import typer

from ops_health.cli.utils import (
    DEFAULT_CONFIG_PATH,
    display,
    exit_code_for,
    handle_errors,
    load_config,
)
from ops_health.services.status_factory import build_status


@handle_errors
def check_command(
    config_path: Path = typer.Option(
        DEFAULT_CONFIG_PATH, "--config", "-c", help="Path to ops config YAML"
    ),
):
    """Run all configured checks once and print the result as JSON."""
    config = load_config(config_path)
    result = asyncio.run(build_status(config).check())

    if result is None:
        display("No health checks configured", "warning")
    else:
        typer.echo(json.dumps(result.to_dict(), indent=2))

    code = exit_code_for(result)
    if code:
        raise typer.Exit(code=code)
