"""Serve command for the health server.

Loads the configuration, builds the status and serves the ops endpoints.
"""

from pathlib import Path
from typing import Optional

import typer

from ops_health.cli.utils import (
    DEFAULT_CONFIG_PATH,
    display,
    handle_errors,
    load_config,
)
from ops_health.observability.logging import configure_logging
from ops_health.services.status_factory import build_status


@handle_errors
def serve_command(
    config_path: Path = typer.Option(
        DEFAULT_CONFIG_PATH, "--config", "-c", help="Path to ops config YAML"
    ),
    address: Optional[str] = typer.Option(
        None, "--address", "-a", help="Bind address host:port (overrides config)"
    ),
):
    """Start the health server.

    Serves /about, /health, /ready and /metrics for the configured status.
    """
    from ops_health.health.server import run_health_server

    config = load_config(config_path)
    configure_logging(
        level=config.server.log_level, json_output=config.server.json_logs
    )
    status = build_status(config)
    bind = address or config.server.address

    display(f"Serving http://{bind}{config.server.prefix}")
    run_health_server(
        status,
        address=bind,
        prefix=config.server.prefix,
        log_level=config.server.log_level.lower(),
    )
