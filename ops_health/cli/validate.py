"""Validate command: load a config file without serving anything."""

from pathlib import Path

import typer

from ops_health.cli.utils import display, handle_errors
from ops_health.services.config_manager import ConfigManager
from ops_health.utils.exceptions import ConfigValidationError


@handle_errors
def validate_command(
    config_path: Path = typer.Argument(..., help="Config file to validate"),
):
    """Check that a config file parses and passes validation."""
    try:
        config = ConfigManager(config_path=str(config_path)).load_config()
    except (FileNotFoundError, ConfigValidationError) as e:
        display(f"Validation failed: {e}", "error")
        raise typer.Exit(code=1)

    display(
        f"Configuration is valid: {config.name} "
        f"(readiness={config.readiness.value}, checks={len(config.checks)})",
        "success",
    )
