"""Helpers shared by the CLI commands."""

import functools
from pathlib import Path
from typing import Callable, Optional, TypeVar

import structlog
import typer

from ops_health.health.checks import Health
from ops_health.health.status import HealthResult
from ops_health.models.config import OpsConfig
from ops_health.services.config_manager import ConfigManager
from ops_health.utils.exceptions import ConfigValidationError, OpsError

logger = structlog.get_logger()

F = TypeVar("F", bound=Callable)

DEFAULT_CONFIG_PATH = Path("config/ops.yaml")

# Exit codes of the check command
EXIT_READY = 0
EXIT_UNHEALTHY = 1
EXIT_NO_CHECKS = 2

_COLORS = {
    "success": typer.colors.GREEN,
    "info": typer.colors.CYAN,
    "warning": typer.colors.YELLOW,
    "error": typer.colors.RED,
}


def display(message: str, kind: str = "info") -> None:
    """Print ``message`` colored by kind (success, info, warning or error)."""
    typer.secho(message, fg=_COLORS[kind])


def load_config(config_path: Path) -> OpsConfig:
    """Load the ops config, exiting with code 1 when it is missing or invalid."""
    try:
        return ConfigManager(config_path=str(config_path)).load_config()
    except (FileNotFoundError, ConfigValidationError) as e:
        display(f"Configuration Error: {e}", "error")
        raise typer.Exit(code=1)


def exit_code_for(result: Optional[HealthResult]) -> int:
    """Map a check cycle onto the check command's exit code."""
    if result is None:
        return EXIT_NO_CHECKS
    if result.health is Health.UNHEALTHY:
        return EXIT_UNHEALTHY
    return EXIT_READY


def handle_errors(func: F) -> F:
    """Turn uncaught exceptions into a red message and exit code 1."""

    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except typer.Exit:
            raise
        except OpsError as e:
            logger.error("command_failed", kind=e.kind.value, error=str(e))
            display(f"Error ({e.kind.value}): {e}", "error")
            raise typer.Exit(code=1)
        except Exception as e:
            logger.exception("command_failed")
            display(f"Error: {e}", "error")
            raise typer.Exit(code=1)

    return wrapper  # type: ignore[return-value]
