"""Ops health CLI package.

Usage:
    python -m ops_health.cli serve --config config/ops.yaml
    python -m ops_health.cli check --config config/ops.yaml
    python -m ops_health.cli validate config/ops.yaml
"""

import typer

from ops_health.cli.check import check_command
from ops_health.cli.serve import serve_command
from ops_health.cli.validate import validate_command

app = typer.Typer(help="Ops health: health, readiness and metrics endpoints")

app.command(name="serve")(serve_command)
app.command(name="check")(check_command)
app.command(name="validate")(validate_command)

__all__ = [
    "app",
    "serve_command",
    "check_command",
    "validate_command",
]
