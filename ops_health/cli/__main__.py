"""CLI entry point.

Allows running the CLI as a module: python -m ops_health.cli
"""

from ops_health.cli import app

if __name__ == "__main__":
    app()
