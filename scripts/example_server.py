#!/usr/bin/env python3
"""
example_server.py - An example app with an ops server

Registers a single noop checker and serves the ops endpoints on port 3000:

    curl http://localhost:3000/health
    curl http://localhost:3000/ready
    curl http://localhost:3000/about
    curl http://localhost:3000/metrics
"""

from ops_health import CheckResponse, Checker, NamedChecker, StatusBuilder
from ops_health import run_health_server
from ops_health.observability import configure_logging

APP_NAME = "example"
APP_DESC = "An example app with an ops server"
APP_SHA = "12561012a04f945852cf0171da516a9ffc709e76"

HOST = "0.0.0.0:3000"


class NoopChecker(Checker):
    def check(self) -> CheckResponse:
        return CheckResponse.healthy("noop is always healthy")


def main() -> None:
    configure_logging(level="INFO", json_output=False)

    healthchecks = (
        StatusBuilder.healthchecks(APP_NAME, APP_DESC)
        .checker(NamedChecker("noop", NoopChecker()))
        .revision(APP_SHA)
    )

    print(f"Serving http://{HOST}")
    run_health_server(healthchecks, address=HOST)


if __name__ == "__main__":
    main()
