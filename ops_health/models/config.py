from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from ops_health.utils.address import parse_address
from ops_health.utils.exceptions import AddressParseError


class ReadinessMode(str, Enum):
    """How the service answers /ready."""

    ALWAYS = "always"
    NEVER = "never"
    NONE = "none"  # no readiness concept, /ready answers 404
    HEALTHCHECKS = "healthchecks"  # derived from the configured checks


class CheckType(str, Enum):
    NOOP = "noop"
    DISK_SPACE = "disk_space"
    DIRECTORY = "directory"


class OwnerConfig(BaseModel):
    """A team or person responsible for the service"""

    name: str = Field(..., min_length=1)
    slack: str = Field(..., min_length=1, description="Slack handle or channel")


class LinkConfig(BaseModel):
    """A documentation or dashboard link"""

    description: str = Field(..., min_length=1)
    url: str = Field(..., min_length=1)


class CheckConfig(BaseModel):
    """A built-in checker to register"""

    type: CheckType
    name: str = Field(..., min_length=1, description="Metric-safe after sanitizing")
    path: Optional[str] = Field(
        default=None, description="Path checked by disk_space and directory"
    )
    min_free_gb: float = Field(1.0, ge=0.0)
    warn_free_gb: float = Field(5.0, ge=0.0)
    create: bool = Field(
        default=True, description="Create the directory if it is missing"
    )

    @model_validator(mode="after")
    def validate_check(self) -> "CheckConfig":
        if self.type == CheckType.DIRECTORY and not self.path:
            raise ValueError("directory checks require a path")
        if self.warn_free_gb < self.min_free_gb:
            raise ValueError("warn_free_gb must be >= min_free_gb")
        return self


class ServerSettings(BaseModel):
    """HTTP server and logging settings"""

    address: str = Field("0.0.0.0:3000", description="Bind address host:port")
    prefix: str = Field("", description="Path prefix for the ops endpoints")
    log_level: str = "INFO"
    json_logs: bool = True

    @field_validator("address")
    @classmethod
    def validate_address(cls, v: str) -> str:
        try:
            parse_address(v)
        except AddressParseError as e:
            raise ValueError(str(e)) from e
        return v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        level = v.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"unknown log level: {v}")
        return level

    @field_validator("prefix")
    @classmethod
    def validate_prefix(cls, v: str) -> str:
        if v and (not v.startswith("/") or v.endswith("/")):
            raise ValueError("prefix must start with '/' and not end with '/'")
        return v


class OpsConfig(BaseModel):
    """Top-level ops health configuration"""

    name: str = Field(..., min_length=1)
    description: str = ""
    revision: Optional[str] = Field(
        default=None, description="Version control ref of the running build"
    )
    readiness: ReadinessMode = ReadinessMode.HEALTHCHECKS
    owners: List[OwnerConfig] = Field(default_factory=list)
    links: List[LinkConfig] = Field(default_factory=list)
    checks: List[CheckConfig] = Field(default_factory=list)
    server: ServerSettings = Field(default_factory=ServerSettings)

    @model_validator(mode="after")
    def validate_checks_mode(self) -> "OpsConfig":
        if self.checks and self.readiness != ReadinessMode.HEALTHCHECKS:
            raise ValueError(
                f"checks are only used with readiness 'healthchecks', "
                f"got '{self.readiness.value}'"
            )
        return self
