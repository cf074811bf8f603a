import os
from pathlib import Path
from string import Template
from typing import Optional

import structlog
import yaml
from dotenv import load_dotenv
from pydantic import ValidationError

from ops_health.models.config import OpsConfig
from ops_health.utils.exceptions import ConfigValidationError

logger = structlog.get_logger()


class ConfigManager:
    """Loads and validates the ops health configuration file"""

    def __init__(self, config_path: str = "config/ops.yaml"):
        self.config_path = Path(config_path)
        self.env_loaded = False
        self._config: Optional[OpsConfig] = None

    def load_config(self) -> OpsConfig:
        """Load and validate configuration

        Raises:
            FileNotFoundError: If the config file does not exist
            ConfigValidationError: If the file cannot be read, parsed or validated
        """
        if self._config:
            return self._config

        # 1. Load environment
        if not self.env_loaded:  # pragma: no cover
            load_dotenv()
            self.env_loaded = True

        # 2. Check file existence
        if not self.config_path.exists():
            raise FileNotFoundError(f"Configuration file not found: {self.config_path}")

        # 3. Read YAML
        try:
            raw_content = self.config_path.read_text()
        except OSError as e:
            raise ConfigValidationError(f"Failed to read config file: {e}") from e

        # 4. Substitute env vars (${VAR} syntax, unknown names left as-is)
        try:
            substituted_content = Template(raw_content).safe_substitute(os.environ)
            config_data = yaml.safe_load(substituted_content)
        except yaml.YAMLError as e:
            raise ConfigValidationError(f"Failed to parse YAML: {e}") from e

        if not isinstance(config_data, dict):
            raise ConfigValidationError(
                f"Configuration must be a mapping, got {type(config_data).__name__}"
            )

        # 5. Validate with Pydantic
        try:
            self._config = OpsConfig(**config_data)
        except ValidationError as e:
            raise ConfigValidationError(f"Invalid configuration: {e}") from e

        logger.info(
            "config_loaded",
            path=str(self.config_path),
            readiness=self._config.readiness.value,
            checks=len(self._config.checks),
        )
        return self._config
