"""Configuration loader implementation.

This module implements configuration loading from defaults, config files and
environment variables.
"""
import json
import logging
import os
from pathlib import Path
from typing import Any, Optional

from ..models.config import DEFAULT_CONFIG, coerce_config_value, is_known_key, validate_config_value

logger = logging.getLogger(__name__)


class ConfigError(ValueError):
    """Raised when configuration cannot be loaded or fails validation."""


class ConfigLoader:
    """Configuration loader supporting defaults, files and environment variables."""

    def __init__(self, env_prefix: str = "MDARTICLE_"):
        self._cached_config: Optional[dict[str, Any]] = None
        self._config_sources: list[str] = []

        # Environment variable prefix
        self.env_prefix = env_prefix

        logger.debug("Config loader initialized")

    async def load_config(
        self,
        config_file: Optional[Path] = None,
        use_environment: bool = True,
        use_defaults: bool = True,
    ) -> dict[str, Any]:
        """
        Load configuration, merging sources by priority.

        Priority: environment > config file > defaults

        Args:
            config_file: configuration file path
            use_environment: read MDARTICLE_* environment variables
            use_defaults: start from DEFAULT_CONFIG

        Returns:
            Dict[str, Any]: merged, typed configuration

        Raises:
            ConfigError: a value fails validation or the file is unreadable
        """
        config: dict[str, Any] = {}
        self._config_sources = []

        # 1. Defaults
        if use_defaults:
            config.update(DEFAULT_CONFIG)
            self._config_sources.append("defaults")

        # 2. Config file
        if config_file:
            file_config = await self.load_from_file(Path(config_file))
            config.update(file_config)
            self._config_sources.append(f"file:{config_file}")

        # 3. Environment (highest priority)
        if use_environment:
            env_config = await self.load_from_environment()
            config.update(env_config)
            self._config_sources.append("environment")

        validated_config = await self.validate_config(config)
        self._cached_config = validated_config

        logger.debug(f"Configuration loaded from: {', '.join(self._config_sources)}")
        return validated_config

    async def load_from_file(self, config_file: Path) -> dict[str, str]:
        """Load configuration from a .json or KEY=VALUE file."""
        config: dict[str, str] = {}

        if not config_file.exists():
            logger.warning(f"Config file does not exist: {config_file}")
            return config

        try:
            if config_file.suffix.lower() == ".json":
                with open(config_file, "r", encoding="utf-8") as f:
                    data = json.load(f)
                if not isinstance(data, dict):
                    raise ConfigError(f"Config file must contain a JSON object: {config_file}")
                for key, value in data.items():
                    config[self._normalize_key(key)] = str(value)
            else:
                with open(config_file, "r", encoding="utf-8") as f:
                    for line_num, line in enumerate(f, 1):
                        line = line.strip()

                        # Skip blank lines and comments
                        if not line or line.startswith("#"):
                            continue

                        if "=" not in line:
                            logger.warning(f"Invalid config line ({config_file}:{line_num}): {line}")
                            continue

                        key, value = line.split("=", 1)
                        value = value.strip()

                        # Strip quotes
                        if len(value) >= 2 and value[0] == value[-1] and value[0] in ("'", '"'):
                            value = value[1:-1]

                        config[self._normalize_key(key.strip())] = value

        except (OSError, json.JSONDecodeError) as e:
            logger.error(f"Failed to load config file ({config_file}): {e}")
            raise ConfigError(f"Failed to load config file {config_file}: {e}") from e

        logger.debug(f"Loaded {len(config)} settings from file: {config_file}")
        return config

    async def load_from_environment(self) -> dict[str, str]:
        """Load configuration from prefixed environment variables."""
        config = {}

        for env_key, env_value in os.environ.items():
            if env_key.startswith(self.env_prefix):
                config[self._normalize_key(env_key)] = env_value

        logger.debug(f"Loaded {len(config)} settings from environment")
        return config

    def _normalize_key(self, key: str) -> str:
        """
        Map file and environment key spellings to dotted config keys.

        ``MDARTICLE_CONTENT_DIR``, ``CONTENT_DIR`` and ``content.dir`` all
        become ``content.dir``; the first underscore separates the section.
        """
        if key.startswith(self.env_prefix):
            key = key[len(self.env_prefix):]

        if "." in key:
            return key.lower()

        section, _, name = key.lower().partition("_")
        return f"{section}.{name}" if name else section

    async def validate_config(self, config: dict[str, Any]) -> dict[str, Any]:
        """Coerce and validate configuration values."""
        validated_config = {}
        errors = []

        for key, value in config.items():
            if not is_known_key(key):
                logger.warning(f"Ignoring unknown config key: {key}")
                continue

            try:
                typed_value = coerce_config_value(key, value)
                validate_config_value(key, typed_value)
                validated_config[key] = typed_value
            except ValueError as e:
                errors.append(str(e))

        if errors:
            error_message = "Configuration validation failed:\n" + "\n".join(errors)
            logger.error(error_message)
            raise ConfigError(error_message)

        return validated_config

    def get_config_sources(self) -> list[str]:
        """Return the list of loaded configuration sources."""
        return self._config_sources.copy()

    def get_cached_config(self) -> Optional[dict[str, Any]]:
        """Return the last loaded configuration."""
        return self._cached_config.copy() if self._cached_config else None

    async def export_config_to_file(self, output_file: Path, format: str = "env") -> bool:
        """Export the cached configuration to a file."""
        if not self._cached_config:
            logger.warning("No cached configuration to export")
            return False

        output_file.parent.mkdir(parents=True, exist_ok=True)

        if format.lower() == "json":
            with open(output_file, "w", encoding="utf-8") as f:
                json.dump(self._cached_config, f, indent=2, ensure_ascii=False)
        else:
            with open(output_file, "w", encoding="utf-8") as f:
                f.write("# mdarticle configuration\n\n")
                for key, value in sorted(self._cached_config.items()):
                    f.write(f"{self._config_to_env_key(key)}={value}\n")

        logger.info(f"Configuration exported to: {output_file}")
        return True

    def _config_to_env_key(self, config_key: str) -> str:
        """Convert a dotted config key to its environment variable name."""
        env_key = config_key.upper().replace(".", "_")
        return f"{self.env_prefix}{env_key}"
