"""Shared CLI state and helpers."""
import asyncio
import logging
from pathlib import Path
from typing import Any, Optional

from ..lib.config_loader import ConfigLoader
from ..models.config import ConfigKey
from ..repositories.article_repository import ArticleRepository

logger = logging.getLogger(__name__)

# Global options set by the main callback
global_config: dict[str, Any] = {
    "config_file": None,
    "log_level": None,
    "content_dir": None,
}


def load_settings() -> dict[str, Any]:
    """Load configuration honouring the global --config-file option."""
    config_file: Optional[Path] = global_config.get("config_file")
    config = asyncio.run(ConfigLoader().load_config(config_file=config_file))

    # --content-dir beats every other source
    if global_config.get("content_dir"):
        config[ConfigKey.CONTENT_DIR] = str(global_config["content_dir"])

    logging.basicConfig(
        level=(global_config.get("log_level") or config[ConfigKey.LOGGING_LEVEL]).upper(),
        format=config[ConfigKey.LOGGING_FORMAT],
    )

    return config


def build_repository(config: dict[str, Any]) -> ArticleRepository:
    """Create the article repository described by the configuration."""
    return ArticleRepository(
        content_dir=config[ConfigKey.CONTENT_DIR],
        extension=config[ConfigKey.CONTENT_EXTENSION],
        encoding=config[ConfigKey.CONTENT_ENCODING],
    )
