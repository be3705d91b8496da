"""Config data model.

This module defines the configuration keys, default values and value validation.
"""
from typing import Any

# Default configuration values
DEFAULT_CONFIG: dict[str, Any] = {
    "content.dir": "content",  # Article directory
    "content.extension": ".md",  # Article file extension
    "content.encoding": "utf-8",  # Article file encoding
    "article.section_count": 10,  # Numbered sections expected in the body
    "article.section_heading_level": 2,  # Heading level of numbered sections
    "article.introduction_heading": "Introduction",
    "article.conclusion_heading": "Conclusion",
    "article.words_per_minute": 200,  # Reading time estimate
    "logging.level": "WARNING",
    "logging.format": "%(asctime)s [%(levelname)s] %(name)s: %(message)s",
}


class ConfigKey:
    """Configuration key constants."""

    # Content store settings
    CONTENT_DIR = "content.dir"
    CONTENT_EXTENSION = "content.extension"
    CONTENT_ENCODING = "content.encoding"

    # Article structure settings
    ARTICLE_SECTION_COUNT = "article.section_count"
    ARTICLE_SECTION_HEADING_LEVEL = "article.section_heading_level"
    ARTICLE_INTRODUCTION_HEADING = "article.introduction_heading"
    ARTICLE_CONCLUSION_HEADING = "article.conclusion_heading"
    ARTICLE_WORDS_PER_MINUTE = "article.words_per_minute"

    # Logging settings
    LOGGING_LEVEL = "logging.level"
    LOGGING_FORMAT = "logging.format"


INT_KEYS = {
    ConfigKey.ARTICLE_SECTION_COUNT,
    ConfigKey.ARTICLE_SECTION_HEADING_LEVEL,
    ConfigKey.ARTICLE_WORDS_PER_MINUTE,
}

VALID_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


def get_default_value(key: str) -> Any:
    """Get default value for configuration key."""
    return DEFAULT_CONFIG.get(key)


def is_known_key(key: str) -> bool:
    """Check if configuration key is defined."""
    return key in DEFAULT_CONFIG


def coerce_config_value(key: str, value: Any) -> Any:
    """Convert a raw (string) configuration value to the key's type."""
    if key in INT_KEYS:
        try:
            return int(str(value).strip())
        except ValueError as e:
            raise ValueError(f"{key} must be an integer, got {value!r}") from e

    if isinstance(value, str):
        return value.strip() if key != ConfigKey.LOGGING_FORMAT else value

    return value


def validate_config_value(key: str, value: Any) -> None:
    """Validate configuration value for specific key."""
    if key == ConfigKey.CONTENT_DIR:
        if not isinstance(value, str) or not value.strip():
            raise ValueError("content.dir must not be empty")

    elif key == ConfigKey.CONTENT_EXTENSION:
        if not isinstance(value, str) or not value.startswith("."):
            raise ValueError("content.extension must start with '.'")

    elif key == ConfigKey.CONTENT_ENCODING:
        if not isinstance(value, str) or not value.strip():
            raise ValueError("content.encoding must not be empty")

    elif key == ConfigKey.ARTICLE_SECTION_COUNT:
        if not isinstance(value, int) or value < 0:
            raise ValueError("article.section_count must be a non-negative integer")
        if value > 100:
            raise ValueError("article.section_count must not exceed 100")

    elif key == ConfigKey.ARTICLE_SECTION_HEADING_LEVEL:
        if not isinstance(value, int) or not 1 <= value <= 6:
            raise ValueError("article.section_heading_level must be between 1 and 6")

    elif key in (ConfigKey.ARTICLE_INTRODUCTION_HEADING, ConfigKey.ARTICLE_CONCLUSION_HEADING):
        if not isinstance(value, str) or not value.strip():
            raise ValueError(f"{key} must not be empty")

    elif key == ConfigKey.ARTICLE_WORDS_PER_MINUTE:
        if not isinstance(value, int) or value <= 0:
            raise ValueError("article.words_per_minute must be a positive integer")

    elif key == ConfigKey.LOGGING_LEVEL:
        if not isinstance(value, str) or value.upper() not in VALID_LOG_LEVELS:
            raise ValueError(f"logging.level must be one of: {sorted(VALID_LOG_LEVELS)}")
