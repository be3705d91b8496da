"""Configuration Management Integration Tests

These tests verify configuration loading, merging, validation and export.
"""
import json
import os
from pathlib import Path

import pytest

from mdarticle.lib.config_loader import ConfigError, ConfigLoader
from mdarticle.models.config import DEFAULT_CONFIG, ConfigKey
from mdarticle.services.validation_service import ValidationService


class TestConfigManagementIntegration:
    """Test configuration management integration."""

    @pytest.fixture()
    def config_loader(self, monkeypatch) -> ConfigLoader:
        """Config loader with a clean environment."""
        for key in list(os.environ):
            if key.startswith("MDARTICLE_"):
                monkeypatch.delenv(key)
        return ConfigLoader()

    @pytest.fixture()
    def sample_config_file(self, tmp_path) -> Path:
        """Sample configuration file for testing."""
        config_content = """
# Content store
CONTENT_DIR=articles
CONTENT_EXTENSION=".markdown"

# Article structure
ARTICLE_SECTION_COUNT=7
article.conclusion_heading='Wrapping Up'

not a setting
"""
        config_file = tmp_path / "mdarticle.env"
        config_file.write_text(config_content.strip(), encoding="utf-8")
        return config_file

    async def test_defaults(self, config_loader: ConfigLoader):
        config = await config_loader.load_config()

        assert config == DEFAULT_CONFIG
        assert config_loader.get_config_sources() == ["defaults", "environment"]

    async def test_load_env_file(self, config_loader: ConfigLoader, sample_config_file: Path):
        config = await config_loader.load_config(config_file=sample_config_file)

        assert config[ConfigKey.CONTENT_DIR] == "articles"
        assert config[ConfigKey.CONTENT_EXTENSION] == ".markdown"
        assert config[ConfigKey.ARTICLE_SECTION_COUNT] == 7
        assert config[ConfigKey.ARTICLE_CONCLUSION_HEADING] == "Wrapping Up"
        assert f"file:{sample_config_file}" in config_loader.get_config_sources()

    async def test_load_json_file(self, config_loader: ConfigLoader, tmp_path: Path):
        config_file = tmp_path / "mdarticle.json"
        config_file.write_text(json.dumps({"article.section_count": 5, "LOGGING_LEVEL": "DEBUG"}))

        config = await config_loader.load_config(config_file=config_file)

        assert config[ConfigKey.ARTICLE_SECTION_COUNT] == 5
        assert config[ConfigKey.LOGGING_LEVEL] == "DEBUG"

    async def test_environment_overrides_file(
        self, config_loader: ConfigLoader, sample_config_file: Path, monkeypatch
    ):
        monkeypatch.setenv("MDARTICLE_ARTICLE_SECTION_COUNT", "12")

        config = await config_loader.load_config(config_file=sample_config_file)

        assert config[ConfigKey.ARTICLE_SECTION_COUNT] == 12
        assert config[ConfigKey.CONTENT_DIR] == "articles"

    async def test_missing_file_falls_back_to_defaults(self, config_loader: ConfigLoader, tmp_path: Path):
        config = await config_loader.load_config(config_file=tmp_path / "missing.env")

        assert config[ConfigKey.CONTENT_DIR] == DEFAULT_CONFIG[ConfigKey.CONTENT_DIR]

    async def test_invalid_values_raise(self, config_loader: ConfigLoader, monkeypatch):
        monkeypatch.setenv("MDARTICLE_ARTICLE_SECTION_COUNT", "ten")
        monkeypatch.setenv("MDARTICLE_LOGGING_LEVEL", "LOUD")

        with pytest.raises(ConfigError) as exc_info:
            await config_loader.load_config()

        message = str(exc_info.value)
        assert "article.section_count" in message
        assert "logging.level" in message

    async def test_invalid_json_file(self, config_loader: ConfigLoader, tmp_path: Path):
        config_file = tmp_path / "broken.json"
        config_file.write_text("{not json")

        with pytest.raises(ConfigError):
            await config_loader.load_config(config_file=config_file)

    async def test_unknown_keys_are_ignored(self, config_loader: ConfigLoader, monkeypatch):
        monkeypatch.setenv("MDARTICLE_FEATURE_FLAG", "on")

        config = await config_loader.load_config()

        assert "feature.flag" not in config

    async def test_export_round_trip(self, config_loader: ConfigLoader, sample_config_file: Path, tmp_path: Path):
        await config_loader.load_config(config_file=sample_config_file)
        exported = tmp_path / "export" / "config.env"

        assert await config_loader.export_config_to_file(exported)
        assert "MDARTICLE_ARTICLE_SECTION_COUNT=7" in exported.read_text(encoding="utf-8")

        reloaded = await ConfigLoader().load_config(config_file=exported, use_environment=False)
        assert reloaded == config_loader.get_cached_config()

    async def test_export_without_config(self, config_loader: ConfigLoader, tmp_path: Path):
        assert await config_loader.export_config_to_file(tmp_path / "x.env") is False

    async def test_config_drives_validation(self, config_loader: ConfigLoader, tmp_path: Path, document_factory):
        config_file = tmp_path / "mdarticle.env"
        config_file.write_text("ARTICLE_SECTION_COUNT=3\nARTICLE_CONCLUSION_HEADING=Summary\n")
        config = await config_loader.load_config(config_file=config_file)

        validator = ValidationService.from_config(config)
        document = document_factory(sections=3).replace("## Conclusion", "## Summary")

        assert validator.validate_text(document).is_valid
