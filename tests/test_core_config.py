"""
Unit tests for core configuration - Imperative style.

Tests configuration loading, validation, and defaults.
"""

import os
from pathlib import Path

import pytest
import yaml
from pydantic import ValidationError

from fontica.core.config import (
    DEFAULT_FONT_EXTENSIONS,
    AppConfig,
    CatalogConfig,
    ClientConfig,
    ServerConfig,
    load_config_from_yaml,
)
from fontica.core.exceptions import (
    ConfigFileNotFoundError,
    ConfigLoadError,
    ConfigurationError,
    EmptyConfigFileError,
    InvalidYamlError,
)


@pytest.fixture(autouse=True)
def isolated_env(tmp_path, monkeypatch):
    """Run every test away from any .env file and with a clean environment."""
    monkeypatch.chdir(tmp_path)
    for prefix in ("APP_", "CATALOG_", "CLIENT_", "SERVER_"):
        for key in list(os.environ):
            if key.startswith(prefix):
                monkeypatch.delenv(key)


class TestCatalogConfig:
    """Test CatalogConfig validation."""

    def test_defaults(self):
        """Test catalog configuration defaults."""
        config = CatalogConfig()

        assert config.fonts_dir == Path("./public/fonts")
        assert config.database_path is None
        assert config.table_name == "fonts"
        assert config.resource_base_url == "/fonts"
        assert config.font_extensions == DEFAULT_FONT_EXTENSIONS
        assert config.default_page_size == 20
        assert config.max_page_size == 100

    def test_extensions_are_normalized(self):
        """Test extensions gain a leading dot and are lower-cased."""
        config = CatalogConfig(font_extensions=["TTF", ".OTF", " woff2 ", ""])

        assert config.font_extensions == [".ttf", ".otf", ".woff2"]

    def test_empty_extensions_rejected(self):
        with pytest.raises(ValidationError):
            CatalogConfig(font_extensions=[" "])

    def test_invalid_table_name(self):
        """Test that table names must be plain identifiers."""
        with pytest.raises(ValidationError):
            CatalogConfig(table_name="fonts; DROP TABLE fonts")

    def test_page_sizes_must_be_positive(self):
        with pytest.raises(ValidationError):
            CatalogConfig(default_page_size=0)

    def test_default_page_size_cannot_exceed_maximum(self):
        with pytest.raises(ValidationError):
            CatalogConfig(default_page_size=50, max_page_size=10)


class TestClientConfig:
    """Test ClientConfig validation."""

    def test_defaults(self):
        config = ClientConfig()

        assert config.max_concurrent_loads == 4
        assert config.fetch_timeout_seconds == 30.0
        assert config.reference_size_px == 16
        assert config.fallback_family == "sans-serif"
        assert config.fallback_font_path is None

    def test_validation(self):
        """Test that loads and timeouts must be positive."""
        with pytest.raises(ValidationError):
            ClientConfig(max_concurrent_loads=0)

        with pytest.raises(ValidationError):
            ClientConfig(fetch_timeout_seconds=0)


class TestServerConfig:
    def test_defaults(self):
        config = ServerConfig()

        assert config.host == "127.0.0.1"
        assert config.port == 3000
        assert config.cors_origin == "*"

    def test_port_range(self):
        with pytest.raises(ValidationError):
            ServerConfig(port=70000)


class TestAppConfig:
    """Test AppConfig loading."""

    def test_defaults(self):
        config = AppConfig()

        assert config.log_level == "INFO"
        assert isinstance(config.catalog, CatalogConfig)
        assert isinstance(config.client, ClientConfig)
        assert isinstance(config.server, ServerConfig)

    def test_log_level_is_upper_cased(self):
        assert AppConfig(log_level="debug").log_level == "DEBUG"

    def test_unknown_log_level(self):
        with pytest.raises(ValidationError):
            AppConfig(log_level="chatty")

    def test_environment_variables(self, monkeypatch):
        """Test nested sections read their own environment prefixes."""
        monkeypatch.setenv("APP_LOG_LEVEL", "warning")
        monkeypatch.setenv("CATALOG_FONTS_DIR", "/srv/fonts")
        monkeypatch.setenv("CATALOG_DEFAULT_PAGE_SIZE", "12")
        monkeypatch.setenv("CLIENT_MAX_CONCURRENT_LOADS", "8")
        monkeypatch.setenv("SERVER_PORT", "8080")

        config = AppConfig.load_from_env()

        assert config.log_level == "WARNING"
        assert config.catalog.fonts_dir == Path("/srv/fonts")
        assert config.catalog.default_page_size == 12
        assert config.client.max_concurrent_loads == 8
        assert config.server.port == 8080

    def test_env_file(self, tmp_path):
        env_file = tmp_path / "custom.env"
        env_file.write_text("APP_LOG_LEVEL=ERROR\n")

        assert AppConfig.load_from_env(env_file).log_level == "ERROR"

    def test_missing_env_file_falls_back_to_defaults(self, tmp_path):
        assert AppConfig.load_from_env(tmp_path / "missing.env").log_level == "INFO"

    def test_load_with_overrides(self):
        config = AppConfig.load_with_overrides(log_level="DEBUG", unknown="ignored")

        assert config.log_level == "DEBUG"
        assert not hasattr(config, "unknown")

    def test_none_overrides_are_skipped(self):
        assert AppConfig.load_with_overrides(log_level=None).log_level == "INFO"


class TestLoadConfigFromYaml:
    """Test YAML configuration loading."""

    def test_load_yaml(self, tmp_path):
        config_path = tmp_path / "config.yaml"
        config_path.write_text(
            yaml.safe_dump(
                {
                    "log_level": "debug",
                    "catalog": {"fonts_dir": "/data/fonts", "max_page_size": 50},
                    "server": {"port": 9000},
                }
            )
        )

        config = load_config_from_yaml(config_path, AppConfig)

        assert config.log_level == "DEBUG"
        assert config.catalog.fonts_dir == Path("/data/fonts")
        assert config.catalog.max_page_size == 50
        assert config.server.port == 9000
        assert config.client.max_concurrent_loads == 4

    def test_load_with_overrides_uses_yaml(self, tmp_path):
        config_path = tmp_path / "config.yaml"
        config_path.write_text("log_level: error\n")

        assert AppConfig.load_with_overrides(yaml_path=config_path).log_level == "ERROR"

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigFileNotFoundError):
            load_config_from_yaml(tmp_path / "missing.yaml", AppConfig)

    def test_empty_file(self, tmp_path):
        config_path = tmp_path / "empty.yaml"
        config_path.write_text("")

        with pytest.raises(EmptyConfigFileError):
            load_config_from_yaml(config_path, AppConfig)

    def test_invalid_yaml(self, tmp_path):
        config_path = tmp_path / "broken.yaml"
        config_path.write_text("catalog: [unclosed\n")

        with pytest.raises(InvalidYamlError):
            load_config_from_yaml(config_path, AppConfig)

    def test_invalid_values(self, tmp_path):
        config_path = tmp_path / "config.yaml"
        config_path.write_text("catalog:\n  default_page_size: 0\n")

        with pytest.raises(ConfigLoadError):
            load_config_from_yaml(config_path, AppConfig)

    def test_errors_are_configuration_errors(self, tmp_path):
        with pytest.raises(ConfigurationError):
            load_config_from_yaml(tmp_path / "missing.yaml", AppConfig)
