"""Configuration management for the font catalog and preview engine."""

import logging
from pathlib import Path

import yaml
from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .exceptions import (
    ConfigFileNotFoundError,
    ConfigLoadError,
    EmptyConfigFileError,
    InvalidYamlError,
)

DEFAULT_FONT_EXTENSIONS = [".ttf", ".otf", ".woff", ".woff2", ".ttc", ".otc"]


class CatalogConfig(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="CATALOG_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )
    """Catalog source and listing configuration."""

    fonts_dir: Path = Field(Path("./public/fonts"), description="Directory of font files")
    database_path: Path | None = Field(None, description="SQLite row store (overrides fonts_dir)")
    table_name: str = Field("fonts", description="Row store table name")
    resource_base_url: str = Field("/fonts", description="Base URL font files are served from")
    font_extensions: list[str] = Field(
        default_factory=lambda: list(DEFAULT_FONT_EXTENSIONS),
        description="Recognized font file extensions",
    )
    default_page_size: int = Field(20, ge=1, description="Page size when none is given")
    max_page_size: int = Field(100, ge=1, description="Largest accepted page size")

    @field_validator("font_extensions")
    @classmethod
    def normalize_extensions(cls, v: list[str]) -> list[str]:
        normalized = []
        for ext in v:
            ext = ext.strip().lower()
            if not ext:
                continue
            normalized.append(ext if ext.startswith(".") else f".{ext}")
        if not normalized:
            raise ValueError("font_extensions cannot be empty")
        return normalized

    @field_validator("table_name")
    @classmethod
    def validate_table_name(cls, v: str) -> str:
        if not v.isidentifier():
            raise ValueError("table_name must be a plain identifier")
        return v

    @model_validator(mode="after")
    def check_page_sizes(self) -> "CatalogConfig":
        if self.default_page_size > self.max_page_size:
            raise ValueError("default_page_size cannot exceed max_page_size")
        return self


class ClientConfig(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="CLIENT_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )
    """Font loading and coverage probing configuration."""

    max_concurrent_loads: int = Field(4, ge=1, description="Parallel font loads")
    fetch_timeout_seconds: float = Field(30.0, gt=0.0, description="Font fetch timeout")
    user_agent: str = Field("fontica/1.0.0", description="HTTP user agent")
    reference_size_px: int = Field(16, ge=1, description="Size used for width probing")
    fallback_family: str = Field("sans-serif", description="Generic fallback family")
    fallback_font_path: Path | None = Field(
        None, description="Font file used for the generic fallback (Pillow default if unset)"
    )


class ServerConfig(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="SERVER_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )
    """HTTP listing endpoint configuration."""

    host: str = Field("127.0.0.1", description="Bind address")
    port: int = Field(3000, ge=0, le=65535, description="Bind port")
    cors_origin: str = Field("*", description="Access-Control-Allow-Origin value")


class AppConfig(BaseSettings):
    """Main application configuration that loads from multiple sources."""

    model_config = SettingsConfigDict(
        env_prefix="APP_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    log_level: str = Field("INFO", description="Application log level")

    catalog: CatalogConfig = Field(default_factory=CatalogConfig)
    client: ClientConfig = Field(default_factory=ClientConfig)
    server: ServerConfig = Field(default_factory=ServerConfig)

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        level = v.upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"Unknown log level: {v}")
        return level

    @classmethod
    def load_from_env(cls, env_file: str | Path | None = ".env") -> "AppConfig":
        """Load configuration from environment variables and .env file."""
        if env_file:
            env_file = Path(env_file)
            if env_file.exists():
                return cls(_env_file=env_file)
        return cls()

    @classmethod
    def load_with_overrides(
        cls,
        env_file: str | Path | None = ".env",
        yaml_path: str | Path | None = None,
        **kwargs,
    ) -> "AppConfig":
        """Load configuration with an optional YAML override file and keyword overrides."""
        config = load_config_from_yaml(yaml_path, cls) if yaml_path else cls.load_from_env(env_file)

        for key, value in kwargs.items():
            if value is not None and hasattr(config, key):
                setattr(config, key, value)

        return config


def load_config_from_yaml(config_path: str | Path, config_class: type) -> BaseSettings:
    """Load configuration from YAML file."""
    config_path = Path(config_path)

    if not config_path.exists():
        raise ConfigFileNotFoundError(str(config_path))

    try:
        with config_path.open() as f:
            config_data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise InvalidYamlError(str(config_path), str(e)) from e

    if config_data is None:
        raise EmptyConfigFileError(str(config_path))

    try:
        if issubclass(config_class, BaseSettings):
            # YAML values win; do not merge in a stray .env for this instance
            return config_class(_env_file=None, **config_data)
        return config_class(**config_data)
    except Exception as e:
        raise ConfigLoadError(str(e)) from e
