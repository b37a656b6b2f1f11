"""
Configuration module for the Road Safety Enforcement Dashboard.

This module provides access to settings loaded from TOML files.
Primary configuration file: config/dashboard.toml

Usage:
    from config import get_dashboard_config

    config = get_dashboard_config()
    print(config.geography.url)
    print(config.render.resize_debounce_ms)
"""

import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional


DEFAULT_GEOJSON_URL = (
    "https://raw.githubusercontent.com/rowanhogan/australian-states/master/states.geojson"
)

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass
class DataConfig:
    """Where the enforcement extracts live."""
    directory: str = "data"
    timeout_seconds: int = 30


@dataclass
class GeographyConfig:
    """External state boundaries used by the choropleth charts."""
    url: str = DEFAULT_GEOJSON_URL
    timeout_seconds: int = 30
    enabled: bool = True


@dataclass
class RenderConfig:
    """Defaults shared by every chart."""
    resize_debounce_ms: int = 250
    default_width: int = 800
    default_height: int = 450


@dataclass
class CacheConfig:
    """In-memory dataset cache settings."""
    enabled: bool = True


@dataclass
class LoggingConfig:
    """Log level and optional log file for the app and the export CLI."""
    level: str = "INFO"
    file_logging: bool = False
    directory: str = "logs"


@dataclass
class DashboardConfig:
    """Complete dashboard configuration."""
    data: DataConfig = field(default_factory=DataConfig)
    geography: GeographyConfig = field(default_factory=GeographyConfig)
    render: RenderConfig = field(default_factory=RenderConfig)
    cache: CacheConfig = field(default_factory=CacheConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    def validate(self) -> list[str]:
        """
        Validate the configuration.

        Returns:
            List of error messages (empty if valid).
        """
        errors = []

        if not self.data.directory:
            errors.append("Data directory is not configured (data.directory)")

        if self.geography.enabled and not self.geography.url.startswith(("http://", "https://")):
            errors.append(f"Geography URL must be http(s): {self.geography.url}")

        if self.geography.timeout_seconds <= 0:
            errors.append("geography.timeout_seconds must be positive")

        if self.render.resize_debounce_ms < 0:
            errors.append("render.resize_debounce_ms must be non-negative")

        if self.logging.level.upper() not in LOG_LEVELS:
            errors.append(f"Unknown logging.level: {self.logging.level}")

        return errors


def load_dashboard_config(config_path: Optional[Path] = None) -> DashboardConfig:
    """
    Load dashboard configuration from a TOML file.

    Args:
        config_path: Path to the TOML config file. Defaults to dashboard.toml
                     next to this module.

    Returns:
        DashboardConfig dataclass with all settings. Defaults are used when the
        file does not exist.

    Raises:
        tomllib.TOMLDecodeError: If the TOML is invalid.
    """
    if config_path is None:
        config_path = Path(__file__).parent / "dashboard.toml"

    if not config_path.exists():
        return DashboardConfig()

    with open(config_path, "rb") as f:
        data = tomllib.load(f)

    data_section = data.get("data", {})
    data_config = DataConfig(
        directory=data_section.get("directory", "data"),
        timeout_seconds=data_section.get("timeout_seconds", 30),
    )

    geo_data = data.get("geography", {})
    geography = GeographyConfig(
        url=geo_data.get("url", DEFAULT_GEOJSON_URL),
        timeout_seconds=geo_data.get("timeout_seconds", 30),
        enabled=geo_data.get("enabled", True),
    )

    render_data = data.get("render", {})
    render = RenderConfig(
        resize_debounce_ms=render_data.get("resize_debounce_ms", 250),
        default_width=render_data.get("default_width", 800),
        default_height=render_data.get("default_height", 450),
    )

    cache_data = data.get("cache", {})
    cache = CacheConfig(
        enabled=cache_data.get("enabled", True),
    )

    logging_data = data.get("logging", {})
    logging_config = LoggingConfig(
        level=logging_data.get("level", "INFO"),
        file_logging=logging_data.get("file_logging", False),
        directory=logging_data.get("directory", "logs"),
    )

    return DashboardConfig(
        data=data_config,
        geography=geography,
        render=render,
        cache=cache,
        logging=logging_config,
    )


# Module-level cached config (loaded on first access)
_cached_config: Optional[DashboardConfig] = None


def get_dashboard_config() -> DashboardConfig:
    """
    Get the dashboard configuration (cached after first load).

    Returns:
        DashboardConfig dataclass with all settings.
    """
    global _cached_config
    if _cached_config is None:
        _cached_config = load_dashboard_config()
    return _cached_config


def reload_dashboard_config() -> DashboardConfig:
    """
    Reload the dashboard configuration from disk.

    Returns:
        DashboardConfig dataclass with all settings.
    """
    global _cached_config
    _cached_config = load_dashboard_config()
    return _cached_config


__all__ = [
    "DashboardConfig",
    "DataConfig",
    "GeographyConfig",
    "RenderConfig",
    "CacheConfig",
    "LoggingConfig",
    "LOG_LEVELS",
    "DEFAULT_GEOJSON_URL",
    "load_dashboard_config",
    "get_dashboard_config",
    "reload_dashboard_config",
]
