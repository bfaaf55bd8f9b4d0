"""
Application settings module using pydantic-settings.

This module defines the configuration settings for the Trail Planner application.
"""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings class."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application settings
    app_name: str = "Trail Planner"
    app_version: str = "0.1.0"
    debug: bool = False
    log_level: str = "INFO"

    # GPX processing settings
    max_gpx_file_size_mb: int = 50  # Maximum GPX file size in MB
    placeholder_track_name: str = "trail planner map"  # Name exported by map tools instead of a real title
    read_chunk_size: int = 64 * 1024  # Bytes fed to the XML tokenizer per read

    # Map link settings
    short_link_domains: list[str] = ["goo.gl", "maps.app.goo.gl"]
    request_timeout_seconds: float = 10.0

    # Gear settings
    default_weight_unit: str = "kg"

    # Map settings
    default_map_zoom: int = 11
    map_height: int = 500

    # Chart settings
    chart_height: int = 400


# Global settings instance
settings = Settings()
