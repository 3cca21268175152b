"""Configuration management using pydantic-settings."""

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",  # Ignore extra environment variables
    )

    # MET Norway Configuration (free, requires an identifying User-Agent)
    met_locationforecast_url: str = (
        "https://api.met.no/weatherapi/locationforecast/2.0/compact"
    )
    met_oceanforecast_url: str = (
        "https://api.met.no/weatherapi/oceanforecast/2.0/complete"
    )
    user_agent: str = "NoFish/1.0 (fishing conditions app)"
    http_timeout: float = 10.0

    # Kartverket tide API Configuration
    tide_api_url: str = "https://api.sehavniva.no/tideapi.php"
    tide_window_days: int = 10
    tide_datatype: str = "tab"  # high/low events
    tide_refcode: str = "cd"  # chart datum

    # Nominatim Configuration
    nominatim_base_url: str = "https://nominatim.openstreetmap.org"
    nominatim_user_agent: str = "NoFish/1.0 (fishing conditions app)"

    # API Configuration
    rate_limit: str = "60/minute"

    # Logging Configuration
    log_level: str = "INFO"
    log_json: bool = True

    # Lookup audit Configuration
    redis_url: str = "redis://localhost:6379"
    use_redis: bool = False
    lookup_history_size: int = 1000


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
