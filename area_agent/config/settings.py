import os
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field

CONFIG_DIR = os.path.dirname(os.path.abspath(__file__))
PROJECT_ROOT = os.path.abspath(os.path.join(CONFIG_DIR, '..'))
DEFAULT_AREAS_FILE = os.path.join(PROJECT_ROOT, 'data', 'areas.json')


class Settings(BaseSettings):
    """
    Pydantic settings for the Area Resolution agent.
    Values are automatically read from environment variables (field name, case-insensitive)
    or a .env file.
    """
    log_level: str = Field(default="INFO")
    api_host: str = Field(default="0.0.0.0")
    api_port: int = Field(default=8003)

    # Area provider: JSON file holding the doctor-drawn areas
    areas_file: str = Field(default=DEFAULT_AREAS_FILE)

    # Geocoding provider (Nominatim via geopy)
    geocoding_user_agent: str = Field(default="area-resolution-agent/1.0")
    nominatim_domain: str = Field(default="nominatim.openstreetmap.org")
    nominatim_scheme: str = Field(default="https")
    geocoding_timeout_seconds: float = Field(default=10.0)
    # Nominatim's public usage policy allows one request per second
    geocoding_min_delay_seconds: float = Field(default=1.0)
    geocoding_country_qualifier: str = Field(default="Thailand")

    # Geocode memoization
    geocode_cache_max_entries: int = Field(default=2048)
    geocode_cache_ttl_seconds: float = Field(default=24 * 60 * 60)

    # Caller-side coalescing of bursts of resolution requests
    debounce_seconds: float = Field(default=1.0)

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra='ignore'
    )

settings = Settings()
