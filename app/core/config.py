from typing import Optional

from dotenv import load_dotenv
from pydantic_settings import BaseSettings, SettingsConfigDict

load_dotenv()


class Settings(BaseSettings):
    PROJECT_NAME: str = "WeatherMap"
    PROJECT_DESCRIPTION: str = "Current weather and 5-day forecast on an interactive map"
    VERSION: str = "0.2.0"
    API_V1_STR: str = "/api/v1"

    # Logging
    LOG_LEVEL: str = "INFO"

    # OpenWeatherMap API Settings
    OPENWEATHER_API_KEY: str = ""
    OPENWEATHER_BASE_URL: str = "https://api.openweathermap.org/data/2.5"
    OPENWEATHER_GEO_URL: str = "https://api.openweathermap.org/geo/1.0"
    OPENWEATHER_UNITS: str = "metric"
    # None leaves the transport default in place
    HTTP_TIMEOUT_SECONDS: Optional[float] = None

    # Map Settings
    DEFAULT_LATITUDE: float = 28.3974
    DEFAULT_LONGITUDE: float = 84.1258
    DEFAULT_ZOOM: int = 13
    SEARCH_ZOOM: int = 13
    MAP_TILE_URL: str = "https://{s}.tile.openstreetmap.org/{z}/{x}/{y}.png"

    # Forecast Settings
    FORECAST_SAMPLE_STEP: int = 8
    FORECAST_DAYS: int = 5

    # Session Settings
    MAX_SESSIONS: int = 1000

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")


settings = Settings()
