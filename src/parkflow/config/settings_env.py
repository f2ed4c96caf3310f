from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # Development
    DEV_MODE: bool = Field(default=True, description="Enable debug mode")

    # Logging
    LOG_FILE: Optional[str] = Field(default=None, description="Also write logs to this file")
    LOG_ROTATION: str = Field(default="10 MB", description="Rotate the log file at this size or interval")
    LOG_RETENTION: str = Field(default="7 days", description="Delete rotated log files older than this")

    # Database
    DATABASE_URL: str = Field(default="sqlite:///./parkflow.db", description="Database connection URL")
    ASYNC_DATABASE_URL: str = Field(default="sqlite+aiosqlite:///./parkflow.db", description="Async database URL")

    # FastAPI
    FASTAPI_HOST: str = Field(default="localhost", description="FastAPI host")
    FASTAPI_PORT: int = Field(default=8080, description="FastAPI port")

    # Streamlit
    STREAMLIT_PORT: int = Field(default=8501, description="Streamlit port")

    # Billing defaults for newly registered lots
    DEFAULT_BILLING_MODE: str = Field(default="per_minute", description="per_minute or per_hour_block")
    DEFAULT_MAX_DURATION_HOURS: float = Field(default=24.0, gt=0, description="Maximum stay before the fine applies")
    CURRENCY: str = Field(default="NRS", description="Currency label printed on receipts")

    # Reverse geocoding (Nominatim)
    GEOCODER_URL: str = Field(
        default="https://nominatim.openstreetmap.org/reverse", description="Reverse geocoding endpoint"
    )
    GEOCODER_TIMEOUT: float = Field(default=10.0, description="Geocoder request timeout in seconds")
    GEOCODER_USER_AGENT: str = Field(default="Parkflow/0.1", description="User-Agent sent to the geocoder")
    GEOCODER_LANGUAGE: str = Field(default="en", description="Preferred language for addresses")


# Create settings instance
settings = Settings()
