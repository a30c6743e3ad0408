# timebill/core/config.py
from typing import List, Optional, Union, Literal

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # Environment settings
    ENVIRONMENT: Literal["development", "testing", "production"] = "development"

    # API settings
    API_V1_STR: str = "/api/v1"
    PROJECT_NAME: str = "Timebill API"

    # CORS settings
    BACKEND_CORS_ORIGINS: List[str] = [
        "http://localhost",
        "http://localhost:3000",
        "http://localhost:8080",
    ]

    @field_validator("BACKEND_CORS_ORIGINS", mode="before")
    def assemble_cors_origins(cls, v: Union[str, List[str]]) -> Union[List[str], str]:
        if isinstance(v, str) and not v.startswith("["):
            return [i.strip() for i in v.split(",")]
        elif isinstance(v, (list, str)):
            return v
        raise ValueError(v)

    # Logging settings
    LOG_LEVEL: str = "INFO"
    LOG_FILE: Optional[str] = None  # Path to log file if file logging is enabled

    # Database settings
    SQLALCHEMY_DATABASE_URI: str = "sqlite:///./timebill.db"

    # Billing settings
    BILL_NUMBER_MAX_RETRIES: int = 5
    ENFORCE_BILL_STATUS_TRANSITIONS: bool = True

    # API Call Timeouts (in seconds)
    DEFAULT_TIMEOUT: int = 30

    # ActivityWatch
    ACTIVITYWATCH_URL: str = "http://127.0.0.1:5600"
    ACTIVITYWATCH_TIMEOUT: int = 30  # per HTTP request
    # Bound for a whole lookup (several requests); defaults to 4x the request timeout
    ACTIVITYWATCH_LOOKUP_TIMEOUT: Optional[int] = None
    ACTIVITYWATCH_BUCKET_CACHE_TTL: int = 60
    ACTIVITYWATCH_HOSTNAME: Optional[str] = None  # defaults to socket.gethostname()
    # A working day runs from DAY_START_HOUR to DAY_START_HOUR next day, local to UTC_OFFSET_HOURS
    ACTIVITYWATCH_DAY_START_HOUR: int = 4
    ACTIVITYWATCH_UTC_OFFSET_HOURS: int = 3

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", case_sensitive=True, extra="ignore"
    )


# Create settings instance
settings = Settings()
