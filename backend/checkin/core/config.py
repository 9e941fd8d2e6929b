from pydantic_settings import BaseSettings
from typing import Literal

class Settings(BaseSettings):
    # Application
    PROJECT_NAME: str = "Geo Check-in"
    VERSION: str = "1.0.0"
    DEBUG: bool = False
    ENVIRONMENT: str = "production"
    HOST: str = "0.0.0.0"
    PORT: int = 3000

    # Identity: "phone" keys attendees by 10 phone digits, "name" by lowercased name
    IDENTITY_MODE: Literal["phone", "name"] = "phone"

    # Geofence defaults applied when start-event omits them
    DEFAULT_RADIUS_METERS: float = 50.0
    REQUIRE_LOCATION_DEFAULT: bool = True

    # Polling
    VALIDATE_VOTE_OPTIONS: bool = False  # False = record any option, filter at tally time

    # Roster upload
    MAX_UPLOAD_SIZE_MB: int = 5
    ALLOWED_ROSTER_EXTENSIONS: list = [".csv", ".xlsx"]

    # Web
    PUBLIC_DIR: str = "public"
    CORS_ORIGINS: list = ["*"]

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_FILE: str = "app.log"  # empty string disables the file handler

    class Config:
        env_file = ".env"
        case_sensitive = True
        extra = "ignore"

settings = Settings()
