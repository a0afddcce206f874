import os
import warnings
from enum import Enum
from typing import Self

from pydantic import SecretStr, computed_field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class AppSettings(BaseSettings):
    APP_NAME: str = "CarMate backend"
    APP_DESCRIPTION: str | None = "Service-center search and service reminders"
    APP_VERSION: str | None = "0.1.0"


class PostgresSettings(BaseSettings):
    POSTGRES_USER: str = "postgres"
    POSTGRES_PASSWORD: str = "postgres"
    POSTGRES_SERVER: str = "localhost"
    POSTGRES_PORT: int = 5432
    POSTGRES_DB: str = "postgres"
    POSTGRES_ASYNC_PREFIX: str = "postgresql+asyncpg://"

    @computed_field  # type: ignore[prop-decorator]
    @property
    def POSTGRES_URI(self) -> str:
        credentials = f"{self.POSTGRES_USER}:{self.POSTGRES_PASSWORD}"
        location = f"{self.POSTGRES_SERVER}:{self.POSTGRES_PORT}/{self.POSTGRES_DB}"
        return f"{credentials}@{location}"

    @computed_field  # type: ignore[prop-decorator]
    @property
    def POSTGRES_URL(self) -> str:
        return f"{self.POSTGRES_ASYNC_PREFIX}{self.POSTGRES_URI}"


class RedisQueueSettings(BaseSettings):
    REDIS_QUEUE_HOST: str = "localhost"
    REDIS_QUEUE_PORT: int = 6379


class GoogleMapsSettings(BaseSettings):
    GOOGLE_MAPS_API_KEY: SecretStr | None = None
    PLACES_REQUEST_TIMEOUT: float = 10.0
    PLACES_PAGE_DELAY_SECONDS: float = 2.0


class TwilioSettings(BaseSettings):
    TWILIO_ACCOUNT_SID: str | None = None
    TWILIO_AUTH_TOKEN: SecretStr | None = None
    TWILIO_PHONE_NUMBER: str | None = None

    @computed_field  # type: ignore[prop-decorator]
    @property
    def TWILIO_CONFIGURED(self) -> bool:
        return bool(self.TWILIO_ACCOUNT_SID and self.TWILIO_AUTH_TOKEN and self.TWILIO_PHONE_NUMBER)


class MatchMode(str, Enum):
    STRICT = "strict"
    FUZZY = "fuzzy"


class MatchingSettings(BaseSettings):
    MATCH_MODE: MatchMode = MatchMode.FUZZY
    NAME_SIMILARITY_THRESHOLD: float = 0.8
    ADDRESS_SIMILARITY_THRESHOLD: float = 0.7
    PROXIMITY_THRESHOLD_KM: float = 0.1

    @field_validator("NAME_SIMILARITY_THRESHOLD", "ADDRESS_SIMILARITY_THRESHOLD", mode="after")
    @classmethod
    def validate_similarity_threshold(cls, value: float) -> float:
        if not 0.0 <= value <= 1.0:
            raise ValueError(f"Similarity thresholds must be between 0 and 1. Received {value}.")
        return value


class ReminderSettings(BaseSettings):
    REMINDER_LOOKAHEAD_DAYS: int = 3
    REMINDER_CRON_HOUR: int = 9
    REMINDER_CRON_MINUTE: int = 0
    REMINDER_TIMEZONE: str = "Asia/Kuala_Lumpur"
    SMS_BRAND_NAME: str = "CarMate"


class FileLoggerSettings(BaseSettings):
    FILE_LOG_MAX_BYTES: int = 10 * 1024 * 1024
    FILE_LOG_BACKUP_COUNT: int = 5
    FILE_LOG_FORMAT_JSON: bool = True
    FILE_LOG_LEVEL: str = "INFO"

    FILE_LOG_INCLUDE_REQUEST_ID: bool = True
    FILE_LOG_INCLUDE_PATH: bool = True
    FILE_LOG_INCLUDE_METHOD: bool = True
    FILE_LOG_INCLUDE_CLIENT_HOST: bool = True
    FILE_LOG_INCLUDE_STATUS_CODE: bool = True


class ConsoleLoggerSettings(BaseSettings):
    CONSOLE_LOG_LEVEL: str = "INFO"
    CONSOLE_LOG_FORMAT_JSON: bool = False

    CONSOLE_LOG_INCLUDE_REQUEST_ID: bool = False
    CONSOLE_LOG_INCLUDE_PATH: bool = False
    CONSOLE_LOG_INCLUDE_METHOD: bool = False
    CONSOLE_LOG_INCLUDE_CLIENT_HOST: bool = False
    CONSOLE_LOG_INCLUDE_STATUS_CODE: bool = False


class EnvironmentOption(str, Enum):
    LOCAL = "local"
    STAGING = "staging"
    PRODUCTION = "production"


class EnvironmentSettings(BaseSettings):
    ENVIRONMENT: EnvironmentOption = EnvironmentOption.LOCAL


class CORSSettings(BaseSettings):
    CORS_ORIGINS: list[str] = ["http://localhost:5173", "http://127.0.0.1:5173"]
    CORS_METHODS: list[str] = ["GET", "POST", "OPTIONS"]
    CORS_HEADERS: list[str] = ["Content-Type", "Authorization"]


class Settings(
    AppSettings,
    PostgresSettings,
    RedisQueueSettings,
    GoogleMapsSettings,
    TwilioSettings,
    MatchingSettings,
    ReminderSettings,
    FileLoggerSettings,
    ConsoleLoggerSettings,
    EnvironmentSettings,
    CORSSettings,
):
    model_config = SettingsConfigDict(
        env_file=os.path.join(os.path.dirname(os.path.realpath(__file__)), "..", "..", "..", ".env"),
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    @model_validator(mode="after")
    def validate_environment_settings(self) -> Self:
        "The validation should not modify any of the settings. It should provide"
        "feedback to the user if any misconfiguration is detected."
        if self.ENVIRONMENT == EnvironmentOption.LOCAL:
            pass
        elif self.ENVIRONMENT == EnvironmentOption.STAGING:
            if "*" in self.CORS_ORIGINS:
                warnings.warn(
                    "For security, in a staging environment CORS_ORIGINS should not include '*'. "
                    "It's recommended to specify explicit origins (e.g., ['https://staging.example.com'])."
                )
            if not self.TWILIO_CONFIGURED:
                warnings.warn("Twilio credentials are missing; reminder SMS will only be logged.")
        elif self.ENVIRONMENT == EnvironmentOption.PRODUCTION:
            if "*" in self.CORS_ORIGINS:
                raise ValueError(
                    "For security, in a production environment CORS_ORIGINS cannot include '*'. "
                    "You must specify explicit allowed origins (e.g., ['https://example.com'])."
                )
            if not self.TWILIO_CONFIGURED:
                raise ValueError(
                    "In production, TWILIO_ACCOUNT_SID, TWILIO_AUTH_TOKEN and TWILIO_PHONE_NUMBER must all be set."
                )
            if self.GOOGLE_MAPS_API_KEY is None:
                raise ValueError("In production, GOOGLE_MAPS_API_KEY must be set.")
        return self


settings = Settings()
