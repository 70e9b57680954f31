from functools import lru_cache
from typing import Literal

from pydantic import computed_field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from typing_extensions import Self


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_ignore_empty=True,
        extra="ignore",
    )

    PROJECT_NAME: str = "Line Balancing"
    ENVIRONMENT: Literal["local", "staging", "production"] = "local"
    API_V1_STR: str = "/api/v1"

    # Database
    DATABASE_URL: str = "sqlite:///./line_balancing.db"
    DATABASE_ECHO: bool = False

    # Observability Configuration
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: Literal["json", "console"] = "console"
    ENABLE_METRICS: bool = True

    # Balancing defaults
    DEFAULT_HEADCOUNT: int = 1
    OPERATOR_NAME_TEMPLATE: str = "Operator {number}"

    # Occupancy bands (percent of takt time)
    OCCUPANCY_BALANCED_THRESHOLD: float = 80.0
    OCCUPANCY_OVERLOAD_THRESHOLD: float = 100.0

    @computed_field  # type: ignore[prop-decorator]
    @property
    def is_sqlite(self) -> bool:
        return self.DATABASE_URL.startswith("sqlite")

    @model_validator(mode="after")
    def _check_balancing_defaults(self) -> Self:
        if self.DEFAULT_HEADCOUNT < 1:
            raise ValueError("DEFAULT_HEADCOUNT must be at least 1")
        if "{number}" not in self.OPERATOR_NAME_TEMPLATE:
            raise ValueError("OPERATOR_NAME_TEMPLATE must contain '{number}'")
        if self.OCCUPANCY_BALANCED_THRESHOLD > self.OCCUPANCY_OVERLOAD_THRESHOLD:
            raise ValueError(
                "OCCUPANCY_BALANCED_THRESHOLD cannot exceed OCCUPANCY_OVERLOAD_THRESHOLD"
            )
        return self


@lru_cache
def get_settings() -> Settings:
    """Get cached application settings."""
    return Settings()
