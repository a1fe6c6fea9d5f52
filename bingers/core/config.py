"""Application configuration."""

from pathlib import Path
from typing import Annotated, Any, Literal, Self

from pydantic import BeforeValidator, computed_field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

VERSION = "0.2.0"


def parse_backoff(v: Any) -> list[float] | Any:
    if isinstance(v, str) and not v.startswith("["):
        return [float(i.strip()) for i in v.split(",") if i.strip()]
    return v


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_ignore_empty=True,
        extra="ignore",
    )

    # Application
    PROJECT_NAME: str = "bingers"
    ENVIRONMENT: Literal["local", "staging", "production"] = "local"
    LOG_LEVEL: str = "INFO"
    LOG_DIR: Path = Path("logs")

    # User data
    DATA_DIR: Path = Path.home() / ".local" / "share" / "bingers"
    USER_DATA_FILENAME: str = "user_data.json"

    @computed_field
    @property
    def user_data_path(self) -> Path:
        return self.DATA_DIR.expanduser() / self.USER_DATA_FILENAME

    # Catalog (TVmaze)
    CATALOG_API_BASE_URL: str = "https://api.tvmaze.com"
    CATALOG_USER_AGENT: str = f"bingers/{VERSION}"
    CATALOG_TIMEOUT_SEC: float = 10.0
    CATALOG_BATCH_TIMEOUT_SEC: float | None = None  # whole batch, None disables
    CATALOG_MAX_CONCURRENCY: int = 8
    CATALOG_MAX_ATTEMPTS: int = 6  # first request included
    CATALOG_BACKOFF_SEC: Annotated[
        list[float] | str, BeforeValidator(parse_backoff)
    ] = [1, 1, 2, 3, 5, 8]

    @model_validator(mode="after")
    def _check_catalog_limits(self) -> Self:
        if self.CATALOG_MAX_ATTEMPTS < 1:
            raise ValueError("CATALOG_MAX_ATTEMPTS must be at least 1")
        if self.CATALOG_MAX_CONCURRENCY < 1:
            raise ValueError("CATALOG_MAX_CONCURRENCY must be at least 1")
        if not self.CATALOG_BACKOFF_SEC:
            raise ValueError("CATALOG_BACKOFF_SEC must not be empty")
        return self


settings = Settings()
