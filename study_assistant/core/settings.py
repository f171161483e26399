import logging
import os
from pathlib import Path
from typing import Literal, Optional

from pydantic import AliasChoices, Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


logger = logging.getLogger(__name__)


PROJECT_ROOT = Path(__file__).resolve().parents[2]
PACKAGE_DATA_DIR = Path(__file__).resolve().parents[1] / "data"
ROOT_ENV = PROJECT_ROOT / ".env"
ROOT_ENV_LOCAL = PROJECT_ROOT / ".env.local"


class Settings(BaseSettings):
    """
    Study Assistant - Global Configuration Registry
    Centralizes all environment variables using Pydantic Settings.
    """

    model_config = SettingsConfigDict(
        env_file=(str(ROOT_ENV), str(ROOT_ENV_LOCAL)),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Security
    SERVICE_SECRET: str = Field(
        "development-secret",
        validation_alias=AliasChoices("SERVICE_SECRET", "STUDY_ASSISTANT_SERVICE_SECRET"),
    )

    # AI Models & Services
    GEMINI_API_KEY: Optional[str] = None
    GROQ_API_KEY: Optional[str] = None
    GENERATION_PROVIDER: Literal["auto", "gemini", "groq"] = "gemini"
    GENERATION_TIMEOUT_SECONDS: float = 60.0
    GENERATION_MAX_ATTEMPTS: int = 2
    GENERATION_RETRY_BASE_DELAY_SECONDS: float = 0.5

    # Curriculum & references (read-only configuration)
    CURRICULUM_PATH: Path = PACKAGE_DATA_DIR / "curriculum.json"
    REFERENCE_CATALOG_PATH: Path = PACKAGE_DATA_DIR / "references.json"
    SUBJECT_INFERENCE_MODE: Literal["none", "curriculum"] = "none"

    # Syllabus API client (navigator side)
    SYLLABUS_API_URL: str = "http://localhost:8000"
    SYLLABUS_API_TIMEOUT_SECONDS: float = 90.0

    # API Config
    API_PORT: int = 8000
    LOG_LEVEL: str = "INFO"
    ENVIRONMENT: str = "development"
    APP_ENV: str = "local"
    RUNNING_IN_DOCKER: bool = False

    @field_validator("GENERATION_PROVIDER", "SUBJECT_INFERENCE_MODE", mode="before")
    @classmethod
    def _normalize_modes(cls, value: str | None) -> str | None:
        if value is None:
            return value
        return str(value).strip().lower()

    @field_validator("APP_ENV", "ENVIRONMENT", mode="before")
    @classmethod
    def _normalize_environment_labels(cls, value: str | None) -> str:
        return str(value or "").strip().lower()

    @property
    def is_deployed_environment(self) -> bool:
        app_env = self.APP_ENV or self.ENVIRONMENT
        if app_env in {"staging", "production", "prod"}:
            return True
        if os.getenv("RAILWAY_ENVIRONMENT") or os.getenv("RAILWAY_PROJECT_ID"):
            return True
        return bool(self.RUNNING_IN_DOCKER and app_env not in {"", "local", "development", "dev"})

    @model_validator(mode="after")
    def _enforce_generation_constraints(self) -> "Settings":
        if self.GENERATION_MAX_ATTEMPTS < 1:
            logger.warning(
                "GENERATION_MAX_ATTEMPTS must be >= 1; forcing 1",
                extra={"configured": self.GENERATION_MAX_ATTEMPTS},
            )
            self.GENERATION_MAX_ATTEMPTS = 1
        if self.GENERATION_TIMEOUT_SECONDS <= 0:
            logger.warning(
                "GENERATION_TIMEOUT_SECONDS must be positive; forcing 60",
                extra={"configured": self.GENERATION_TIMEOUT_SECONDS},
            )
            self.GENERATION_TIMEOUT_SECONDS = 60.0
        return self


settings = Settings()  # type: ignore[call-arg]
