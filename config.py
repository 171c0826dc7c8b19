# config.py
from functools import lru_cache
from typing import Literal
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import SecretStr, field_validator, model_validator

class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Obligatorios
    SECRET_KEY: SecretStr
    DATABASE_URL: SecretStr

    # Entorno y CORS
    ENV: Literal["development", "production", "test"] = "development"
    ALLOWED_ORIGINS: list[str] = []

    ALGORITHM: str = "HS256"
    LOG_LEVEL: str = "INFO"

    # Modle
    MODLE_MAX_HINTS: int = 5
    MODLE_MIN_THRESHOLD: int = 2
    MODLE_THRESHOLD_RATIO: float = 0.2
    MODLE_TIMEZONE: str = "UTC"
    MODLE_DEFAULT_LANGUAGE: str = "English"

    RESULT_RATE_LIMIT: str = "10/minute"
    PUZZLE_RATE_LIMIT: str = "60/minute"

    # Cliente
    MODLE_API_URL: str = "http://127.0.0.1:8000"
    MODLE_API_TIMEOUT: float = 10.0

    @field_validator("DATABASE_URL", mode="before")
    @classmethod
    def normalize_db_url(cls, v):
        if isinstance(v, SecretStr):
            v = v.get_secret_value()
        if isinstance(v, str) and v.startswith("postgres://"):
            v = v.replace("postgres://", "postgresql+psycopg2://", 1)
        return v

    @field_validator("ALLOWED_ORIGINS", mode="before")
    @classmethod
    def split_origins(cls, v):
        # Permite "a,b,c" en envs además de JSON
        if isinstance(v, str):
            return [o.strip() for o in v.split(",") if o.strip()]
        return v or []

    @field_validator("MODLE_MAX_HINTS")
    @classmethod
    def positive_hint_cap(cls, v: int) -> int:
        if v < 1:
            raise ValueError("MODLE_MAX_HINTS must be at least 1")
        return v

    @model_validator(mode="after")
    def validate_cors(self):
        if self.ENV == "production":
            if not self.ALLOWED_ORIGINS:
                raise ValueError("ALLOWED_ORIGINS vacío en producción.")
            if "*" in self.ALLOWED_ORIGINS:
                raise ValueError("CORS wildcard (*) prohibido en producción.")
        return self

@lru_cache
def get_settings() -> Settings:
    return Settings()

settings = get_settings()
