from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    environment: str = "dev"
    api_base_url: str = "http://localhost:8000"
    api_prefix: str = "/admin/dashboard"
    api_token: str | None = None
    request_timeout_seconds: float = Field(default=10.0, gt=0)
    feedback_timeout_seconds: float = Field(default=4.0, gt=0)
    default_page_size: int = Field(default=10, ge=1, le=100)
    otel_enabled: bool = False
    otel_service_name: str = "rental-admin-console"
    otel_exporter_otlp_endpoint: str | None = None
    otel_exporter_otlp_headers: str | None = None
    otel_trace_sample_ratio: float = Field(default=1.0, ge=0.0, le=1.0)
    otel_log_correlation: bool = True

    model_config = SettingsConfigDict(env_prefix="RAC_", extra="ignore")

    @field_validator("api_base_url")
    @classmethod
    def _strip_trailing_slash(cls, value: str) -> str:
        return value.rstrip("/")

    @field_validator("api_prefix")
    @classmethod
    def _normalize_prefix(cls, value: str) -> str:
        stripped = value.strip().strip("/")
        return f"/{stripped}" if stripped else ""


@lru_cache
def get_settings() -> Settings:
    return Settings()
