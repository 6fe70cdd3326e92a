from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    app_name: str = "candidate-sync"
    environment: str = "dev"
    selection_csv_url: str | None = None
    roster_csv_url: str | None = None
    roster_store_url: str | None = None
    webhook_url: str | None = None
    skill_preview_limit: int = 3
    summary_preview_chars: int = 160
    log_level: str = "INFO"
    otel_enabled: bool = True
    otel_service_name: str = "candidate-sync"
    otel_exporter_otlp_endpoint: str | None = None
    otel_exporter_otlp_headers: str | None = None
    otel_trace_sample_ratio: float = 1.0
    otel_log_correlation: bool = True

    model_config = SettingsConfigDict(env_prefix="CS_", extra="ignore")


@lru_cache
def get_settings() -> Settings:
    return Settings()
