"""Application configuration (settings and environment).

Single source of truth for all configuration. Uses pydantic-settings
with .env support. Values are validated at load time.
"""

from functools import lru_cache

from pydantic import SecretStr, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment and .env.

    Every outbound dependency is optional at load time: an unset
    DATABASE_URL, OPENSEARCH_ENDPOINT or SQS_QUEUE_URL disables the
    components that need it rather than failing startup.
    """

    # App
    app_name: str = "catalog-search"
    app_version: str = "1.0.0"
    debug: bool = False

    # CORS
    allowed_origins: str = "http://localhost:3000,http://localhost:8080"

    # Database (record store): postgresql+asyncpg://...
    database_url: str = ""
    database_echo: bool = False
    # Optional pool/driver overrides (None = use defaults in database.py)
    db_pool_size: int | None = None
    db_max_overflow: int | None = None
    db_command_timeout: int | None = None

    # Redis (result cache). REDIS_URL takes precedence over host/port.
    redis_enabled: bool = True
    redis_url: str | None = None
    redis_host: str = "localhost"
    redis_port: int = 6379
    redis_db: int = 0
    redis_password: SecretStr | None = None

    # Cache TTLs (seconds)
    cache_ttl_search: int = 300
    cache_ttl_featured: int = 600
    # Also wipe featured:* on every index write (otherwise it expires by TTL).
    cache_invalidate_featured: bool = False

    # Search index (OpenSearch)
    opensearch_endpoint: str = ""
    opensearch_index_name: str = "cms_content"
    opensearch_username: str | None = None
    opensearch_password: SecretStr | None = None
    opensearch_use_ssl: bool = True
    opensearch_verify_certs: bool = True
    # Sign requests with AWS SigV4 (managed OpenSearch Service domains).
    opensearch_aws_sigv4: bool = False
    opensearch_timeout_seconds: int = 10
    search_max_results: int = 50
    featured_default_limit: int = 10

    # Queue (SQS)
    aws_region: str = "us-east-1"
    aws_access_key_id: str | None = None
    aws_secret_access_key: SecretStr | None = None
    sqs_queue_url: str = ""
    sqs_endpoint_url: str | None = None
    sqs_worker_enabled: bool = False
    sqs_batch_size: int = 10
    sqs_wait_time_seconds: int = 20
    sqs_visibility_timeout_seconds: int = 60

    # DB-native change listener (LISTEN show_changes / episode_changes)
    change_listener_enabled: bool = False
    change_listener_reconnect_seconds: float = 5.0

    # Retry executor (index writes, queue sends, cache invalidation)
    retry_max_attempts: int = 3
    retry_base_delay_seconds: float = 1.0

    # Rate limiting (SlowAPI limit string per client address)
    rate_limit_discovery: str = "100/minute"

    # Telemetry
    telemetry_enabled: bool = False
    telemetry_exporter: str = "console"
    telemetry_otlp_endpoint: str | None = None
    telemetry_sample_rate: float = 1.0
    telemetry_environment: str = "development"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
    )

    @model_validator(mode="after")
    def validate_limits(self) -> "Settings":
        """Reject values the retry executor, cache and search cannot work with."""
        if self.retry_max_attempts < 1:
            raise ValueError("RETRY_MAX_ATTEMPTS must be >= 1")
        if self.retry_base_delay_seconds < 0:
            raise ValueError("RETRY_BASE_DELAY_SECONDS must be >= 0")
        for name in (
            "cache_ttl_search",
            "cache_ttl_featured",
            "search_max_results",
            "featured_default_limit",
        ):
            if getattr(self, name) < 1:
                raise ValueError(f"{name.upper()} must be >= 1")
        if not 1 <= self.sqs_batch_size <= 10:
            raise ValueError("SQS_BATCH_SIZE must be between 1 and 10")
        if not 0 <= self.sqs_wait_time_seconds <= 20:
            raise ValueError("SQS_WAIT_TIME_SECONDS must be between 0 and 20")
        if not 0.0 <= self.telemetry_sample_rate <= 1.0:
            raise ValueError("TELEMETRY_SAMPLE_RATE must be between 0.0 and 1.0")
        if self.sqs_worker_enabled and not self.sqs_queue_url:
            raise ValueError("SQS_QUEUE_URL is required when SQS_WORKER_ENABLED is true")
        if self.change_listener_enabled and not self.database_url:
            raise ValueError("DATABASE_URL is required when CHANGE_LISTENER_ENABLED is true")
        return self

    @property
    def cors_origins(self) -> list[str]:
        return [o.strip() for o in self.allowed_origins.split(",") if o.strip()]

    @property
    def asyncpg_dsn(self) -> str:
        """database_url without the SQLAlchemy driver suffix, for raw asyncpg connections."""
        return self.database_url.replace("postgresql+asyncpg://", "postgresql://", 1)


@lru_cache
def get_settings() -> Settings:
    """Return cached application settings (single instance per process).

    Validation runs on first call, not at import time. In tests, call
    get_settings.cache_clear() before overriding env vars so the next
    get_settings() uses the new values.
    """
    return Settings()
