from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    app_env: str = "dev"
    log_level: str = "INFO"

    db_host: str = "host.docker.internal"
    db_port: int = 5432
    db_database: str = "resumes"
    db_username: str = "resumes"
    db_password: str = "secret"
    db_pool_max_size: int = Field(default=10, ge=1)
    db_connect_timeout_seconds: float = Field(default=10.0, gt=0)

    worker_concurrency: int = Field(default=2, ge=1)
    queue_poll_interval_seconds: int = 5
    queue_visibility_timeout_seconds: int = Field(default=300, ge=1)
    queue_nack_delay_seconds: int = Field(default=30, ge=0)
    queue_max_deliveries: int = Field(default=5, ge=1)

    manual_max_retries: int = Field(default=2, ge=0)
    total_max_attempts: int = Field(default=6, ge=1)
    auto_max_retries: int = Field(default=3, ge=0)

    reconcile_interval_seconds: int = Field(default=900, ge=1)
    reconcile_grace_seconds: int = Field(default=300, ge=0)
    reconcile_batch_size: int = Field(default=10, ge=1)

    attempt_timeout_seconds: int = Field(default=120, ge=1)
    max_upload_bytes: int = 10 * 1024 * 1024
    max_text_chars: int = Field(default=60000, ge=100)
    truncation_head_ratio: float = Field(default=0.7, gt=0.0, lt=1.0)

    pdf_engine: str = "pdfplumber"

    storage_backend: str = "local"
    storage_local_root: str = "/app/files"
    storage_s3_bucket: str = ""
    storage_s3_endpoint_url: str | None = None
    storage_s3_region: str = "auto"
    storage_s3_access_key_id: str = ""
    storage_s3_secret_access_key: str = ""

    parser_provider: str = "openai"
    parser_openai_api_key: str = ""
    parser_openai_model_name: str = "gpt-4o-mini"
    parser_openai_timeout_seconds: int = 60
    parser_openai_temperature: float = 0.0
    parser_openai_compatible_base_url: str = ""
    parser_openai_compatible_api_key: str = ""
    parser_openai_compatible_model_name: str = ""
    parser_openai_compatible_timeout_seconds: int = 60
    parser_openrouter_api_key: str = ""
    parser_openrouter_model_name: str = "google/gemini-2.5-flash-lite"
    parser_openrouter_timeout_seconds: int = 60
    parser_groq_api_key: str = ""
    parser_groq_model_name: str = ""
    parser_groq_timeout_seconds: int = 60
    parser_together_api_key: str = ""
    parser_together_model_name: str = ""
    parser_together_timeout_seconds: int = 60
    parser_deepseek_api_key: str = ""
    parser_deepseek_model_name: str = ""
    parser_deepseek_timeout_seconds: int = 60
    parser_ollama_api_key: str = "ollama"
    parser_ollama_model_name: str = ""
    parser_ollama_timeout_seconds: int = 120

    cache_invalidation_url: str = ""
    cache_invalidation_token: str = ""
    cache_invalidation_timeout_seconds: float = 5.0
