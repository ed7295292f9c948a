from datetime import datetime

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    app_env: str = "dev"
    log_level: str = "INFO"

    extraction_provider: str = "azure"

    azure_endpoint: str = ""
    azure_api_key: str = ""
    azure_model_id: str = "prebuilt-receipt"
    azure_api_version: str = "2023-07-31"

    extraction_submit_attempts: int = 3
    extraction_submit_timeout_seconds: int = 30
    extraction_poll_initial_interval_seconds: float = 0.5
    extraction_poll_growth_factor: float = 1.5
    extraction_poll_max_interval_seconds: float = 4.0
    extraction_poll_timeout_seconds: float = 30.0
    extraction_poll_request_timeout_seconds: int = 10

    openai_api_key: str = ""
    openai_model_name: str = "gpt-4o-mini"
    openai_base_url: str | None = None
    openai_timeout_seconds: int = 30

    currency_symbol: str = "$"

    document_engine: str = "pymupdf"

    local_storage_dir: str = "~/ReceiptVault"
    location_cache_path: str = "~/.receiptvault/locations.json"
    month_name_locale: str = "en"

    google_access_token: str = ""
    google_token_expires_at: datetime | None = None

    drive_root_folder_name: str = "ReceiptVault"
    remote_timeout_seconds: int = 30

    upload_attempts: int = 2
