"""Configuration management using Pydantic Settings"""

from typing import Annotated, Any, List

from pydantic import field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables"""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # Document store
    mongodb_uri: str = ""
    mongodb_db: str = "coop_digital"
    mongodb_tls_allow_invalid_certificates: bool = False
    mongodb_server_selection_timeout_ms: int = 10_000

    # Service
    service_name: str = "coop-gateway"
    log_level: str = "INFO"
    # Comma-separated in the environment; empty means any origin
    cors_origins: Annotated[List[str], NoDecode] = ["*"]

    # Per-operation deadlines
    crud_timeout_seconds: float = 10.0
    transfer_timeout_seconds: float = 30.0
    index_timeout_seconds: float = 30.0

    # Leaves headroom below MongoDB's 16 MiB document limit
    max_document_bytes: int = 15 * 1024 * 1024

    # Settlement slip
    qr_verify_base_url: str = "https://coopapp.com"
    bank_name: str = "Coop Saving"
    bank_code: str = "COOP"

    @field_validator("cors_origins", mode="before")
    @classmethod
    def split_cors_origins(cls, value: Any) -> Any:
        if isinstance(value, str):
            origins = [origin.strip() for origin in value.split(",") if origin.strip()]
            return origins or ["*"]
        return value


settings = Settings()
