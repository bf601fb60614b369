from __future__ import annotations
import os
from pathlib import Path
from typing import Literal

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from dotenv import load_dotenv

# Base .env load first
load_dotenv()

DEFAULT_DATASET_URL = "https://s3.amazonaws.com/roxiler.com/product_transaction.json"


class AppConfig(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",  # ignore unknown env keys to avoid crashes
    )

    # Environment
    environment: Literal["development", "staging", "production", "test"] = Field(default="development")
    log_level: str = Field(default="INFO")
    app_host: str = Field(default="0.0.0.0")
    app_port: int = Field(default=5000, ge=1, le=65535)

    # Paths
    logs_dir: Path = Field(default=Path(os.getenv("LOGS_DIR", "data/logs")))
    log_file: Path | None = None

    # Storage / Elastic
    elasticsearch_url: str = Field(default="http://localhost:9200")
    elastic_api_key: str | None = Field(default=None)
    elastic_index_transactions: str = Field(default="product-transactions")
    elastic_request_timeout: float = Field(default=30.0, gt=0)

    # Seed dataset
    dataset_url: str = Field(default=DEFAULT_DATASET_URL)
    dataset_timeout_seconds: float = Field(default=15.0, gt=0)

    @field_validator("log_level", mode="before")
    @classmethod
    def _normalize_log_level(cls, value: str) -> str:
        level = str(value).upper() if value else "INFO"
        allowed = {"CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG", "NOTSET"}
        if level not in allowed:
            # Fallback to INFO instead of raising to avoid boot failure
            return "INFO"
        return level

    @model_validator(mode="after")
    def _derive_paths_and_ensure_dirs(self) -> "AppConfig":
        # Layered environment loading: .env.<ENVIRONMENT> overrides base
        env_file_variant = Path(f".env.{self.environment}")
        if env_file_variant.exists():
            load_dotenv(dotenv_path=env_file_variant, override=True)
            self.elasticsearch_url = os.getenv("ELASTICSEARCH_URL", self.elasticsearch_url)
            self.elastic_api_key = os.getenv("ELASTIC_API_KEY", self.elastic_api_key)
            self.elastic_index_transactions = os.getenv(
                "ELASTIC_INDEX_TRANSACTIONS", self.elastic_index_transactions
            )
            self.dataset_url = os.getenv("DATASET_URL", self.dataset_url)

        if self.log_file is None:
            self.log_file = self.logs_dir / "app.log"

        self.logs_dir.mkdir(parents=True, exist_ok=True)
        return self


config = AppConfig()
