"""
Central application configuration.

Every tunable value lives here as a typed, documented field.
Any field can be overridden at runtime via an environment variable of the
same name (case-insensitive), e.g.:

    PROVIDER_TIMEOUT_SEC=10 uvicorn consensus_engine.main:app
    export HIVE_API_KEY=...                      # enables the Hive adapter

A `.env` file at the project root is loaded automatically.

Provider credentials are read once into `settings`; components receive the
settings object explicitly so tests can build their own instance.
"""

from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,   # HIVE_API_KEY == hive_api_key
        extra="ignore",         # silently drop unknown env vars
    )

    # ------------------------------------------------------------------ #
    # Provider credentials (absent = provider disabled)                   #
    # ------------------------------------------------------------------ #
    hive_api_key: Optional[str] = Field(
        None, description="Hive AI task API token"
    )
    sensity_api_key: Optional[str] = Field(
        None, description="Sensity AI bearer token"
    )
    reality_defender_api_key: Optional[str] = Field(
        None, description="Reality Defender X-API-Key"
    )

    # ------------------------------------------------------------------ #
    # Provider endpoints                                                  #
    # ------------------------------------------------------------------ #
    hive_endpoint: str = Field(
        "https://api.thehive.ai/api/v2/task/sync", description="Hive sync task endpoint"
    )
    sensity_endpoint: str = Field(
        "https://api.sensity.ai/v1/detect", description="Sensity detection endpoint"
    )
    reality_defender_endpoint: str = Field(
        "https://api.realitydefender.com/v1/analyze", description="Reality Defender analysis endpoint"
    )

    # ------------------------------------------------------------------ #
    # Orchestration                                                       #
    # ------------------------------------------------------------------ #
    default_providers: list[str] = Field(
        ["hive_ai", "sensity_ai", "reality_defender"],
        description="Providers used when a request does not name any",
    )
    provider_timeout_sec: float = Field(
        20.0, description="Hard ceiling for one provider call (seconds)"
    )
    http_timeout_sec: float = Field(
        30.0, description="Total timeout of the shared aiohttp session (seconds)"
    )
    http_max_connections: int = Field(
        100, description="Connection pool size shared by all provider calls"
    )
    http_max_connections_per_provider: int = Field(
        20, description="Concurrent connections allowed to one provider host"
    )

    # ------------------------------------------------------------------ #
    # Moderation digest thresholds                                        #
    # ------------------------------------------------------------------ #
    deepfake_probability_threshold: float = Field(
        0.7, description="deepfake_probability above this → deepfake_detected"
    )
    manipulation_probability_threshold: float = Field(
        0.5, description="manipulation_probability above this → manipulation_detected"
    )

    # ------------------------------------------------------------------ #
    # Media storage                                                       #
    # ------------------------------------------------------------------ #
    firebase_service_account: Optional[str] = Field(
        None, description="Service-account JSON; absent = application default credentials"
    )
    firebase_storage_bucket: Optional[str] = Field(
        None, description="Cloud Storage bucket holding uploaded media"
    )
    signed_url_ttl_sec: int = Field(
        3_600, description="Lifetime of signed media URLs handed to providers"
    )

    # ------------------------------------------------------------------ #
    # Rate Limiting                                                       #
    # ------------------------------------------------------------------ #
    upstash_redis_host: Optional[str] = Field(
        None, description="Upstash REST URL; absent = in-memory rate limiting"
    )
    upstash_redis_password: Optional[str] = Field(
        None, description="Upstash REST token"
    )
    rate_limit_request_window_sec: int = Field(
        60, description="Sliding window for per-caller analysis requests (seconds)"
    )
    rate_limit_max_requests: int = Field(
        10, description="Max analyses allowed within the rate-limit window"
    )
    rate_limit_memory_limit: int = Field(
        1000, description="Max keys before in-memory rate-limit map is pruned"
    )

    # ------------------------------------------------------------------ #
    # Access                                                              #
    # ------------------------------------------------------------------ #
    service_api_keys: str = Field(
        "", description="Comma-separated X-API-Key values; empty disables the check"
    )
    allowed_origins: str = Field(
        "*", description="Comma-separated CORS origins"
    )

    @property
    def service_api_key_list(self) -> list[str]:
        return [k.strip() for k in self.service_api_keys.split(",") if k.strip()]

    @property
    def allowed_origin_list(self) -> list[str]:
        return [o.strip() for o in self.allowed_origins.split(",") if o.strip()]


# Single shared instance, import this everywhere.
settings = Settings()
