"""
Configuration settings for the store service.

Uses Pydantic Settings to load environment variables for the Cassandra
connection, the HTTP server, logging, and scatter-gather search defaults.
"""
from __future__ import annotations

from functools import lru_cache
from typing import List, Literal, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # Cassandra
    cassandra_hosts: str = Field("auto", alias="CASSANDRA_HOSTS")
    cassandra_port: int = Field(9042, alias="CASSANDRA_PORT")
    cassandra_username: str = Field("cassandra", alias="CASSANDRA_USERNAME")
    cassandra_password: str = Field("cassandra", alias="CASSANDRA_PASSWORD")
    cassandra_keyspace: str = Field("store_management", alias="CASSANDRA_KEYSPACE")
    cassandra_replication_factor: int = Field(1, alias="CASSANDRA_REPLICATION_FACTOR")
    cassandra_consistency: str = Field("QUORUM", alias="CASSANDRA_CONSISTENCY")
    cassandra_connect_timeout: float = Field(10.0, alias="CASSANDRA_CONNECT_TIMEOUT")
    cassandra_request_timeout: float = Field(10.0, alias="CASSANDRA_REQUEST_TIMEOUT")

    # Store schema / backend
    store_key_strategy: Literal["int", "composite", "uuid"] = Field(
        "int", alias="STORE_KEY_STRATEGY"
    )
    store_backend: Literal["cassandra", "memory"] = Field("cassandra", alias="STORE_BACKEND")
    seed_on_startup: bool = Field(False, alias="SEED_ON_STARTUP")

    # Application
    app_env: str = Field("development", alias="APP_ENV")
    api_host: str = Field("0.0.0.0", alias="API_HOST")
    api_port: int = Field(8080, alias="API_PORT")
    log_level: str = Field("INFO", alias="LOG_LEVEL")
    log_json: bool = Field(False, alias="LOG_JSON")

    # Search defaults
    search_max_workers: Optional[int] = Field(None, alias="SEARCH_MAX_WORKERS")
    search_timeout_seconds: Optional[float] = Field(None, alias="SEARCH_TIMEOUT_SECONDS")
    search_failure_policy: Literal["best_effort", "tolerant", "strict"] = Field(
        "tolerant", alias="SEARCH_FAILURE_POLICY"
    )
    default_page_size: int = Field(10, alias="DEFAULT_PAGE_SIZE")
    max_page_size: int = Field(100, alias="MAX_PAGE_SIZE")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    def contact_points(self) -> List[str]:
        """Explicit contact points, or an empty list when hosts are auto-detected."""
        if self.cassandra_hosts.strip().lower() == "auto":
            return []
        return [host.strip() for host in self.cassandra_hosts.split(",") if host.strip()]


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """
    Retrieve a cached instance of Settings to avoid repeated env parsing.
    """
    return Settings()


__all__ = ["Settings", "get_settings"]
