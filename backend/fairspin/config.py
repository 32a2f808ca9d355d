"""Application configuration for the provably-fair RNG service."""
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Server settings, overridable via FAIRSPIN_* environment variables."""

    model_config = SettingsConfigDict(env_prefix="FAIRSPIN_")

    # Server
    log_level: str = "INFO"
    redis_url: str = "redis://localhost:6379/0"

    # Protocol
    protocol_version: str = "1.0"

    # Seed material
    server_seed_bytes: int = 32
    client_seed_bytes: int = 16
    max_client_seed_length: int = 256

    # Rejection sampling: HMAC re-derivations allowed after the first digest
    max_extension_rounds: int = 16

    # Redis TTLs
    idempotency_ttl_seconds: int = 3600
    lock_ttl_seconds: int = 30  # Auto-expire lock after 30s if process crashes

    # In-memory RNG sessions; least recently used players are evicted past this
    max_sessions: int = 10_000


settings = Settings()
