"""Cache configuration settings."""

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class CacheSettings(BaseSettings):
    """Base cache configuration."""

    # Optional prefix shared by every cache key of this deployment
    namespace: str = ""
    edge_enable: bool = True
    edge_default_ttl: int = Field(default=3600, ge=0)
    max_items: int = Field(default=10000, gt=0)
    max_key_length: int = Field(default=2048, gt=0)

    model_config = SettingsConfigDict(
        env_prefix="SKINPROXY_CACHE_", env_file=".env", extra="ignore"
    )


class CacheRedisSettings(BaseSettings):
    """Redis cache backend configuration."""

    host: str | None = None
    port: int = Field(default=6379, ge=1, le=65535)
    password: SecretStr | None = None
    db: int = Field(default=0, ge=0)

    model_config = SettingsConfigDict(
        env_prefix="SKINPROXY_CACHE_REDIS_", env_file=".env", extra="ignore"
    )
