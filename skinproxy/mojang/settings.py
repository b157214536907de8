"""API settings."""

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class ApiSettings(BaseSettings):
    """API settings"""

    name: str = "Minecraft skin proxy"
    # Comma separated list of allowed origins, empty means any origin
    origin_whitelist: str = ""
    username_ttl: int = Field(default=86400, ge=0)
    profile_ttl: int = Field(default=3600, ge=0)
    skin_ttl: int = Field(default=3600, ge=0)
    root_path: str = ""
    debug: bool = False

    model_config = SettingsConfigDict(
        env_prefix="SKINPROXY_API_", env_file=".env", extra="ignore"
    )

    @field_validator("origin_whitelist")
    def parse_origin_whitelist(cls, v):
        """Parse allowed origins."""
        return [origin.strip() for origin in v.split(",") if origin.strip()]


class UpstreamSettings(BaseSettings):
    """Mojang services settings"""

    api_url: str = "https://api.mojang.com"
    session_url: str = "https://sessionserver.mojang.com"
    timeout: float = Field(default=10.0, gt=0)

    model_config = SettingsConfigDict(
        env_prefix="SKINPROXY_UPSTREAM_", env_file=".env", extra="ignore"
    )

    @field_validator("api_url", "session_url")
    def strip_trailing_slash(cls, v):
        """Normalize base URLs."""
        return v.rstrip("/")
