"""Application configuration via environment variables."""

from typing import Literal

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Service configuration loaded from environment variables."""

    model_config = {"env_prefix": ""}

    # Server
    host: str = Field(default="0.0.0.0", description="Server bind host")
    port: int = Field(default=8000, description="Server bind port")
    log_level: str = Field(default="info", description="Log level")

    # Document store
    store_backend: Literal["memory", "redis"] = Field(
        default="memory", description="Document store backend: 'memory' or 'redis'"
    )
    redis_url: str | None = Field(
        default=None, description="Redis URL (required when STORE_BACKEND=redis)"
    )
    store_key_prefix: str = Field(
        default="blog:", description="Key namespace for post documents in Redis"
    )

    @model_validator(mode="after")
    def _check_store(self) -> "Settings":
        if self.store_backend == "redis" and not self.redis_url:
            raise ValueError("REDIS_URL is required when STORE_BACKEND=redis")
        if not self.store_key_prefix:
            raise ValueError("STORE_KEY_PREFIX must not be empty")
        return self
