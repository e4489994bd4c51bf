"""Pydantic v2 configuration schema with strict validation."""

from pydantic import BaseModel, Field

from weatherserver.config.defaults import (
    DEFAULT_BASE_URL,
    DEFAULT_DEADLINE_SECONDS,
    DEFAULT_HOST,
    DEFAULT_LOG_FORMAT,
    DEFAULT_PORT,
    DEFAULT_USER_AGENT,
)


class ServerConfig(BaseModel):
    model_config = {"extra": "forbid"}

    host: str = DEFAULT_HOST
    port: int = Field(default=DEFAULT_PORT, ge=0, le=65535)


class UpstreamConfig(BaseModel):
    model_config = {"extra": "forbid"}

    base_url: str = DEFAULT_BASE_URL
    user_agent: str = DEFAULT_USER_AGENT
    accept: str = "application/ld+json"
    # One budget for both chained calls, not per call
    deadline_seconds: float = Field(default=DEFAULT_DEADLINE_SECONDS, gt=0.0)
    follow_redirects: bool = True


class LoggingConfig(BaseModel):
    model_config = {"extra": "forbid"}

    level: str = "INFO"
    format: str = DEFAULT_LOG_FORMAT


class ServiceConfig(BaseModel):
    model_config = {"extra": "forbid"}

    server: ServerConfig = ServerConfig()
    upstream: UpstreamConfig = UpstreamConfig()
    logging: LoggingConfig = LoggingConfig()
