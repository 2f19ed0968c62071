"""Configuration management for taskpoller."""

import os
import socket
from typing import Any, Literal, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from taskpoller.core.constants import (
    DEFAULT_CONCURRENCY,
    DEFAULT_POLL_INTERVAL,
    DEFAULT_REQUEST_TIMEOUT,
    DEFAULT_SERVER_URL,
)
from taskpoller.core.errors import InvalidConfigError

# Load .env file
load_dotenv()


def default_worker_id() -> str:
    return socket.gethostname()


class RunnerOptions(BaseModel):
    """Per-runner polling options. Immutable once a runner holds them."""

    model_config = ConfigDict(frozen=True)

    poll_interval: float = Field(default=DEFAULT_POLL_INTERVAL, gt=0, description="Seconds between polls")
    domain: Optional[str] = Field(default=None, description="Task routing domain")
    worker_id: str = Field(default_factory=default_worker_id, description="Identity reported when polling")
    concurrency: int = Field(default=DEFAULT_CONCURRENCY, ge=1, description="Runners per worker (manager only)")

    def merged(self, **overrides: Any) -> "RunnerOptions":
        """Return a copy with every non-None override applied."""
        values = {k: v for k, v in overrides.items() if v is not None}
        if not values:
            return self
        return RunnerOptions.model_validate({**self.model_dump(), **values})


class ServerConfig(BaseModel):
    """Connection settings for the queue server."""

    server_url: str = Field(default=DEFAULT_SERVER_URL, description="Queue server API root")
    key_id: Optional[str] = Field(default=None, description="Access key id")
    key_secret: Optional[str] = Field(default=None, description="Access key secret")
    request_timeout: float = Field(default=DEFAULT_REQUEST_TIMEOUT, gt=0, description="Request timeout (seconds)")


class AppConfig(BaseModel):
    """Main application configuration."""

    server: ServerConfig = Field(default_factory=ServerConfig)
    runner: RunnerOptions = Field(default_factory=RunnerOptions)
    queue: Literal["http", "memory"] = Field(default="http", description="Queue client type")

    debug: bool = Field(default=False, description="Enable debug mode")
    log_level: str = Field(default="INFO", description="Logging level")

    @classmethod
    def from_env(cls) -> "AppConfig":
        """
        Load configuration from environment variables.

        Environment variable mapping:
        - TASKPOLLER_SERVER_URL, TASKPOLLER_KEY_ID, TASKPOLLER_KEY_SECRET, TASKPOLLER_REQUEST_TIMEOUT
        - TASKPOLLER_POLL_INTERVAL, TASKPOLLER_DOMAIN, TASKPOLLER_WORKER_ID, TASKPOLLER_CONCURRENCY
        - TASKPOLLER_QUEUE: http or memory
        - TASKPOLLER_LOG_LEVEL, TASKPOLLER_DEBUG
        """
        server = _build(
            ServerConfig,
            server_url=os.getenv("TASKPOLLER_SERVER_URL", DEFAULT_SERVER_URL),
            key_id=os.getenv("TASKPOLLER_KEY_ID") or None,
            key_secret=os.getenv("TASKPOLLER_KEY_SECRET") or None,
            request_timeout=os.getenv("TASKPOLLER_REQUEST_TIMEOUT", str(DEFAULT_REQUEST_TIMEOUT)),
        )

        runner_values = {
            "poll_interval": os.getenv("TASKPOLLER_POLL_INTERVAL", str(DEFAULT_POLL_INTERVAL)),
            "domain": os.getenv("TASKPOLLER_DOMAIN") or None,
            "concurrency": os.getenv("TASKPOLLER_CONCURRENCY", str(DEFAULT_CONCURRENCY)),
        }
        worker_id = os.getenv("TASKPOLLER_WORKER_ID")
        if worker_id:
            runner_values["worker_id"] = worker_id
        runner = _build(RunnerOptions, **runner_values)

        debug = os.getenv("TASKPOLLER_DEBUG", "false").lower() in ("true", "1", "yes")
        return _build(
            cls,
            server=server,
            runner=runner,
            queue=os.getenv("TASKPOLLER_QUEUE", "http"),
            debug=debug,
            log_level=os.getenv("TASKPOLLER_LOG_LEVEL", "DEBUG" if debug else "INFO").upper(),
        )


def _build(model: type, **values: Any) -> Any:
    """Validate a config model, reporting the first bad field as InvalidConfigError."""
    try:
        return model(**values)
    except ValidationError as e:
        error = e.errors()[0]
        key = ".".join(str(part) for part in error["loc"]) or model.__name__
        raise InvalidConfigError(key, error.get("input"), error["msg"]) from e
