import asyncio
import logging
import os
import sys
from typing import Optional, TextIO

from pydantic import Field, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from .errors import ConfigurationError

logger = logging.getLogger(__name__)

DEFAULT_API_BASE = "https://api.unsplash.com"


class Configuration(BaseSettings):
    """Process-wide settings, read from the environment (or a local .env file) at startup."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    unsplash_access_key: str = Field(..., min_length=1)
    unsplash_api_base: str = DEFAULT_API_BASE
    # None means no client-side timeout
    unsplash_timeout: Optional[float] = None

    host: str = "0.0.0.0"
    port: int = 8080
    mcp_transport: str = "streamable-http"
    mcp_json_response: bool = False
    mcp_stateless_http: bool = False
    log_level: str = "INFO"


def load_configuration(**overrides) -> Configuration:
    """Build the configuration, turning a missing or invalid access key into a ConfigurationError."""
    try:
        return Configuration(**overrides)
    except ValidationError as e:
        fields = ", ".join(".".join(str(p) for p in err["loc"]).upper() for err in e.errors())
        raise ConfigurationError(f"Invalid or missing configuration: {fields}") from e


def configure_logging(level: Optional[str] = None, stream: Optional[TextIO] = None) -> None:
    logging.basicConfig(level=(level or os.getenv("LOG_LEVEL", "INFO")).upper(), stream=stream or sys.stdout,
                        format='%(levelname)s: %(message)s')
    logging.getLogger("urllib3").setLevel(logging.INFO)


def _log_uncaught(exc_type, exc, tb):
    if issubclass(exc_type, KeyboardInterrupt):
        sys.__excepthook__(exc_type, exc, tb)
        return
    logger.critical("Uncaught exception, exiting", exc_info=(exc_type, exc, tb))


def _exit_on_loop_error(loop: asyncio.AbstractEventLoop, context: dict) -> None:
    logger.critical("Unhandled asynchronous error: %s", context.get("message"), exc_info=context.get("exception"))
    logging.shutdown()
    os._exit(1)


def install_fatal_handlers(loop: Optional[asyncio.AbstractEventLoop] = None) -> None:
    """Log uncaught errors and terminate with status 1; the hosting platform restarts the process."""
    sys.excepthook = _log_uncaught
    if loop is not None:
        loop.set_exception_handler(_exit_on_loop_error)
