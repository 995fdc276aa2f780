"""Runtime configuration for the studio site."""

import logging.config
import os
from functools import lru_cache
from typing import Literal

from pydantic import BaseModel, Field

SCROLL_STORAGE_KEY = "scrollTo"
CHECKOUT_CONTAINER_ID = "checkout"


class SiteConfig(BaseModel):
    """Endpoints, support contact and timing knobs shared by every service."""

    site_origin: str = "http://localhost:8888"
    form_endpoint: str = "/"
    functions_path: str = "/.netlify/functions"
    support_email: str = "contact@citeks.net"
    request_timeout: float = Field(default=15.0, ge=1.0, le=120.0)
    scroll_delay_ms: int = Field(default=60, ge=0, le=2_000)
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"

    def absolute(self, path: str) -> str:
        """Resolve *path* against the site origin (absolute URLs pass through)."""
        if path.startswith(("http://", "https://")):
            return path
        return self.site_origin.rstrip("/") + "/" + path.lstrip("/")

    @property
    def form_url(self) -> str:
        return self.absolute(self.form_endpoint)

    @property
    def checkout_session_url(self) -> str:
        return self.absolute(f"{self.functions_path.rstrip('/')}/create-checkout-session")

    @property
    def session_status_url(self) -> str:
        return self.absolute(f"{self.functions_path.rstrip('/')}/session-status")


@lru_cache(maxsize=1)
def get_config() -> SiteConfig:
    """Build the config from ``ATELIER_*`` environment variables (cached)."""
    env = {
        "site_origin": os.getenv("ATELIER_SITE_ORIGIN"),
        "form_endpoint": os.getenv("ATELIER_FORM_ENDPOINT"),
        "functions_path": os.getenv("ATELIER_FUNCTIONS_PATH"),
        "support_email": os.getenv("ATELIER_SUPPORT_EMAIL"),
        "request_timeout": os.getenv("ATELIER_REQUEST_TIMEOUT"),
        "scroll_delay_ms": os.getenv("ATELIER_SCROLL_DELAY_MS"),
        "log_level": (os.getenv("ATELIER_LOG_LEVEL") or "").upper() or None,
    }
    return SiteConfig(**{key: value for key, value in env.items() if value is not None})


def logging_config(level: str = "INFO") -> dict:
    """``dictConfig`` schema writing one JSON object per log line to stderr."""
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "json": {
                "format": '{"time": "%(asctime)s", "level": "%(levelname)s", "logger": "%(name)s", "message": "%(message)s"}',
            },
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "formatter": "json",
            },
        },
        "root": {"level": level, "handlers": ["console"]},
    }


def configure_logging(level: str = "INFO") -> None:
    logging.config.dictConfig(logging_config(level))
