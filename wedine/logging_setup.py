"""Central logging configuration for the service.

One stdout handler on the root logger so every module logger emits without
per-module setup. Uvicorn's loggers stay visible and repeated calls (reloads,
test app factories) do not stack handlers.
"""
import logging
from logging.config import dictConfig

from .config.settings import settings


def _dict_config(level: str) -> dict:
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "default": {
                "format": "%(asctime)s %(levelname)s:%(name)s:%(message)s",
            }
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "level": level,
                "formatter": "default",
                "stream": "ext://sys.stdout",
            }
        },
        "root": {"level": level, "handlers": ["console"]},
        "loggers": {
            "uvicorn": {"level": "INFO", "handlers": ["console"], "propagate": False},
            "uvicorn.error": {"level": "INFO", "handlers": ["console"], "propagate": False},
            "uvicorn.access": {"level": "INFO", "handlers": ["console"], "propagate": False},
        },
    }


def configure_logging() -> None:
    """Configure logging once; a root logger that already has handlers is left alone."""
    root = logging.getLogger()
    if root.handlers:
        return
    dictConfig(_dict_config("DEBUG" if settings.debug else "INFO"))
