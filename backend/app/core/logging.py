from __future__ import annotations

from logging.config import dictConfig

# Third-party loggers that are noisy at INFO.
_QUIET_LOGGERS = ("sqlalchemy.engine", "passlib", "multipart")


def setup_logging(log_level: str, sql_echo: bool = False) -> None:
    level = log_level.upper()
    loggers = {
        "datacanvas": {"level": level},
        "uvicorn.error": {"level": level},
        "uvicorn.access": {"level": level},
    }
    for name in _QUIET_LOGGERS:
        loggers[name] = {"level": "WARNING"}
    if sql_echo:
        loggers["sqlalchemy.engine"] = {"level": "INFO"}

    dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "default": {
                    "format": "%(asctime)s | %(levelname)s | %(name)s | %(message)s"
                }
            },
            "handlers": {
                "console": {"class": "logging.StreamHandler", "formatter": "default"}
            },
            "loggers": loggers,
            "root": {"handlers": ["console"], "level": level},
        }
    )
