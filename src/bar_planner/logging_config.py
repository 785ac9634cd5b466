import os
from logging.config import dictConfig

DEFAULT_LOG_FORMAT = "%(message)s"
DEFAULT_DATE_FORMAT = "[%X]"


def configure_logging(level: str | None = None) -> None:
    """Route planner logs through rich. Level defaults to BAR_PLANNER_LOG_LEVEL."""
    level = (level or os.getenv("BAR_PLANNER_LOG_LEVEL", "INFO")).upper()

    dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "default": {
                    "format": DEFAULT_LOG_FORMAT,
                    "datefmt": DEFAULT_DATE_FORMAT,
                },
            },
            "handlers": {
                "default": {
                    "class": "rich.logging.RichHandler",
                    "formatter": "default",
                    "show_path": False,
                },
            },
            "loggers": {
                "bar_planner": {
                    "handlers": ["default"],
                    "level": level,
                    "propagate": False,
                },
            },
        }
    )
