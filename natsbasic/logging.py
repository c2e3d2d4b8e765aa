import logging
import logging.config
from collections.abc import MutableMapping
from typing import Any

from natsbasic.conf import Settings

APP_NAME = "NATS-BASIC"


class ModeLoggerAdapter(logging.LoggerAdapter):
    """Prefix every record with the operating mode, e.g. ``[sub] ...``."""

    def __init__(self, logger: logging.Logger, mode: str) -> None:
        super().__init__(logger, {"mode": mode})

    @property
    def mode(self) -> str:
        return self.extra["mode"]  # type: ignore[index]

    def process(
        self, msg: Any, kwargs: MutableMapping[str, Any]
    ) -> tuple[Any, MutableMapping[str, Any]]:
        return f"[{self.mode}] {msg}", kwargs


def get_mode_logger(mode: str, name: str = "natsbasic") -> ModeLoggerAdapter:
    return ModeLoggerAdapter(logging.getLogger(name), mode)


def get_logging_config(settings: Settings) -> dict:
    log_level = "DEBUG" if settings.logging.debug else "INFO"
    handler = "rich" if settings.logging.rich else "cli"

    logging_config = {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "verbose": {
                "format": "{asctime} {name} {levelname} (pid: {process}) {message}",
                "style": "{",
            },
            "rich": {
                "format": f"{APP_NAME} {{message}}",
                "style": "{",
            },
            "plain": {
                "format": f"%(asctime)s {APP_NAME} %(message)s",
                "datefmt": "%Y/%m/%d %H:%M:%S",
            },
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "formatter": "verbose",
                "stream": "ext://sys.stderr",
            },
            "cli": {
                "class": "logging.StreamHandler",
                "formatter": "plain",
                "stream": "ext://sys.stdout",
            },
            "rich": {
                "class": "rich.logging.RichHandler",
                "level": log_level,
                "formatter": "rich",
                "log_time_format": lambda x: x.strftime("%Y-%m-%d %H:%M:%S.%f")[:-3],
                "rich_tracebacks": True,
            },
        },
        "root": {
            "handlers": ["console"],
            "level": "WARNING",
        },
        "loggers": {
            "nats": {
                "handlers": [handler],
                "level": "WARNING",
                "propagate": False,
            },
            "natsbasic": {
                "handlers": [handler],
                "level": log_level,
                "propagate": False,
            },
        },
    }

    return logging_config


def setup_logging(settings: Settings) -> None:
    logging_config = get_logging_config(settings)
    logging.config.dictConfig(logging_config)
