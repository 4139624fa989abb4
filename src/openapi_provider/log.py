# Copyright (c) Meta Platforms, Inc. and affiliates.
# All rights reserved.
#
# This source code is licensed under the terms described in the LICENSE file in
# the root directory of this source tree.

import logging  # allow-direct-logging
import os
from logging.config import dictConfig

from pydantic import BaseModel, Field
from rich.console import Console
from rich.logging import RichHandler

ROOT_LOGGER_NAME = "openapi_provider"
LOGGING_ENV_VAR = "OPENAPI_PROVIDER_LOGGING"

# Level applied to every category until configured otherwise
DEFAULT_LOG_LEVEL = logging.INFO

CATEGORIES = [
    "core",
    "core::naming",
    "core::registry",
    "core::config",
    "core::client",
    "uncategorized",
]

_category_levels: dict[str, int] = dict.fromkeys(CATEGORIES, DEFAULT_LOG_LEVEL)


class LoggingConfig(BaseModel):
    category_levels: dict[str, str] = Field(
        default_factory=dict,
        description="""
Dictionary of different logging configurations for different portions (ex: core, core::naming) of the engine.
Options for log levels are: DEBUG, INFO, WARNING, ERROR, CRITICAL""",
    )


def parse_environment_config(env_config: str) -> dict[str, int]:
    """Parse the logging configuration from an environment variable string.

    The string is a semicolon-separated list of ``category=level`` pairs, for
    example ``core=debug;core::naming=warning``. The special category ``all``
    applies the level to every known category.
    """
    category_levels: dict[str, int] = {}
    for pair in env_config.split(";"):
        if not pair.strip():
            continue

        try:
            category, level = pair.split("=", 1)
            category = category.strip().lower()
            level = level.strip().upper()

            level_value = logging._nameToLevel.get(level)
            if level_value is None:
                logging.warning(
                    f"Unknown log level '{level}' for category '{category}'. Falling back to default 'INFO'."
                )
                continue

            if category == "all":
                for cat in CATEGORIES:
                    category_levels[cat] = level_value
            else:
                category_levels[category] = level_value
        except ValueError:
            logging.warning(f"Invalid logging configuration: '{pair}'. Expected format: 'category=level'.")
    return category_levels


class CustomRichHandler(RichHandler):
    def __init__(self, *args, **kwargs):
        kwargs["console"] = Console(width=150)
        super().__init__(*args, **kwargs)


def setup_logging(category_levels: dict[str, int] | None = None, log_file: str | None = None) -> None:
    """Configure the ``openapi_provider`` logger hierarchy.

    :param category_levels: per-category levels, overrides the environment
    :param log_file: optional file that receives a plain-text copy of every record
    """
    if category_levels is None:
        category_levels = parse_environment_config(os.environ.get(LOGGING_ENV_VAR, ""))
    _category_levels.update(category_levels)

    handlers = {
        "console": {
            "()": CustomRichHandler,
            "formatter": "rich",
            "rich_tracebacks": True,
            "show_time": False,
            "show_path": False,
            "markup": False,
        }
    }
    if log_file:
        handlers["file"] = {
            "class": "logging.FileHandler",
            "formatter": "plain",
            "filename": log_file,
            "mode": "a",
            "encoding": "utf-8",
        }

    loggers = {
        f"{ROOT_LOGGER_NAME}::{category}": {
            "handlers": list(handlers.keys()),
            "level": level,
            "propagate": False,
        }
        for category, level in _category_levels.items()
    }

    dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "rich": {"format": "%(name)s: %(message)s"},
                "plain": {"format": "%(asctime)s %(name)s:%(lineno)d %(levelname)s %(message)s"},
            },
            "handlers": handlers,
            "loggers": loggers,
        }
    )


def get_logger(name: str, category: str = "uncategorized") -> logging.LoggerAdapter:
    """Return a logger that emits under the given category.

    ``name`` is kept on every record as ``source`` so messages remain traceable
    to their source while levels are controlled per category.
    """
    logger = logging.getLogger(f"{ROOT_LOGGER_NAME}::{category}")
    logger.setLevel(_category_levels.get(category, _category_levels.get("uncategorized", DEFAULT_LOG_LEVEL)))
    return logging.LoggerAdapter(logger, {"source": name, "category": category})


_env_config = os.environ.get(LOGGING_ENV_VAR, "")
if _env_config:
    _category_levels.update(parse_environment_config(_env_config))
