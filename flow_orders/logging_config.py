"""
Logging configuration for Flow order tooling.

Provides structured logging for production use.
"""

import copy
import logging
import logging.config
from typing import Optional


DEFAULT_LOGGING_CONFIG = {
    "version": 1,
    "disable_existing_loggers": False,
    "filters": {
        "redact": {
            "()": "flow_orders.utils.structured_logging.CredentialRedactionFilter"
        },
        "correlation": {
            "()": "flow_orders.utils.structured_logging.CorrelationIdFilter"
        }
    },
    "formatters": {
        "standard": {
            "format": "%(asctime)s [%(levelname)s] [%(correlation_id)s] %(name)s: %(message)s",
            "datefmt": "%Y-%m-%d %H:%M:%S"
        },
        "detailed": {
            "format": (
                "%(asctime)s [%(levelname)s] [%(correlation_id)s] %(name)s:%(lineno)d "
                "- %(message)s (%(funcName)s)"
            ),
            "datefmt": "%Y-%m-%d %H:%M:%S"
        },
        "json": {
            "()": "pythonjsonlogger.jsonlogger.JsonFormatter",
            "format": "%(asctime)s %(name)s %(levelname)s %(correlation_id)s %(message)s"
        }
    },
    "handlers": {
        "console": {
            "class": "logging.StreamHandler",
            "level": "DEBUG",
            "formatter": "standard",
            "filters": ["correlation", "redact"],
            "stream": "ext://sys.stdout"
        }
    },
    "loggers": {
        "flow_orders": {
            "level": "INFO",
            "handlers": ["console"],
            "propagate": False
        }
    },
    "root": {
        "level": "WARNING",
        "handlers": ["console"]
    }
}


def _file_handler(filename: str, level: str) -> dict:
    return {
        "class": "logging.handlers.RotatingFileHandler",
        "level": level,
        "formatter": "detailed",
        "filters": ["correlation", "redact"],
        "filename": filename,
        "maxBytes": 10485760,  # 10MB
        "backupCount": 5
    }


def build_logging_config(
    level: Optional[str] = None,
    log_file: Optional[str] = None,
    json_format: bool = False
) -> dict:
    """
    Build a dictConfig mapping.

    Args:
        level: Log level for the flow_orders logger (DEBUG, INFO, ...)
        log_file: Optional log file path; errors also go to ``*_errors.log``
        json_format: Use JSON formatting

    Returns:
        Configuration for ``logging.config.dictConfig``
    """
    config = copy.deepcopy(DEFAULT_LOGGING_CONFIG)
    handlers = config["loggers"]["flow_orders"]["handlers"]

    if level:
        config["loggers"]["flow_orders"]["level"] = level.upper()

    if log_file:
        config["handlers"]["file"] = _file_handler(log_file, "DEBUG")
        error_file = log_file.replace(".log", "_errors.log")
        config["handlers"]["error_file"] = _file_handler(error_file, "ERROR")
        handlers.extend(["file", "error_file"])

    if json_format:
        for name in handlers:
            config["handlers"][name]["formatter"] = "json"

    return config


def setup_logging(
    level: Optional[str] = None,
    log_file: Optional[str] = None,
    json_format: bool = False
) -> None:
    """
    Setup logging configuration.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR)
        log_file: Optional log file path
        json_format: Use JSON formatting
    """
    logging.config.dictConfig(build_logging_config(level, log_file, json_format))


def setup_logging_from_settings(settings) -> None:
    """Apply ``log_level`` / ``log_json`` from FlowSettings."""
    setup_logging(level=settings.log_level, json_format=settings.log_json)
