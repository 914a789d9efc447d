"""
Logging configuration for DDNS Relay.

This module provides logging setup with support for console and file output.
Credentials are masked in every log record before it is written.
"""

from __future__ import annotations

import copy
import logging
import logging.handlers
import re
import sys
from typing import TYPE_CHECKING

from uvicorn.config import LOGGING_CONFIG

if TYPE_CHECKING:
    from typing import Final

    from ddns_relay.config import LoggingConfig


# Patterns matching credentials in log messages, as (pattern, replacement).
# The first capture group is kept, followed by up to 6 characters of the
# secret; the remainder is replaced with asterisks.
SENSITIVE_PATTERNS: Final[list[tuple[re.Pattern[str], str]]] = [
    # Authorization header, either the client's Basic payload
    # (base64 of "email:token") or the Bearer token sent to CloudFlare.
    # Schemes are matched case-sensitively so prose like "basic" is kept.
    (
        re.compile(
            r"((?i:Authorization:\s*)?\b(?:Basic|Bearer)\s+)([^\s\"',}]{0,6})([^\s\"',}]*)",
        ),
        r"\1\2******",
    ),
    # token=... in query strings or reprs, quoted or not
    (
        re.compile(r"(token=)([\"'])(.{0,6})([^\"']*)\2", re.IGNORECASE),
        r"\1\2\3******\2",
    ),
    (
        re.compile(r"(token=)(?![\"'])([^\s,\"&')]{0,6})([^\s,\"&')]*)", re.IGNORECASE),
        r"\1\2******",
    ),
]


# Constants
LOG_FORMAT: Final[str] = "%(asctime)s %(levelname)-5s [%(name)s] %(message)s"
DATE_FORMAT: Final[str] = "%Y-%m-%d %H:%M:%S"

PACKAGE_LOGGER: Final[str] = "ddns_relay"


class SensitiveFilter(logging.Filter):
    """
    A logging filter that masks credentials.

    The message, its arguments, and the request fields uvicorn attaches to
    access log records are all rewritten.
    """

    # Fields set on records by uvicorn's formatters
    _SENSITIVE_DICT_KEYS: tuple[str, ...] = (
        "request_line",
        "full_path",
        "path",
        "url",
        "headers",
        "scope",
    )

    @staticmethod
    def mask(value: str) -> str:
        """
        Apply all sensitive patterns to a string.

        Parameters
        ----------
        value : str
            The string to process.

        Returns
        -------
        str
            The string with credentials masked.
        """
        for pattern, replacement in SENSITIVE_PATTERNS:
            value = pattern.sub(replacement, value)
        return value

    def filter(self, record: logging.LogRecord) -> bool:
        """
        Mask credentials in a log record.

        Parameters
        ----------
        record : logging.LogRecord
            The log record to process.

        Returns
        -------
        bool
            Always True; records are rewritten, never dropped.
        """
        if record.msg:
            record.msg = self.mask(str(record.msg))

        if isinstance(record.args, dict):
            record.args = {
                k: self.mask(v) if isinstance(v, str) else v
                for k, v in record.args.items()
            }
        elif isinstance(record.args, tuple):
            record.args = tuple(
                self.mask(arg) if isinstance(arg, str) else arg for arg in record.args
            )

        for key in self._SENSITIVE_DICT_KEYS:
            value = record.__dict__.get(key)
            if isinstance(value, str):
                record.__dict__[key] = self.mask(value)

        return True


def _configure_handler(handler: logging.Handler) -> None:
    """Attach the standard formatter and the sensitive filter to a handler."""
    handler.setFormatter(logging.Formatter(fmt=LOG_FORMAT, datefmt=DATE_FORMAT))
    handler.addFilter(SensitiveFilter())


def setup_logging(config: LoggingConfig) -> None:
    """
    Set up the package logger based on configuration.

    Parameters
    ----------
    config : LoggingConfig
        Logging configuration.
    """
    logger = logging.getLogger(PACKAGE_LOGGER)
    logger.setLevel(getattr(logging, config.level.upper(), logging.INFO))
    logger.handlers.clear()

    console_handler = logging.StreamHandler()
    _configure_handler(console_handler)
    logger.addHandler(console_handler)

    if config.file_enabled:
        log_path = config.file_path_as_path
        try:
            log_path.parent.mkdir(parents=True, exist_ok=True)
            file_handler = logging.handlers.WatchedFileHandler(
                str(log_path),
                encoding="utf-8",
                delay=False,
            )
        except OSError as e:
            logger.critical("Failed to enable file logging: %s", e)
            sys.exit(1)
        _configure_handler(file_handler)
        logger.addHandler(file_handler)
        logger.info('File logging enabled: "%s".', log_path)

    logger.propagate = False


def build_uvicorn_log_config(config: LoggingConfig) -> dict:
    """
    Build the uvicorn log configuration.

    Uvicorn's default console output is kept; the sensitive filter is added
    to its handlers, and a file handler is added when file logging is on.

    Parameters
    ----------
    config : LoggingConfig
        Logging configuration from the application.

    Returns
    -------
    dict
        A uvicorn-compatible log configuration dictionary.

    Raises
    ------
    SystemExit
        If file logging is enabled but the log file cannot be created.
    """
    log_config = copy.deepcopy(LOGGING_CONFIG)

    log_config.setdefault("filters", {})["sensitive"] = {
        "()": f"{__name__}.SensitiveFilter",
    }
    log_config["handlers"]["default"].setdefault("filters", []).append("sensitive")
    log_config["handlers"]["access"].setdefault("filters", []).append("sensitive")

    if config.file_enabled:
        log_path = config.file_path_as_path
        try:
            log_path.parent.mkdir(parents=True, exist_ok=True)
            log_path.touch(exist_ok=True)
        except OSError as e:
            logging.getLogger(PACKAGE_LOGGER).critical("Failed to create log file: %s", e)
            sys.exit(1)

        log_config.setdefault("formatters", {})["file"] = {
            "format": LOG_FORMAT,
            "datefmt": DATE_FORMAT,
        }
        log_config.setdefault("handlers", {})["file"] = {
            "class": "logging.handlers.WatchedFileHandler",
            "filename": str(log_path),
            "encoding": "utf-8",
            "delay": False,
            "formatter": "file",
            "filters": ["sensitive"],
        }

        # "uvicorn.error" propagates to "uvicorn"
        log_config["loggers"]["uvicorn"]["handlers"].append("file")
        log_config["loggers"]["uvicorn.access"]["handlers"].append("file")

    return log_config
