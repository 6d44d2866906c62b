"""Logging helpers shared by every module of the service."""

import logging
import sys
from logging import Formatter, StreamHandler
from logging.handlers import RotatingFileHandler
from typing import ClassVar, Optional

_LOG_FILE_SIZE = 2 * 1024 * 1024  # 2MB
_LOG_BACKUP_COUNT = 2

DEFAULT_LOG_LEVEL = logging.INFO
DEFAULT_NAMESPACE = "i18nCoverage"


class LoggerUtils:
    """
    Configures the namespaced root logger once and hands out child loggers.

    Console output is kept at WARNING or above; the optional file handler
    receives everything at DEBUG so upstream traffic can be audited.
    """

    _LOGGER_NAMESPACE: ClassVar[str] = DEFAULT_NAMESPACE
    _configured: ClassVar[bool] = False

    @classmethod
    def configure(cls, level: str = "INFO", filename: str = "") -> logging.Logger:
        """
        Attach console and file handlers to the namespaced root logger.

        Args:
            level: Logging level name for the root logger
            filename: Log file path; empty disables file logging

        Returns:
            The configured root logger
        """
        root_logger = logging.getLogger(cls._LOGGER_NAMESPACE)
        if cls._configured:
            cls.set_level(level)
            return root_logger

        cls.set_level(level)

        console_handler = StreamHandler(sys.stderr)
        console_handler.setLevel(logging.WARNING)
        console_handler.setFormatter(Formatter("%(levelname)s %(name)s: %(message)s"))
        root_logger.addHandler(console_handler)

        if filename.strip():
            try:
                file_handler = RotatingFileHandler(
                    filename=filename,
                    maxBytes=_LOG_FILE_SIZE,
                    backupCount=_LOG_BACKUP_COUNT,
                    encoding="utf-8",
                )
            except (FileNotFoundError, PermissionError):
                root_logger.error("Incorrect log file name: %s - file logging disabled", filename)
            else:
                file_handler.setLevel(logging.DEBUG)
                file_handler.setFormatter(
                    Formatter("%(asctime)s %(levelname)-8s %(name)-40s %(funcName)s\t%(message)s")
                )
                root_logger.addHandler(file_handler)

        cls._configured = True
        return root_logger

    @classmethod
    def set_level(cls, level: str) -> None:
        """Set the root logger level, falling back to INFO for unknown names."""
        root_logger = logging.getLogger(cls._LOGGER_NAMESPACE)
        resolved = logging.getLevelName(level.upper())
        if isinstance(resolved, int):
            root_logger.setLevel(resolved)
        else:
            root_logger.setLevel(DEFAULT_LOG_LEVEL)
            root_logger.warning("Unknown logging level '%s' - using INFO", level)

    @staticmethod
    def get_logger(name: Optional[str] = None) -> logging.Logger:
        """Get a logger below the service namespace."""
        namespace = LoggerUtils._LOGGER_NAMESPACE
        return logging.getLogger(f"{namespace}.{name}" if name else namespace)
