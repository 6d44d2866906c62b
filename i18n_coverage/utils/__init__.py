"""Shared utilities."""

from .logger_utils import LoggerUtils

__all__ = ["LoggerUtils"]
