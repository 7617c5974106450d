"""Logging and observability"""

from .logger import LoggerSetup, get_logger, initialize_logging

__all__ = ["LoggerSetup", "get_logger", "initialize_logging"]
