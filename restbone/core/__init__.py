"""
Core utilities and configuration for restbone.

This package provides core functionality including logging configuration,
settings, error types, name inflection and database setup.
"""

from restbone.core.logging_config import get_logger, setup_logging

__all__ = ["get_logger", "setup_logging"]
