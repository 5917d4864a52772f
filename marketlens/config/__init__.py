"""Configuration module - Settings and logging"""

from .settings import Settings, settings, Environment, LogLevel
from .log_setup import setup_logging

__all__ = [
    "Settings", "settings", "Environment", "LogLevel",
    "setup_logging"
]
