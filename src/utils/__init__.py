"""Utility helpers for Gradient Surface Lab."""

from .config_loader import AppConfig, ConfigError, load_app_config
from .doc_generator import generate_config_docs
from .logger import configure_logging, get_logger

__all__ = [
    "AppConfig",
    "ConfigError",
    "load_app_config",
    "generate_config_docs",
    "configure_logging",
    "get_logger",
]
