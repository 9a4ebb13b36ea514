"""Utility functions."""
from .config_manager import AppConfig, ConfigManager
from .logger import setup_logging
from .text_normalizer import CachedTextNormalizer, normalize, norm_key

__all__ = [
    "AppConfig", "ConfigManager",
    "setup_logging",
    "CachedTextNormalizer", "normalize", "norm_key",
]
