"""Configuration management"""

from .archive_config import ArchiveConfig, IgnoreRulesConfig
from .config_loader import ConfigLoader

__all__ = ["ArchiveConfig", "ConfigLoader", "IgnoreRulesConfig"]
