"""
Utilities Module
================

Common utilities shared across the application:
- Logger: Console logging with levels and context
- config: Centralized configuration management
"""

from storeagent.utils.logger import Logger
from storeagent.utils.config import get_config, Config

__all__ = ["Logger", "get_config", "Config"]
