"""
Config package export.

Keeps import sites clean and stable:
    from distributed_cache.config import CacheConfiguration, get_settings
"""

from __future__ import annotations

from .cache import CacheConfiguration
from .settings import Settings, get_settings

__all__ = ["CacheConfiguration", "Settings", "get_settings"]
