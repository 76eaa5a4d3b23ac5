"""
Config package for proxy_source.

Responsible for:
- config models (GlobalConfig)
- config I/O helpers (load_global_config / parse_source_entry)
"""

from .model import GlobalConfig
from .loader import load_global_config, parse_source_entry

__all__ = ["GlobalConfig", "load_global_config", "parse_source_entry"]
