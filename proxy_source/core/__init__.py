"""
Core domain layer: proxies and their registry, the source pipeline,
pagination and the default transforms
"""

from .pagination import Pagination, PruneWindow
from .proxy import Proxy, ProxyConfig
from .registry import ProxyPool, get_default_pool, reset_default_pool
from .source import Source, SourceConfig, SourceView
from .transforms import Filter, Sorter

__all__ = [
    "Filter",
    "Pagination",
    "Proxy",
    "ProxyConfig",
    "ProxyPool",
    "PruneWindow",
    "Sorter",
    "Source",
    "SourceConfig",
    "SourceView",
    "get_default_pool",
    "reset_default_pool",
]
