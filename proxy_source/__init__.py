"""
Top-level package for proxy_source.

This package exposes a reactive, cached data-access layer: shared proxies
deduplicated by configuration, and sources deriving filtered / sorted /
paginated views from them.
Most code should import from submodules such as:
    proxy_source.core
    proxy_source.config
    proxy_source.services
"""

__all__: list[str] = []
