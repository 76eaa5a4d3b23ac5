from __future__ import annotations

from typing import Optional


class ProxySourceError(Exception):
    """Base exception for all proxy_source errors"""
    pass


class ConfigError(ProxySourceError):
    """Invalid or inconsistent global.json or source config entry"""
    pass


class ProxyLoadError(ProxySourceError):
    """
    A proxy could not load its data.

    Emitted through the proxy's error event rather than raised, so callers
    decide the recovery policy.
    """

    def __init__(self, message: str, proxy_id: Optional[str] = None, cause: Optional[BaseException] = None):
        super().__init__(message)
        self.proxy_id = proxy_id
        self.cause = cause
