from __future__ import annotations

import logging
from typing import Dict, List, Optional

from .proxy import Fetcher, Proxy, ProxyConfig

logger = logging.getLogger(__name__)


class ProxyPool:
    """
    Registry of live proxies keyed by config hash.

    Purpose:
    - Deduplicates fetchers: every Source built from an identical config shares one {@link Proxy}
    - Single place to force-refresh all cached fetchers ({@link load_all})

    Design Notes:
    - Enforces the invariant: at most one Proxy per distinct config hash
    - Lookup misses never raise: 'get' returns None and 'remove' returns False
    - Pools are plain objects; pass one explicitly to Sources, or use the lazily
      created process-wide pool from {@link get_default_pool}
    """

    def __init__(self, fetcher: Optional[Fetcher] = None):
        self._fetcher = fetcher
        self._pool: Dict[str, Proxy] = {}

    def add(self, config: ProxyConfig) -> Proxy:
        """
        Return the Proxy for config, creating it on first sight of its hash.

        :param config: the proxy config; its 'id' is set to the hash when a new Proxy is created
        :return: the (possibly shared) Proxy
        """
        code = Proxy.get_hash(config)
        proxy = self._pool.get(code)
        if proxy is None:
            config.id = code
            proxy = Proxy(config, fetcher=self._fetcher)
            self._pool[code] = proxy
            logger.debug("Proxy registered", extra={"proxy_id": code, "resource": config.resource})
        return proxy

    def remove(self, code: str) -> bool:
        removed = self._pool.pop(code, None) is not None
        if removed:
            logger.debug("Proxy removed", extra={"proxy_id": code})
        return removed

    def get(self, code: str) -> Optional[Proxy]:
        return self._pool.get(code)

    def load_all(self) -> None:
        """Call load() on every registered proxy."""
        logger.info("Reloading all proxies", extra={"n_proxies": len(self._pool)})
        for proxy in list(self._pool.values()):
            proxy.load()

    def destroy(self) -> None:
        self._pool = {}

    def hashes(self) -> List[str]:
        return list(self._pool)

    def __contains__(self, code: object) -> bool:
        return code in self._pool

    def __len__(self) -> int:
        return len(self._pool)


_default_pool: Optional[ProxyPool] = None


def get_default_pool() -> ProxyPool:
    """Process-wide pool, created on first access."""
    global _default_pool
    if _default_pool is None:
        _default_pool = ProxyPool()
    return _default_pool


def reset_default_pool() -> None:
    """
    Discard every entry of the process-wide pool and release it, so the next
    {@link get_default_pool} call starts empty. Safe when never initialised.
    """
    global _default_pool
    if _default_pool is not None:
        _default_pool.destroy()
        logger.debug("Default proxy pool reset")
    _default_pool = None
