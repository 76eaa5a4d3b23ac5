from __future__ import annotations

import logging
from typing import Dict, Iterator, Mapping, Optional

from proxy_source.config.model import GlobalConfig
from proxy_source.core.proxy import Fetcher
from proxy_source.core.registry import ProxyPool
from proxy_source.core.source import Source, SourceConfig

logger = logging.getLogger(__name__)


class SourceManager(Mapping[str, Source]):
    """
    Central service for managing named sources.
    Implements the Mapping interface (dict-like); sources are built on first
    access and all share one ProxyPool, so identical configs share one Proxy.
    """

    def __init__(
        self,
        cfg_by_name: Dict[str, SourceConfig],
        pool: Optional[ProxyPool] = None,
        fetcher: Optional[Fetcher] = None,
    ):
        self._cfg_by_name = cfg_by_name
        # Only a pool built here is torn down by close()
        self._owns_pool = pool is None
        self.pool = pool if pool is not None else ProxyPool(fetcher=fetcher)
        self._built: Dict[str, Source] = {}

    @classmethod
    def from_config(cls, global_config: GlobalConfig, fetcher: Optional[Fetcher] = None) -> SourceManager:
        return cls(global_config.by_name(), fetcher=fetcher)

    def __getitem__(self, name: str) -> Source:
        # 1. Fast path: already built
        if name in self._built:
            return self._built[name]

        # 2. Check config existence
        cfg = self._cfg_by_name.get(name)
        if cfg is None:
            raise KeyError(f"Unknown source '{name}'")

        # 3. Lazy build
        logger.info("Building source", extra={"source": name, "resource": cfg.proxy.resource})
        source = Source(cfg, self.pool)
        self._built[name] = source
        return source

    def __iter__(self) -> Iterator[str]:
        return iter(self._cfg_by_name)

    def __len__(self) -> int:
        return len(self._cfg_by_name)

    def __contains__(self, name: object) -> bool:
        # Mapping's default would build the source
        return name in self._cfg_by_name

    def get(self, name: str, default=None) -> Source | None:
        try:
            return self[name]
        except KeyError:
            return default

    def is_loaded(self, name: str) -> bool:
        return name in self._built

    def refresh_all(self) -> None:
        """Reload every proxy in the pool; subscribed sources recompute on their own."""
        self.pool.load_all()

    def close(self) -> None:
        for source in self._built.values():
            source.close()
        self._built.clear()
        if self._owns_pool:
            self.pool.destroy()
