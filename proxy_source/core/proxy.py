from __future__ import annotations

import hashlib
import json
import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence

from .events import Callback, EventEmitter, Subscription
from .exceptions import ProxyLoadError

logger = logging.getLogger(__name__)

Record = Mapping[str, Any]
Fetcher = Callable[["ProxyConfig"], Sequence[Record]]


@dataclass
class ProxyConfig:
    """
    Identity + fetch parameters of a proxy.

    Fields:

    - resource: what to fetch (URL, table name, file path... interpreted by the fetcher)
    - params: caller-specified fetch parameters
    - id: assigned by the registry from the config hash, never part of the hash itself
    """
    resource: str
    params: Dict[str, Any] = field(default_factory=dict)
    id: Optional[str] = None

    def identity(self) -> Dict[str, Any]:
        return {"resource": self.resource, "params": self.params}


class Proxy:
    """
    Stateful fetcher shared by every Source whose config hashes identically.

    Events:
    - LOAD_DATA_EVENT: payload is the new raw data list
    - LOADING_EVENT: payload is a bool
    - ERROR_EVENT: payload is the failure reason (a {@link ProxyLoadError})
    """

    LOAD_DATA_EVENT = "load"
    LOADING_EVENT = "loading"
    ERROR_EVENT = "error"

    def __init__(self, config: ProxyConfig, fetcher: Optional[Fetcher] = None) -> None:
        self.config = config
        self.id = config.id if config.id is not None else self.get_hash(config)
        self.fetcher = fetcher
        self._data: List[Record] = []
        self._events = EventEmitter()

    @staticmethod
    def get_hash(config: ProxyConfig) -> str:
        """
        Deterministic identity of a config: SHA-1 over its canonical JSON form.
        Key order in params does not matter; the registry-assigned id is ignored.
        """
        canonical = json.dumps(config.identity(), sort_keys=True, default=str, separators=(",", ":"))
        return hashlib.sha1(canonical.encode("utf-8")).hexdigest()

    @property
    def data(self) -> List[Record]:
        return self._data

    # ------------------------------------------------------------------
    # Subscription
    # ------------------------------------------------------------------
    def on(self, event: str, callback: Callback) -> Subscription:
        return self._events.on(event, callback)

    def off(self, event: str, callback: Callback) -> bool:
        return self._events.off(event, callback)

    def listener_count(self, event: str) -> int:
        return self._events.listener_count(event)

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------
    def set_data(self, records: Sequence[Record]) -> None:
        """Push raw data directly (no fetcher involved) and notify subscribers."""
        self._data = list(records)
        self._events.emit(self.LOAD_DATA_EVENT, self._data)

    def load(self) -> None:
        """
        Fetch fresh data through the fetcher.

        Fetch failures are reported through ERROR_EVENT, never raised.
        LOADING_EVENT always brackets the attempt (True, then False).
        """
        if self.fetcher is None:
            logger.warning("Proxy has no fetcher configured", extra={"proxy_id": self.id})
            self._events.emit(
                self.ERROR_EVENT,
                ProxyLoadError(f"Proxy '{self.id}' has no fetcher", proxy_id=self.id),
            )
            return

        self._events.emit(self.LOADING_EVENT, True)
        try:
            try:
                records = list(self.fetcher(self.config))
            except Exception as e:
                logger.exception(
                    "Fetcher failed",
                    extra={"proxy_id": self.id, "resource": self.config.resource},
                )
                self._events.emit(
                    self.ERROR_EVENT,
                    ProxyLoadError(f"Proxy '{self.id}' failed to load: {e}", proxy_id=self.id, cause=e),
                )
                return
            logger.debug(
                "Proxy loaded",
                extra={"proxy_id": self.id, "n_records": len(records)},
            )
            self.set_data(records)
        finally:
            self._events.emit(self.LOADING_EVENT, False)

    def __repr__(self) -> str:
        return f"Proxy(id={self.id!r}, resource={self.config.resource!r})"
