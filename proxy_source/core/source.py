from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from typing import Any, Callable, Dict, List, Optional, Sequence

from .events import Subscription
from .pagination import (
    DEFAULT_LIMIT,
    Pagination,
    PruneWindow,
    compute_pagination,
    next_start,
    previous_start,
)
from .proxy import Proxy, ProxyConfig, Record
from .registry import ProxyPool, get_default_pool
from .transforms import (
    Filter,
    HandleFunc,
    Sorter,
    filter_records,
    group_records,
    prune_records,
    sort_records,
)

logger = logging.getLogger(__name__)


@dataclass
class SourceConfig:
    """
    Proxy config + pipeline config for one Source.

    Fields:

    - proxy: identity/fetch parameters, shared with every Source hashing the same
    - filters: AND-combined {@link Filter} list, None disables filtering
    - sorter: {@link Sorter}, None disables sorting
    - prune: {@link PruneWindow} exposed on read, None exposes everything
    - group: key used by the opt-in grouped view
    - paginate: attach {@link Pagination} metadata to the view
    """
    proxy: ProxyConfig
    name: Optional[str] = None
    filters: Optional[List[Filter]] = None
    sorter: Optional[Sorter] = None
    prune: Optional[PruneWindow] = None
    group: Optional[str] = None
    paginate: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "resource": self.proxy.resource,
            "params": dict(self.proxy.params),
            "filters": [f.to_dict() for f in self.filters] if self.filters is not None else None,
            "sorter": self.sorter.to_dict() if self.sorter else None,
            "prune": self.prune.to_dict() if self.prune else None,
            "group": self.group,
            "paginate": self.paginate,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> SourceConfig:
        filters = data.get("filters")
        sorter = data.get("sorter")
        prune = data.get("prune")
        return cls(
            proxy=ProxyConfig(resource=data["resource"], params=dict(data.get("params") or {})),
            name=data.get("name"),
            filters=[Filter.from_dict(f) for f in filters] if filters is not None else None,
            sorter=Sorter.from_dict(sorter) if sorter else None,
            prune=PruneWindow.from_dict(prune) if prune else None,
            group=data.get("group"),
            paginate=bool(data.get("paginate", False)),
        )


@dataclass(frozen=True)
class SourceView:
    """
    What callers see of a Source: the pruned data, plus pagination when enabled.
    Rebuilt on every read.
    """
    data: List[Any] = field(default_factory=list)
    pagination: Optional[Pagination] = None

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {"data": self.data}
        if self.pagination is not None:
            out["pagination"] = self.pagination.to_dict()
        return out


class Source:
    """
    Consumer of a shared {@link Proxy} that keeps a derived, filtered and sorted copy
    of the proxy's data and exposes a pruned/paginated {@link SourceView} of it.

    Pipeline:
    - on every raw-data event: map -> filter -> sort, stored as the derived cache
    - on every read: prune (and paginate) the cache
    - grouping is opt-in through {@link grouped_view}

    Mutators are explicit methods returning the current view. Filters, sorter and raw
    data changes recompute and notify; prune window and group key are applied lazily
    on the next read.
    """

    def __init__(
        self,
        config: SourceConfig,
        pool: Optional[ProxyPool] = None,
        *,
        on_change: Optional[Callable[[SourceView], None]] = None,
        on_loading: Optional[Callable[[bool], None]] = None,
        on_error: Optional[Callable[[Any], None]] = None,
    ) -> None:
        self.name = config.name
        self._filters = config.filters
        self._sorter = config.sorter
        self._prune = config.prune
        self._group = config.group
        self._paginate = bool(config.paginate)
        if self._paginate and self._prune is None:
            self._prune = PruneWindow(start=0, limit=DEFAULT_LIMIT)

        self.on_change = on_change
        self.on_loading = on_loading
        self.on_error = on_error

        self._handle_mapping: Optional[Callable[[List[Record]], List[Record]]] = None
        self._handle_filters: Optional[HandleFunc] = filter_records
        self._handle_sorter: Optional[HandleFunc] = sort_records
        self._handle_prune: Optional[HandleFunc] = prune_records
        self._handle_group: Optional[HandleFunc] = group_records

        self.proxy: Proxy = (pool if pool is not None else get_default_pool()).add(config.proxy)
        self._subscriptions: List[Subscription] = [
            self.proxy.on(Proxy.LOAD_DATA_EVENT, self.receive_data),
            self.proxy.on(Proxy.LOADING_EVENT, self._forward_loading),
            self.proxy.on(Proxy.ERROR_EVENT, self._forward_error),
        ]

        # A shared proxy may already hold data from another Source's load
        self._data: List[Record] = []
        if self.proxy.data:
            self.update_data(self.proxy.data)

    # ------------------------------------------------------------------
    # Pipeline
    # ------------------------------------------------------------------
    def apply_mapping(self, data: List[Record]) -> List[Record]:
        return self._handle_mapping(data) if self._handle_mapping else data

    def apply_filters(self, data: List[Record]) -> List[Record]:
        if self._filters is not None and self._handle_filters:
            return self._handle_filters(data, self._filters)
        return data

    def apply_sorter(self, data: List[Record]) -> List[Record]:
        if self._sorter is not None and self._handle_sorter:
            return self._handle_sorter(data, self._sorter)
        return data

    def apply_prune(self, data: List[Record]) -> List[Record]:
        if self._prune is not None and self._handle_prune:
            return self._handle_prune(data, self._prune)
        return data

    def apply_group(self, data: List[Record]) -> List[Any]:
        if self._group and self._handle_group:
            return self._handle_group(data, self._group)
        return data

    def update_data(self, data: Sequence[Record]) -> None:
        """Recompute the derived cache from raw data: map -> filter -> sort."""
        mapped = self.apply_mapping(list(data))
        filtered = self.apply_filters(mapped)
        self._data = list(self.apply_sorter(filtered))
        logger.debug(
            "Source recomputed",
            extra={"source": self.name, "proxy_id": self.proxy.id, "n_raw": len(data), "n_derived": len(self._data)},
        )

    def receive_data(self, data: Sequence[Record]) -> SourceView:
        """Handle new raw data from the proxy: recompute and notify."""
        self.update_data(data)
        return self._changed()

    def rebuild(self) -> SourceView:
        """Recompute from the proxy's current data and notify."""
        return self.receive_data(self.proxy.data)

    # ------------------------------------------------------------------
    # Views
    # ------------------------------------------------------------------
    @property
    def view(self) -> SourceView:
        pagination = None
        if self._paginate and self._prune is not None:
            pagination = compute_pagination(len(self._data), self._prune)
        return SourceView(data=self.apply_prune(self._data), pagination=pagination)

    def grouped_view(self) -> SourceView:
        view = self.view
        return SourceView(data=self.apply_group(view.data), pagination=view.pagination)

    @property
    def data(self) -> List[Record]:
        return self.view.data

    @property
    def derived(self) -> List[Record]:
        """The full derived cache, before pruning."""
        return list(self._data)

    @property
    def pagination(self) -> Optional[Pagination]:
        return self.view.pagination

    @property
    def filters(self) -> Optional[List[Filter]]:
        return self._filters

    @property
    def sorter(self) -> Optional[Sorter]:
        return self._sorter

    @property
    def prune(self) -> Optional[PruneWindow]:
        return self._prune

    @property
    def group(self) -> Optional[str]:
        return self._group

    @property
    def paginate(self) -> bool:
        return self._paginate

    # ------------------------------------------------------------------
    # Pipeline configuration
    # ------------------------------------------------------------------
    def set_filters(self, filters: Optional[List[Filter]]) -> SourceView:
        self._filters = filters
        # New filters invalidate the current page position
        if self._prune is not None:
            self._prune = replace(self._prune, start=0)
        return self.rebuild()

    def set_sorter(self, sorter: Optional[Sorter]) -> SourceView:
        self._sorter = sorter
        return self.rebuild()

    def set_prune(self, prune: Optional[PruneWindow]) -> SourceView:
        self._prune = prune
        return self.view

    def set_group(self, group: Optional[str]) -> SourceView:
        self._group = group
        return self.view

    def set_mapping_handler(self, handler: Optional[Callable[[List[Record]], List[Record]]]) -> SourceView:
        self._handle_mapping = handler
        self.update_data(self.proxy.data)
        return self.view

    def set_filter_handler(self, handler: Optional[HandleFunc]) -> SourceView:
        self._handle_filters = handler
        self.update_data(self.proxy.data)
        return self.view

    def set_sorter_handler(self, handler: Optional[HandleFunc]) -> SourceView:
        self._handle_sorter = handler
        self.update_data(self.proxy.data)
        return self.view

    def set_prune_handler(self, handler: Optional[HandleFunc]) -> SourceView:
        self._handle_prune = handler
        return self.view

    def set_group_handler(self, handler: Optional[HandleFunc]) -> SourceView:
        self._handle_group = handler
        return self.view

    # ------------------------------------------------------------------
    # Page navigation
    # ------------------------------------------------------------------
    def previous(self) -> SourceView:
        if self._prune is None:
            return self.view
        self._prune = replace(self._prune, start=previous_start(len(self._data), self._prune))
        return self._changed()

    def next(self) -> SourceView:
        if self._prune is None:
            return self.view
        self._prune = replace(self._prune, start=next_start(len(self._data), self._prune))
        return self._changed()

    # ------------------------------------------------------------------
    # Proxy plumbing
    # ------------------------------------------------------------------
    def load(self) -> None:
        self.proxy.load()

    def close(self) -> None:
        """Stop receiving proxy events. The shared proxy itself stays alive."""
        for sub in self._subscriptions:
            sub.cancel()
        self._subscriptions = []

    def _changed(self) -> SourceView:
        view = self.view
        if self.on_change:
            self.on_change(view)
        return view

    def _forward_loading(self, loading: bool) -> None:
        if self.on_loading:
            self.on_loading(loading)

    def _forward_error(self, reason: Any) -> None:
        if self.on_error:
            self.on_error(reason)

    def __enter__(self) -> Source:
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def __repr__(self) -> str:
        return f"Source(name={self.name!r}, proxy={self.proxy.id!r}, n={len(self._data)})"
