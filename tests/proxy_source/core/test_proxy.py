from __future__ import annotations

from proxy_source.core.exceptions import ProxyLoadError
from proxy_source.core.proxy import Proxy, ProxyConfig


def _record_events(proxy: Proxy):
    events = []
    proxy.on(Proxy.LOAD_DATA_EVENT, lambda d: events.append(("load", d)))
    proxy.on(Proxy.LOADING_EVENT, lambda v: events.append(("loading", v)))
    proxy.on(Proxy.ERROR_EVENT, lambda r: events.append(("error", r)))
    return events


def test_get_hash_ignores_param_order_and_id():
    a = ProxyConfig(resource="users", params={"page": 1, "q": "x"})
    b = ProxyConfig(resource="users", params={"q": "x", "page": 1}, id="whatever")

    assert Proxy.get_hash(a) == Proxy.get_hash(b)
    assert Proxy.get_hash(a) != Proxy.get_hash(ProxyConfig(resource="users", params={"page": 2, "q": "x"}))
    assert Proxy.get_hash(a) != Proxy.get_hash(ProxyConfig(resource="orders", params={"page": 1, "q": "x"}))


def test_load_brackets_fetch_with_loading_events():
    rows = [{"id": 1}, {"id": 2}]
    proxy = Proxy(ProxyConfig(resource="users"), fetcher=lambda cfg: rows)
    events = _record_events(proxy)

    proxy.load()

    assert events == [("loading", True), ("load", rows), ("loading", False)]
    assert proxy.data == rows


def test_fetcher_failure_is_emitted_not_raised():
    def boom(cfg):
        raise RuntimeError("network down")

    proxy = Proxy(ProxyConfig(resource="users"), fetcher=boom)
    events = _record_events(proxy)

    proxy.load()

    kinds = [kind for kind, _ in events]
    assert kinds == ["loading", "error", "loading"]
    reason = events[1][1]
    assert isinstance(reason, ProxyLoadError)
    assert isinstance(reason.cause, RuntimeError)
    assert reason.proxy_id == proxy.id
    assert proxy.data == []


def test_load_without_fetcher_reports_error():
    proxy = Proxy(ProxyConfig(resource="users"))
    events = _record_events(proxy)

    proxy.load()

    assert len(events) == 1
    assert events[0][0] == "error"
    assert isinstance(events[0][1], ProxyLoadError)


def test_set_data_emits_load_event():
    proxy = Proxy(ProxyConfig(resource="users"))
    events = _record_events(proxy)

    proxy.set_data(({"id": 1},))

    assert proxy.data == [{"id": 1}]
    assert events == [("load", [{"id": 1}])]
