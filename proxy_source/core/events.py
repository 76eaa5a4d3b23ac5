from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Dict, List

Callback = Callable[[Any], None]


@dataclass
class Subscription:
    """
    Handle returned by {@link EventEmitter.on}.

    Calling 'cancel' stops future deliveries to the callback. Cancelling twice is harmless.
    """
    emitter: "EventEmitter"
    event: str
    callback: Callback

    def cancel(self) -> None:
        self.emitter.off(self.event, self.callback)


class EventEmitter:
    """
    Minimal synchronous publish/subscribe channel.

    Design Notes:
    - Delivery happens inside 'emit', in registration order, on the caller's thread
    - Each emission iterates over a snapshot of the subscribers, so a callback that
      unsubscribes (or subscribes) during delivery only affects later emissions
    - Callback exceptions propagate to the emitter's caller
    """

    def __init__(self) -> None:
        self._listeners: Dict[str, List[Callback]] = {}

    def on(self, event: str, callback: Callback) -> Subscription:
        self._listeners.setdefault(event, []).append(callback)
        return Subscription(self, event, callback)

    def off(self, event: str, callback: Callback) -> bool:
        """
        Remove one registration of callback for event.
        :return: True if a registration was removed
        """
        listeners = self._listeners.get(event)
        if not listeners:
            return False
        try:
            listeners.remove(callback)
        except ValueError:
            return False
        if not listeners:
            del self._listeners[event]
        return True

    def emit(self, event: str, payload: Any = None) -> int:
        """
        Deliver payload to every subscriber of event.
        :return: the number of callbacks invoked
        """
        listeners = list(self._listeners.get(event, ()))
        for callback in listeners:
            callback(payload)
        return len(listeners)

    def listener_count(self, event: str) -> int:
        return len(self._listeners.get(event, ()))
