from typing import Any, Hashable, Optional
from typing_extensions import Self

from .core import Signal, Subscription
from .events import ErrorHandler, EventHandler
from .mapping import ObservableMap


class EventEmitter:
    """
    Routes payloads by topic, one ``Signal`` per topic.

    Topics need no declaration: the signal for a topic is created the first
    time anything subscribes to it. Emitting on a topic nobody subscribed to
    does nothing and reports zero handlers.
    """

    def __init__(self) -> None:
        self._signals: ObservableMap[Hashable, Signal[Any]] = ObservableMap()

    def on(self, topic: Hashable, fn: EventHandler[Any]) -> Subscription:
        return self._signal_for(topic).subscribe(fn)

    def once(self, topic: Hashable, fn: EventHandler[Any]) -> Subscription:
        return self._signal_for(topic).subscribe_once(fn)

    def off(self, topic: Hashable, fn: EventHandler[Any]) -> Self:
        signal = self._signals.get(topic)
        if signal is not None:
            signal.unsubscribe(fn)
        return self

    def on_error(self, topic: Hashable, fn: ErrorHandler) -> Subscription:
        return self._signal_for(topic).subscribe_error(fn)

    def off_error(self, topic: Hashable, fn: ErrorHandler) -> Self:
        signal = self._signals.get(topic)
        if signal is not None:
            signal.unsubscribe_error(fn)
        return self

    def emit(self, topic: Hashable, payload: Any = None) -> int:
        signal = self._signals.get(topic)
        if signal is None:
            return 0
        return signal.emit(payload)

    async def emit_async(self, topic: Hashable, payload: Any = None) -> int:
        signal = self._signals.get(topic)
        if signal is None:
            return 0
        return await signal.emit_async(payload)

    def listener_count(self, topic: Hashable) -> int:
        signal = self._signals.get(topic)
        return signal.listener_count() if signal is not None else 0

    def topics(self) -> list[Hashable]:
        return list(self._signals.keys())

    def destroy(self) -> None:
        """Tear down every topic's handlers and forget all topics."""
        for signal in self._signals.values():
            signal.destroy()
        self._signals.clear()

    def _signal_for(self, topic: Hashable) -> Signal[Any]:
        signal: Optional[Signal[Any]] = self._signals.get(topic)
        if signal is None:
            signal = Signal(name=f"topic {topic!r}")
            self._signals.set(topic, signal)
        return signal
