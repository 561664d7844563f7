import math
from typing import Any, Callable, Generic, TypeVar

from .core import Signal, Subscription
from .events import EventHandler

T = TypeVar("T")
U = TypeVar("U")

_VALUE_TYPES = (bool, int, float, complex, str, bytes)


def same_value(a: Any, b: Any) -> bool:
    """
    Change-detection comparison used by every container.

    Numbers, strings and bytes of the same type compare by value, except that
    ``0.0`` and ``-0.0`` differ and NaN equals NaN, also per component of a
    complex number. Everything else compares by identity, so mutating a
    stored list in place and setting it again is not a change.
    """
    if a is b:
        return True
    if type(a) is not type(b) or not isinstance(a, _VALUE_TYPES):
        return False
    if isinstance(a, float):
        return _same_float(a, b)
    if isinstance(a, complex):
        return _same_float(a.real, b.real) and _same_float(a.imag, b.imag)
    return a == b


def _same_float(a: float, b: float) -> bool:
    if math.isnan(a):
        return math.isnan(b)
    if a == 0.0 and b == 0.0:
        return math.copysign(1.0, a) == math.copysign(1.0, b)
    return a == b


class ObservableValue(Generic[T]):
    """A single value that notifies its observers with every new value."""

    def __init__(self, initial: T) -> None:
        self._value = initial
        self._signal: Signal[T] = Signal(name=type(self).__name__)

    def get(self) -> T:
        return self._value

    def set(self, value: T) -> None:
        if same_value(self._value, value):
            return
        self._value = value
        self._signal.emit(value)

    async def set_async(self, value: T) -> None:
        """Like ``set``, but waits for asynchronous observers to finish."""
        if same_value(self._value, value):
            return
        self._value = value
        await self._signal.emit_async(value)

    def update(self, fn: Callable[[T], T]) -> None:
        """
        Set the value to ``fn(current)``.

        If ``fn`` raises, the error propagates and nothing changes.
        """
        self.set(fn(self._value))

    async def update_async(self, fn: Callable[[T], T]) -> None:
        await self.set_async(fn(self._value))

    def subscribe(self, fn: EventHandler[T]) -> Subscription:
        """Call ``fn`` with the current value now, then on every change."""
        self._signal.invoke(fn, self._value)
        return self.on_change(fn)

    def on_change(self, fn: EventHandler[T]) -> Subscription:
        return self._signal.subscribe(fn)

    def has_observers(self) -> bool:
        return self._signal.has_handlers()

    def observer_count(self) -> int:
        return self._signal.listener_count()

    def map(self, transform: Callable[[T], U]) -> "ObservableValue[U]":
        """
        Create a derived value that follows this one through ``transform``.

        The derived value applies its own change detection, so inputs that
        transform to the same output do not notify its observers.
        """
        derived: ObservableValue[U] = ObservableValue(transform(self._value))
        self.on_change(lambda value: derived.set(transform(value)))
        return derived

    def __repr__(self) -> str:
        return f"ObservableValue({self._value!r})"
