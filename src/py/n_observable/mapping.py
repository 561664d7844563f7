from typing import (
    Any,
    Callable,
    Generic,
    ItemsView,
    Iterable,
    Iterator,
    KeysView,
    Mapping,
    Optional,
    TypeVar,
    Union,
    ValuesView,
)
from typing_extensions import Self

from .core import Signal, Subscription
from .events import CollectionEvent, EventHandler
from .value import same_value

K = TypeVar("K")
V = TypeVar("V")
U = TypeVar("U")


class ObservableMap(Generic[K, V]):
    """
    A dict-like store that emits a ``CollectionEvent`` after each change.

    State is always written before handlers run, so a handler reading the
    map sees the new contents. Setting a key to the value it already holds
    (per ``same_value``) changes nothing and emits nothing.

    Concurrent ``*_async`` mutations are not serialized: while one awaits its
    handlers, another may change the map and notify in between. Wrap the map
    in ``Serialized`` when callers need one-at-a-time mutations.
    """

    def __init__(
        self, entries: Optional[Union[Mapping[K, V], Iterable[tuple[K, V]]]] = None
    ) -> None:
        self._signal: Signal[CollectionEvent[K, V]] = Signal(name=type(self).__name__)
        self._data: dict[K, V] = dict(entries) if entries is not None else {}

    @property
    def size(self) -> int:
        return len(self._data)

    def __len__(self) -> int:
        return len(self._data)

    def __iter__(self) -> Iterator[K]:
        return iter(self._data)

    def __contains__(self, key: object) -> bool:
        return key in self._data

    def __getitem__(self, key: K) -> V:
        return self._data[key]

    def set(self, key: K, value: V) -> Self:
        event = self._write(key, value)
        if event is not None:
            self._signal.emit(event)
        return self

    async def set_async(self, key: K, value: V) -> Self:
        event = self._write(key, value)
        if event is not None:
            await self._signal.emit_async(event)
        return self

    def get(self, key: K) -> Optional[V]:
        return self._data.get(key)

    def has(self, key: K) -> bool:
        return key in self._data

    def delete(self, key: K) -> bool:
        event = self._remove(key)
        if event is None:
            return False
        self._signal.emit(event)
        return True

    async def delete_async(self, key: K) -> bool:
        event = self._remove(key)
        if event is None:
            return False
        await self._signal.emit_async(event)
        return True

    def clear(self) -> None:
        if not self._data:
            return
        self._data.clear()
        self._signal.emit(CollectionEvent.clear())

    async def clear_async(self) -> None:
        if not self._data:
            return
        self._data.clear()
        await self._signal.emit_async(CollectionEvent.clear())

    def keys(self) -> KeysView[K]:
        return self._data.keys()

    def values(self) -> ValuesView[V]:
        return self._data.values()

    def items(self) -> ItemsView[K, V]:
        return self._data.items()

    def on_change(self, fn: EventHandler[CollectionEvent[K, V]]) -> Subscription:
        return self._signal.subscribe(fn)

    def has_observers(self) -> bool:
        return self._signal.has_handlers()

    def observer_count(self) -> int:
        return self._signal.listener_count()

    def map(self, fn: Callable[[V, K], U]) -> "ObservableMap[K, U]":
        """Build a new, unlinked map holding ``fn(value, key)`` for each entry."""
        result: ObservableMap[K, U] = ObservableMap()
        for key, value in list(self._data.items()):
            result.set(key, fn(value, key))
        return result

    def filter(self, predicate: Callable[[V, K], bool]) -> "ObservableMap[K, V]":
        result: ObservableMap[K, V] = ObservableMap()
        for key, value in list(self._data.items()):
            if predicate(value, key):
                result.set(key, value)
        return result

    def to_dict(self) -> dict[K, V]:
        return dict(self._data)

    def to_json(self) -> list[list[Any]]:
        return [[str(key), value] for key, value in self._data.items()]

    def _write(self, key: K, value: V) -> Optional[CollectionEvent[K, V]]:
        if key in self._data:
            old_value = self._data[key]
            if same_value(old_value, value):
                return None
            self._data[key] = value
            return CollectionEvent.update(key, value, old_value)
        self._data[key] = value
        return CollectionEvent.add(key, value)

    def _remove(self, key: K) -> Optional[CollectionEvent[K, V]]:
        if key not in self._data:
            return None
        return CollectionEvent.delete(key, self._data.pop(key))

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._data!r})"
