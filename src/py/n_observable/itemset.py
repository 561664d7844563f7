from typing import (
    AbstractSet,
    Callable,
    Generic,
    Iterable,
    Iterator,
    KeysView,
    Optional,
    TypeVar,
    Union,
)
from typing_extensions import Self

from .core import Signal, Subscription
from .events import CollectionEvent, EventHandler

T = TypeVar("T")
U = TypeVar("U")

SetLike = Union["ObservableSet[T]", AbstractSet[T]]


class ObservableSet(Generic[T]):
    """
    An insertion-ordered set that emits a ``CollectionEvent`` after each change.

    Events use ``True`` as the value of a present item: ``add`` carries
    ``value=True`` and ``delete`` carries ``old_value=True``. The set-algebra
    methods never notify; they accept another ``ObservableSet`` or any plain
    set and return a new ``ObservableSet``.
    """

    def __init__(self, values: Optional[Iterable[T]] = None) -> None:
        self._signal: Signal[CollectionEvent[T, bool]] = Signal(
            name=type(self).__name__
        )
        self._items: dict[T, None] = dict.fromkeys(values) if values is not None else {}

    @property
    def size(self) -> int:
        return len(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[T]:
        return iter(self._items)

    def __contains__(self, value: object) -> bool:
        return value in self._items

    def add(self, value: T) -> Self:
        if value not in self._items:
            self._items[value] = None
            self._signal.emit(CollectionEvent.add(value, True))
        return self

    async def add_async(self, value: T) -> Self:
        if value not in self._items:
            self._items[value] = None
            await self._signal.emit_async(CollectionEvent.add(value, True))
        return self

    def delete(self, value: T) -> bool:
        if value not in self._items:
            return False
        del self._items[value]
        self._signal.emit(CollectionEvent.delete(value, True))
        return True

    async def delete_async(self, value: T) -> bool:
        if value not in self._items:
            return False
        del self._items[value]
        await self._signal.emit_async(CollectionEvent.delete(value, True))
        return True

    def has(self, value: T) -> bool:
        return value in self._items

    def clear(self) -> None:
        if not self._items:
            return
        self._items.clear()
        self._signal.emit(CollectionEvent.clear())

    async def clear_async(self) -> None:
        if not self._items:
            return
        self._items.clear()
        await self._signal.emit_async(CollectionEvent.clear())

    def values(self) -> KeysView[T]:
        return self._items.keys()

    def on_change(self, fn: EventHandler[CollectionEvent[T, bool]]) -> Subscription:
        return self._signal.subscribe(fn)

    def has_observers(self) -> bool:
        return self._signal.has_handlers()

    def observer_count(self) -> int:
        return self._signal.listener_count()

    def union(self, other: SetLike[T]) -> "ObservableSet[T]":
        return ObservableSet([*self._items, *other])

    def intersection(self, other: SetLike[T]) -> "ObservableSet[T]":
        return ObservableSet(value for value in self._items if value in other)

    def difference(self, other: SetLike[T]) -> "ObservableSet[T]":
        return ObservableSet(value for value in self._items if value not in other)

    def symmetric_difference(self, other: SetLike[T]) -> "ObservableSet[T]":
        result = [value for value in self._items if value not in other]
        result.extend(value for value in other if value not in self._items)
        return ObservableSet(result)

    def is_subset_of(self, other: SetLike[T]) -> bool:
        return all(value in other for value in self._items)

    def is_superset_of(self, other: SetLike[T]) -> bool:
        return all(value in self._items for value in other)

    def is_disjoint_from(self, other: SetLike[T]) -> bool:
        return not any(value in self._items for value in other)

    def map(self, transform: Callable[[T], U]) -> "ObservableSet[U]":
        return ObservableSet(transform(value) for value in list(self._items))

    def filter(self, predicate: Callable[[T], bool]) -> "ObservableSet[T]":
        return ObservableSet(value for value in list(self._items) if predicate(value))

    def to_list(self) -> list[T]:
        return list(self._items)

    def to_json(self) -> list[T]:
        return self.to_list()

    def __repr__(self) -> str:
        return f"ObservableSet({list(self._items)!r})"
