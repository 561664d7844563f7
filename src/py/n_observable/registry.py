import typing
from typing import Callable, Iterable, Optional, TypeVar
from typing_extensions import Self, override

from .errors import PresenceViolation
from .mapping import ObservableMap

K = TypeVar("K")
V = TypeVar("V")


class ObservableRegistry(ObservableMap[K, V]):
    """
    An ``ObservableMap`` where keys are registered once and must exist to be read.

    ``register`` refuses keys that are already present; ``get``, ``update``
    and ``update_with`` refuse keys that are absent. Violations raise
    ``PresenceViolation`` before anything is written or emitted.
    """

    def register(self, key: K, value: V) -> Self:
        self._require_absent(key)
        return self.set(key, value)

    async def register_async(self, key: K, value: V) -> Self:
        self._require_absent(key)
        return await self.set_async(key, value)

    def unregister(self, key: K) -> bool:
        return self.delete(key)

    async def unregister_async(self, key: K) -> bool:
        return await self.delete_async(key)

    @override
    def get(self, key: K, throw_on_missing: bool = True) -> Optional[V]:
        if key not in self._data:
            if throw_on_missing:
                raise PresenceViolation(f"Not registered: {key!r}", key)
            return None
        return self._data[key]

    @override
    def __getitem__(self, key: K) -> V:
        return typing.cast(V, self.get(key))

    def update(self, key: K, value: V) -> Self:
        self._require_present(key)
        return self.set(key, value)

    async def update_async(self, key: K, value: V) -> Self:
        self._require_present(key)
        return await self.set_async(key, value)

    def update_with(self, key: K, transform: Callable[[V], V]) -> Self:
        """
        Replace the value of ``key`` with ``transform(current)``.

        If ``transform`` raises, the error propagates and nothing changes.
        """
        current = typing.cast(V, self.get(key))
        return self.set(key, transform(current))

    async def update_with_async(self, key: K, transform: Callable[[V], V]) -> Self:
        current = typing.cast(V, self.get(key))
        return await self.set_async(key, transform(current))

    def has_all(self, keys: Iterable[K]) -> bool:
        return all(key in self._data for key in keys)

    def _require_absent(self, key: K) -> None:
        if key in self._data:
            raise PresenceViolation(f"Already registered: {key!r}", key)

    def _require_present(self, key: K) -> None:
        if key not in self._data:
            raise PresenceViolation(f"Cannot update: {key!r} is not registered", key)
