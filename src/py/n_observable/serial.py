import inspect
from typing import Awaitable, Callable, Generic, TypeVar, Union

from .rwlock import RwLock

C = TypeVar("C")
R = TypeVar("R")


class Serialized(Generic[C]):
    """
    Runs operations on a container one mutation at a time.

    Containers do not order overlapping ``*_async`` mutations themselves.
    Routing every mutation through ``mutate`` makes each one, handlers
    included, finish before the next starts, and ``read`` waits for the
    mutation in flight. Handlers triggered by ``mutate`` must not call
    ``mutate`` or ``read`` on the same wrapper; that deadlocks.
    """

    def __init__(self, container: C) -> None:
        self._lock: RwLock[C] = RwLock(container)
        self.container = container

    async def mutate(self, operation: Callable[[C], Union[Awaitable[R], R]]) -> R:
        async with self._lock.write() as writer:
            result = operation(writer.get_value())
            if inspect.isawaitable(result):
                return await result
            return result

    async def read(self, operation: Callable[[C], R]) -> R:
        async with self._lock.read() as container:
            return operation(container)
