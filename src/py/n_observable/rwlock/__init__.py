from contextlib import asynccontextmanager
from asyncio import Condition
from typing import AsyncGenerator, Generic, TypeVar

T = TypeVar("T")
TI = TypeVar("TI")


class RwLock(Generic[T]):
    """
    Asyncio reader/writer lock guarding a single value.

    Readers share access; a writer waits for current readers and then holds
    the value alone. A waiting writer blocks new readers so writes are not
    starved. Not re-entrant: acquiring it again from inside a held section
    of the same task deadlocks.
    """

    def __init__(self, value: T):
        self._cond = Condition()
        self._readers = 0
        self._writing = False
        self._waiting_writers = 0
        self._value = value

    @asynccontextmanager
    async def read(self) -> AsyncGenerator["T", None]:
        async with self._cond:
            await self._cond.wait_for(
                lambda: not self._writing and self._waiting_writers == 0
            )
            self._readers += 1
        try:
            yield self._value
        finally:
            async with self._cond:
                self._readers -= 1
                if self._readers == 0:
                    self._cond.notify_all()

    class Writer(Generic[TI]):
        def __init__(self, rwlock: "RwLock[TI]"):
            self._rwlock = rwlock

        def get_value(
            self,
        ) -> TI:
            return self._rwlock._value

        def set_value(
            self,
            value: TI,
        ) -> None:
            self._rwlock._value = value

    @asynccontextmanager
    async def write(self) -> AsyncGenerator["RwLock[T].Writer[T]", None]:
        async with self._cond:
            self._waiting_writers += 1
            try:
                await self._cond.wait_for(
                    lambda: not self._writing and self._readers == 0
                )
            finally:
                self._waiting_writers -= 1
                # A cancelled writer may have been the only thing blocking readers
                self._cond.notify_all()
            self._writing = True
        try:
            yield RwLock.Writer(self)
        finally:
            async with self._cond:
                self._writing = False
                self._cond.notify_all()
