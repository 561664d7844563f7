import asyncio
import inspect
import logging
from typing import Any, Awaitable, Callable, Generic, Optional, TypeVar

from .events import ErrorHandler, EventHandler

T = TypeVar("T")

_Pending = Optional[list[Awaitable[None]]]
_OnFailure = Callable[[Exception, _Pending], None]


class Subscription:
    """
    Token returned by every subscribe call.

    Calling the token removes exactly the subscription it was returned for.
    Calling it again, or after the handler was removed some other way, does
    nothing.
    """

    __slots__ = ("_registry", "handler")

    def __init__(
        self, registry: dict["Subscription", None], handler: Callable[..., Any]
    ) -> None:
        self._registry = registry
        self.handler = handler

    @property
    def active(self) -> bool:
        return self in self._registry

    def __call__(self) -> None:
        self._registry.pop(self, None)

    def __repr__(self) -> str:
        state = "active" if self.active else "inactive"
        return f"<Subscription {self.handler!r} ({state})>"


def _add(
    registry: dict[Subscription, None], handler: Callable[..., Any]
) -> Subscription:
    token = Subscription(registry, handler)
    registry[token] = None
    return token


def _discard(registry: dict[Subscription, None], handler: Callable[..., Any]) -> None:
    for token in [t for t in registry if t.handler == handler]:
        del registry[token]


class Signal(Generic[T]):
    """
    Broadcasts payloads to persistent handlers, then to one-shot handlers.

    Handlers run in subscription order. A handler that raises does not stop
    the pass; its error goes to the error handlers, or to this module's
    logger when none are subscribed. A handler may return an awaitable:
    ``emit`` schedules it on the running loop and returns immediately, while
    ``emit_async`` waits for every awaitable its own pass produced.

    Each pass iterates a snapshot of the subscriptions present when it
    started. Handlers added during the pass do not fire in it; handlers
    removed during the pass are skipped. A one-shot handler is removed right
    before it is called, so it fires at most once even if it raises, emits
    re-entrantly, or subscribes itself again.
    """

    def __init__(self, name: Optional[str] = None) -> None:
        self.name = name
        self._handlers: dict[Subscription, None] = {}
        self._once_handlers: dict[Subscription, None] = {}
        self._error_handlers: dict[Subscription, None] = {}
        self._tasks: set[asyncio.Task[None]] = set()

    def subscribe(self, handler: EventHandler[T]) -> Subscription:
        return _add(self._handlers, handler)

    def subscribe_once(self, handler: EventHandler[T]) -> Subscription:
        return _add(self._once_handlers, handler)

    def unsubscribe(self, handler: Optional[EventHandler[T]] = None) -> None:
        """
        Remove every subscription of ``handler``, persistent and one-shot.

        Without a handler, remove all persistent and one-shot subscriptions.
        Error handlers are left in place either way.
        """
        if handler is None:
            self._handlers.clear()
            self._once_handlers.clear()
            return
        _discard(self._handlers, handler)
        _discard(self._once_handlers, handler)

    def subscribe_error(self, handler: ErrorHandler) -> Subscription:
        return _add(self._error_handlers, handler)

    def unsubscribe_error(self, handler: ErrorHandler) -> None:
        _discard(self._error_handlers, handler)

    def listener_count(self) -> int:
        return len(self._handlers) + len(self._once_handlers)

    def has_handlers(self) -> bool:
        return self.listener_count() > 0

    def emit(self, payload: T) -> int:
        """
        Call every handler with ``payload`` without waiting for awaitables.

        Returns the number of handlers that returned without raising.
        """
        return self._run(payload, None)

    async def emit_async(self, payload: T) -> int:
        """
        Call every handler with ``payload`` and wait for their awaitables.

        Never raises because of a handler; failures are routed like in
        ``emit``. Work spawned by other, overlapping emissions is not waited
        for.
        """
        pending: list[Awaitable[None]] = []
        count = self._run(payload, pending)
        if pending:
            await asyncio.gather(*pending)
        return count

    def invoke(self, handler: EventHandler[T], payload: T) -> bool:
        """
        Deliver ``payload`` to a single handler with the isolation of ``emit``.

        The handler does not need to be subscribed.
        """
        return self._call(handler, payload, None)

    def destroy(self) -> None:
        """Drop all handlers, error handlers included. New ones may be added."""
        self._handlers.clear()
        self._once_handlers.clear()
        self._error_handlers.clear()

    def _run(self, payload: T, pending: _Pending) -> int:
        count = 0
        for token in list(self._handlers):
            if token in self._handlers and self._call(token.handler, payload, pending):
                count += 1
        for token in list(self._once_handlers):
            if token not in self._once_handlers:
                continue
            del self._once_handlers[token]
            if self._call(token.handler, payload, pending):
                count += 1
        return count

    def _call(
        self, handler: Callable[[Any], Any], payload: Any, pending: _Pending
    ) -> bool:
        try:
            result = handler(payload)
        except Exception as error:
            self._handle_error(error, pending, "Handler for %s raised.")
            return False
        if inspect.isawaitable(result):
            self._track(result, self._handle_rejection, pending)
        return True

    def _handle_rejection(self, error: Exception, pending: _Pending) -> None:
        self._handle_error(error, pending, "Asynchronous handler for %s failed.")

    def _handle_error(self, error: Exception, pending: _Pending, message: str) -> None:
        if not self._error_handlers:
            logging.getLogger(__name__).error(message, self._label(), exc_info=error)
            return
        for token in list(self._error_handlers):
            if token not in self._error_handlers:
                continue
            try:
                result = token.handler(error)
            except Exception as failure:
                self._report_error_handler_failure(failure, pending)
                continue
            if inspect.isawaitable(result):
                self._track(result, self._report_error_handler_failure, pending)

    def _report_error_handler_failure(
        self, error: Exception, _pending: _Pending
    ) -> None:
        logging.getLogger(__name__).error(
            "Error handler for %s failed.", self._label(), exc_info=error
        )

    def _track(
        self, awaitable: Awaitable[Any], on_failure: _OnFailure, pending: _Pending
    ) -> None:
        if pending is not None:
            pending.append(self._settle(awaitable, on_failure))
            return
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            if inspect.iscoroutine(awaitable):
                awaitable.close()
            on_failure(
                RuntimeError(
                    "No running event loop to schedule an asynchronous handler on."
                ),
                None,
            )
            return
        # The loop only keeps weak references to tasks.
        task = loop.create_task(self._settle(awaitable, on_failure))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def _settle(self, awaitable: Awaitable[Any], on_failure: _OnFailure) -> None:
        try:
            await awaitable
        except Exception as error:
            pending: list[Awaitable[None]] = []
            on_failure(error, pending)
            if pending:
                await asyncio.gather(*pending)

    def _label(self) -> str:
        return self.name if self.name is not None else "signal"

    def __repr__(self) -> str:
        return (
            f"<Signal {self._label()} handlers={len(self._handlers)} "
            f"once={len(self._once_handlers)} errors={len(self._error_handlers)}>"
        )
