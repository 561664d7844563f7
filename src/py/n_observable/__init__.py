"""Observable values and collections built on a sync/async signal.

Every container owns one ``Signal``. Mutations write state first and then
emit; ``*_async`` variants wait for asynchronous handlers to settle.
Handler errors never reach the mutating caller: they go to error handlers,
or to the ``n_observable.core`` logger.
"""

from .core import Signal, Subscription
from .errors import ObservableError, PresenceViolation
from .events import MISSING, CollectionEvent, ErrorHandler, EventHandler
from .itemset import ObservableSet
from .mapping import ObservableMap
from .registry import ObservableRegistry
from .rwlock import RwLock
from .serial import Serialized
from .topics import EventEmitter
from .value import ObservableValue, same_value

__all__ = [
    "MISSING",
    "CollectionEvent",
    "ErrorHandler",
    "EventEmitter",
    "EventHandler",
    "ObservableError",
    "ObservableMap",
    "ObservableRegistry",
    "ObservableSet",
    "ObservableValue",
    "PresenceViolation",
    "RwLock",
    "Serialized",
    "Signal",
    "Subscription",
    "same_value",
]
