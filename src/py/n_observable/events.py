"""Payload and handler types shared by every observable container."""

from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Generic, Literal, Optional, TypeVar

K = TypeVar("K")
V = TypeVar("V")
T = TypeVar("T")

ChangeType = Literal["add", "update", "delete", "clear"]


class _Missing:
    """Marks an event field that does not apply to the event type."""

    _instance: Optional["_Missing"] = None

    def __new__(cls) -> "_Missing":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "MISSING"


MISSING: Any = _Missing()

# A handler may return an awaitable; the signal then treats it as an
# asynchronous continuation of the handler.
EventHandler = Callable[[T], Optional[Awaitable[None]]]
ErrorHandler = Callable[[Exception], Optional[Awaitable[None]]]


@dataclass(frozen=True)
class CollectionEvent(Generic[K, V]):
    """
    Describes one change to a keyed or unique-item collection.

    ``value`` and ``old_value`` are ``MISSING`` (not ``None``) when they do
    not apply: there is no ``old_value`` for ``add`` and no ``value`` for
    ``delete``. A ``clear`` event carries neither and its ``key`` is ``None``.
    """

    type: ChangeType
    key: Optional[K]
    value: Any = MISSING
    old_value: Any = MISSING

    @classmethod
    def add(cls, key: K, value: V) -> "CollectionEvent[K, V]":
        return cls("add", key, value)

    @classmethod
    def update(cls, key: K, value: V, old_value: V) -> "CollectionEvent[K, V]":
        return cls("update", key, value, old_value)

    @classmethod
    def delete(cls, key: K, old_value: V) -> "CollectionEvent[K, V]":
        return cls("delete", key, old_value=old_value)

    @classmethod
    def clear(cls) -> "CollectionEvent[K, V]":
        return cls("clear", None)

    @property
    def has_value(self) -> bool:
        return self.value is not MISSING

    @property
    def has_old_value(self) -> bool:
        return self.old_value is not MISSING

    def to_dict(self) -> dict[str, Any]:
        """
        Return the wire shape ``{type, key, value?, oldValue?}``.

        Fields that do not apply are left out rather than set to ``None``.
        """
        data: dict[str, Any] = {"type": self.type, "key": self.key}
        if self.has_value:
            data["value"] = self.value
        if self.has_old_value:
            data["oldValue"] = self.old_value
        return data
