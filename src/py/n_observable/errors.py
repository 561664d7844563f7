from typing import Hashable


class ObservableError(Exception):
    """Base class for errors raised by n_observable."""


class PresenceViolation(ObservableError, LookupError):
    """
    Raised when a registry key is registered twice or accessed while absent.

    Raised before any state is touched, so the registry is unchanged.
    """

    def __init__(self, message: str, key: Hashable) -> None:
        super().__init__(message)
        self.key = key
