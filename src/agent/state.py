"""Observable state holders for the chat controller."""

import logging
from collections.abc import Callable
from typing import Generic, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class StateFlow(Generic[T]):
    """Holds a current value and notifies subscribers on every assignment.

    Notifications are synchronous and happen on the assigning coroutine,
    so subscribers always observe mutations in order.
    """

    def __init__(self, initial: T) -> None:
        self._value = initial
        self._subscribers: list[Callable[[T], None]] = []

    @property
    def value(self) -> T:
        return self._value

    @value.setter
    def value(self, new_value: T) -> None:
        self._value = new_value
        for callback in list(self._subscribers):
            try:
                callback(new_value)
            except Exception:
                logger.exception(f"State subscriber {callback!r} failed")

    def subscribe(self, callback: Callable[[T], None]) -> Callable[[], None]:
        """Register a callback for future assignments.

        Args:
            callback: Called with the new value after each assignment.

        Returns:
            A function that removes the subscription.
        """
        self._subscribers.append(callback)

        def unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe
