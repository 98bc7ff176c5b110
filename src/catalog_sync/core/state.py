# src/catalog_sync/core/state.py
from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Generic, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")

Listener = Callable[[T], None]


class StateCell(Generic[T]):
    """
    Beobachtbare "latest value"-Zelle mit genau einem Schreiber.

    Werte werden immer komplett ersetzt; Listener erhalten den neuen Snapshot
    synchron beim Publizieren. Ein fehlerhafter Listener blockiert die anderen nicht.
    """

    def __init__(self, initial: T) -> None:
        self._value = initial
        self._listeners: list[Listener[T]] = []

    @property
    def value(self) -> T:
        return self._value

    def set(self, value: T) -> None:
        self._value = value
        for listener in list(self._listeners):
            self._notify(listener, value)

    @staticmethod
    def _notify(listener: Listener[T], value: T) -> None:
        try:
            listener(value)
        except Exception:
            logger.exception("State listener raised an exception")

    def update(self, transform: Callable[[T], T]) -> T:
        new_value = transform(self._value)
        self.set(new_value)
        return new_value

    def subscribe(self, listener: Listener[T], *, emit_current: bool = True) -> Callable[[], None]:
        """Registriert einen Listener und gibt eine Funktion zum Abmelden zurück."""
        if not callable(listener):
            raise TypeError("listener must be callable")
        if listener not in self._listeners:
            self._listeners.append(listener)
        if emit_current:
            self._notify(listener, self._value)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    @property
    def subscriber_count(self) -> int:
        return len(self._listeners)
