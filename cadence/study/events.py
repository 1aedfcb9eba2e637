"""Synchronous change listeners with disposer handles."""

from __future__ import annotations

from typing import Callable

from loguru import logger

Listener = Callable[[], None]


class ListenerRegistry:
    """
    Ordered list of no-argument callbacks.

    Listeners run synchronously in registration order. By default an exception
    from a listener propagates and the remaining listeners are skipped; with
    isolate=True it is logged and dispatch continues.
    """

    def __init__(self, isolate: bool = False):
        self.isolate = isolate
        self._listeners: list[Listener] = []

    def subscribe(self, callback: Listener) -> Callable[[], None]:
        """Register callback and return a function that unregisters it."""
        self._listeners.append(callback)

        def dispose() -> None:
            if callback in self._listeners:
                self._listeners.remove(callback)

        return dispose

    def notify(self) -> None:
        for callback in list(self._listeners):
            if not self.isolate:
                callback()
                continue
            try:
                callback()
            except Exception:
                logger.exception(f"Listener {callback!r} failed")
