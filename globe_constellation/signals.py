"""
Host-side signals consumed by the scene: the page scroll offset and the
per-frame render callback. Both hand out an unsubscribe callable so the scene
can release its registrations on teardown.
"""

from typing import Callable, List

Unsubscribe = Callable[[], None]


class ScrollSignal:
    """Latest scroll offset in pixels, plus listeners notified on change."""

    def __init__(self, offset: float = 0.0):
        self.offset = offset
        self._listeners: List[Callable[[float], None]] = []

    def subscribe(self, listener: Callable[[float], None]) -> Unsubscribe:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    @property
    def listener_count(self) -> int:
        return len(self._listeners)

    def scroll_to(self, offset: float) -> None:
        self.offset = offset
        for listener in list(self._listeners):
            listener(offset)


class FrameScheduler:
    """
    Minimal render loop: calls every registered callback with the frame delta.
    """

    def __init__(self):
        self._callbacks: List[Callable[[float], None]] = []

    def subscribe(self, callback: Callable[[float], None]) -> Unsubscribe:
        self._callbacks.append(callback)

        def unsubscribe() -> None:
            if callback in self._callbacks:
                self._callbacks.remove(callback)

        return unsubscribe

    @property
    def callback_count(self) -> int:
        return len(self._callbacks)

    def tick(self, delta: float) -> None:
        for callback in list(self._callbacks):
            callback(delta)
