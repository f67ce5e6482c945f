"""Terminal result delivery onto a consumer's own thread.

A ``ConsumerHandle`` stands in for the presentation layer.  Workers never
call the consumer directly: they hand a closure to the handle's dispatcher,
which runs it on the consumer thread.  The liveness flag is read inside that
closure, right before the callback fires, so a consumer torn down while the
fetch was in flight simply never hears about the result.
"""
from __future__ import annotations

import logging
import queue
import threading
from typing import Callable, Optional, Protocol, Union

from ..entities import LocationFix, WeatherQueryResult


logger = logging.getLogger(__name__)

Task = Callable[[], None]


class WeatherCallback(Protocol):
    def on_success(self, payload: str) -> None:
        ...

    def on_error(self, message: str) -> None:
        ...


class LocationWeatherCallback(WeatherCallback, Protocol):
    def on_location_resolved(self, latitude: float, longitude: float, label: str) -> None:
        ...


class Dispatcher(Protocol):
    def post(self, task: Task) -> None:
        ...


class ImmediateDispatcher:
    """Runs tasks on the calling thread."""

    def post(self, task: Task) -> None:
        task()


class QueueDispatcher:
    """Collects tasks for the thread that owns the consumer.

    The owner calls ``run_pending`` from its event loop; workers only ever
    ``post``.
    """

    def __init__(self) -> None:
        self._tasks: "queue.Queue[Task]" = queue.Queue()

    def post(self, task: Task) -> None:
        self._tasks.put(task)

    def run_pending(self, block: bool = False, timeout: Optional[float] = None) -> int:
        executed = 0
        while True:
            try:
                task = self._tasks.get(block=block and executed == 0, timeout=timeout)
            except queue.Empty:
                return executed
            task()
            executed += 1

    @property
    def pending(self) -> int:
        return self._tasks.qsize()


class ConsumerHandle:
    """Scoped, liveness-checked delivery target for one consumer.

    ``deliver`` accepts one terminal result. The consumer itself hears at
    most one terminal callback: either that result, or the "UI update error"
    raised by a failing location notification, whichever runs first on the
    consumer thread.
    """

    def __init__(
        self,
        callback: Union[WeatherCallback, LocationWeatherCallback],
        dispatcher: Optional[Dispatcher] = None,
    ) -> None:
        self.callback = callback
        self.dispatcher = dispatcher or ImmediateDispatcher()
        self._alive = True
        self._posted = False
        self._delivered = False
        self._lock = threading.Lock()

    @property
    def alive(self) -> bool:
        return self._alive

    def close(self) -> None:
        self._alive = False

    def deliver(self, result: WeatherQueryResult) -> None:
        with self._lock:
            if self._posted:
                logger.warning("Ignoring second terminal result for %r", self.callback)
                return
            self._posted = True
        self.dispatcher.post(lambda: self._deliver_now(result))

    def notify_location_resolved(self, fix: LocationFix) -> None:
        self.dispatcher.post(lambda: self._notify_now(fix))

    # Consumer thread ----------------------------------------------------
    def _claim_terminal(self) -> bool:
        with self._lock:
            if self._delivered:
                return False
            self._delivered = True
            return True

    def _deliver_now(self, result: WeatherQueryResult) -> None:
        if not self._alive:
            logger.debug("Consumer torn down, dropping result")
            return
        if not self._claim_terminal():
            logger.debug("Terminal callback already sent, dropping result")
            return
        try:
            if result.ok:
                self.callback.on_success(result.payload)
            else:
                self.callback.on_error(result.message)
        except Exception as exc:
            logger.error("Error updating consumer with result", exc_info=exc)
            self._report_delivery_error(exc)

    def _notify_now(self, fix: LocationFix) -> None:
        if not self._alive or self._delivered:
            return
        handler = getattr(self.callback, "on_location_resolved", None)
        if handler is None:
            return
        try:
            handler(fix.latitude, fix.longitude, fix.label)
        except Exception as exc:
            logger.error("Error updating consumer with location", exc_info=exc)
            if self._claim_terminal():
                self._report_delivery_error(exc)

    def _report_delivery_error(self, exc: Exception) -> None:
        try:
            self.callback.on_error(f"UI update error: {exc}")
        except Exception:
            logger.exception("Consumer failed while reporting a delivery error")


__all__ = [
    "WeatherCallback",
    "LocationWeatherCallback",
    "Dispatcher",
    "ImmediateDispatcher",
    "QueueDispatcher",
    "ConsumerHandle",
]
