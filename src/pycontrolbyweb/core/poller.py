"""
Background poll loop.

Repeatedly fetches device state on a worker thread and notifies
listeners. The loop stops itself on the first failure and reports it;
it never retries on its own.
"""

import logging
import threading
from typing import Any, Callable, List, Optional

from pycontrolbyweb.core.error_formatting import ErrorLogger
from pycontrolbyweb.core.errors import (
    OPERATIONAL_ERRORS,
    ControlByWebError,
    ErrorCodes,
    PollError,
    wrap_external_error,
)
from pycontrolbyweb.models.common import DEFAULT_POLL_INTERVAL

PolledListener = Callable[[Any], None]
PollFailedListener = Callable[[ControlByWebError], None]


class PollLoop:
    """
    Fetch-and-notify loop running on a daemon thread.

    stop() only requests cancellation and returns immediately; a fetch
    already in flight completes and may deliver one more notification.
    Use join() or close() to wait for the worker to exit.

    Example:
        >>> loop = PollLoop(controller.get_state, interval=5.0)
        >>> loop.add_polled_listener(lambda state: print(state))
        >>> loop.start()
        >>> ...
        >>> loop.close()
    """

    def __init__(self, fetch: Callable[[], Any], interval: float = DEFAULT_POLL_INTERVAL, name: str = "PollLoop"):
        if interval < 0:
            raise ValueError(f"Poll interval must not be negative, got {interval}")
        self._fetch = fetch
        self.interval = interval
        self.name = name
        self._lock = threading.Lock()
        self._polling = False
        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None
        self._polled_listeners: List[PolledListener] = []
        self._failed_listeners: List[PollFailedListener] = []
        self.logger = logging.getLogger(__name__)
        self.error_logger = ErrorLogger(logger_name=__name__)

    @property
    def is_polling(self) -> bool:
        return self._polling

    def add_polled_listener(self, listener: PolledListener) -> None:
        with self._lock:
            if listener not in self._polled_listeners:
                self._polled_listeners.append(listener)

    def remove_polled_listener(self, listener: PolledListener) -> None:
        with self._lock:
            if listener in self._polled_listeners:
                self._polled_listeners.remove(listener)

    def add_poll_failed_listener(self, listener: PollFailedListener) -> None:
        with self._lock:
            if listener not in self._failed_listeners:
                self._failed_listeners.append(listener)

    def remove_poll_failed_listener(self, listener: PollFailedListener) -> None:
        with self._lock:
            if listener in self._failed_listeners:
                self._failed_listeners.remove(listener)

    def start(self) -> None:
        """Start polling. Does nothing if the loop is already running."""
        with self._lock:
            if self._polling:
                self.logger.debug(f"{self.name} already polling")
                return
            self._polling = True
            self._stop_event = threading.Event()
            self._thread = threading.Thread(
                target=self._poll_loop,
                args=(self._stop_event,),
                name=self.name,
                daemon=True,
            )
            self._thread.start()
        self.logger.info(f"{self.name} started (interval {self.interval}s)")

    def stop(self) -> None:
        """Request the loop to stop; returns without waiting for it."""
        with self._lock:
            if not self._polling:
                return
            self._polling = False
            self._stop_event.set()
        self.logger.info(f"{self.name} stop requested")

    def join(self, timeout: Optional[float] = None) -> bool:
        """
        Wait for the worker thread to exit.

        Returns:
            True if the worker is no longer running
        """
        thread = self._thread
        if thread is None or thread is threading.current_thread():
            return True
        thread.join(timeout)
        return not thread.is_alive()

    def close(self, timeout: Optional[float] = None) -> bool:
        self.stop()
        return self.join(timeout)

    def _poll_loop(self, stop_event: threading.Event) -> None:
        while not stop_event.is_set():
            try:
                state = self._fetch()
            except OPERATIONAL_ERRORS as e:
                self._fail(stop_event, e)
                return
            except Exception as e:
                error = wrap_external_error(
                    e,
                    f"Unexpected error while polling: {e}",
                    error_class=PollError,
                    poller=self.name,
                )
                error.error_code = ErrorCodes.POLL_FAILURE
                self._fail(stop_event, error)
                return

            self._notify(self._snapshot(self._polled_listeners), state)

            if stop_event.wait(self.interval):
                break

        self.logger.debug(f"{self.name} worker exiting")

    def _fail(self, stop_event: threading.Event, error: ControlByWebError) -> None:
        with self._lock:
            if self._stop_event is stop_event:
                self._polling = False
            stop_event.set()
        self.error_logger.log_error(error, extra_context={'poller': self.name})
        self._notify(self._snapshot(self._failed_listeners), error)

    def _snapshot(self, listeners: List[Callable]) -> List[Callable]:
        with self._lock:
            return list(listeners)

    def _notify(self, listeners: List[Callable], payload: Any) -> None:
        for listener in listeners:
            try:
                listener(payload)
            except Exception:
                self.logger.exception(f"{self.name} listener {listener!r} raised")
