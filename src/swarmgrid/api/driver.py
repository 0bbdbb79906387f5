"""
Tick driver: a cancellable repeating timer over a tick callback.

At most one timer thread drives a session at any moment. Pausing stops
future ticks only; a tick already in progress runs to completion.
"""

from __future__ import annotations

import logging
import threading
from typing import Callable

logger = logging.getLogger(__name__)


class TickDriver:
    """Call ``tick_fn`` every ``1 / speed`` seconds until paused.

    Parameters
    ----------
    tick_fn : Callable[[], None]
        Runs one complete tick. Exceptions stop the driver and are
        passed to ``on_error``.
    speed : float
        Speed multiplier; the timer period is ``1.0 / speed`` seconds.
    on_error : Callable[[BaseException], None] | None
        Invoked from the timer thread when ``tick_fn`` raises.
    """

    def __init__(
        self,
        tick_fn: Callable[[], None],
        speed: float = 1.0,
        on_error: Callable[[BaseException], None] | None = None,
        name: str = "tick-driver",
    ):
        if speed <= 0:
            raise ValueError(f"speed must be positive, got {speed}")
        self._tick_fn = tick_fn
        self._on_error = on_error
        self._name = name
        self._speed = speed
        self._guard = threading.Lock()
        self._stop: threading.Event | None = None
        self._thread: threading.Thread | None = None

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------
    @property
    def speed(self) -> float:
        return self._speed

    @property
    def period(self) -> float:
        return 1.0 / self._speed

    @property
    def is_running(self) -> bool:
        with self._guard:
            return self._stop is not None and not self._stop.is_set()

    # ------------------------------------------------------------------
    # Controls
    # ------------------------------------------------------------------
    def start(self) -> bool:
        """Install the timer. Returns False if it was already running."""
        with self._guard:
            if self._stop is not None and not self._stop.is_set():
                return False
            self._install()
            return True

    def pause(self) -> bool:
        """Cancel the timer. Returns False if it was already paused."""
        with self._guard:
            if self._stop is None or self._stop.is_set():
                return False
            thread = self._cancel()
        self._join(thread)
        return True

    def set_speed(self, speed: float) -> None:
        """Change the period, replacing any active timer."""
        if speed <= 0:
            raise ValueError(f"speed must be positive, got {speed}")
        thread = None
        with self._guard:
            self._speed = speed
            if self._stop is not None and not self._stop.is_set():
                thread = self._cancel()
                self._install()
        self._join(thread)

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    def _install(self) -> None:
        stop = threading.Event()
        thread = threading.Thread(
            target=self._loop, args=(stop, self.period),
            name=self._name, daemon=True,
        )
        self._stop = stop
        self._thread = thread
        thread.start()
        logger.debug("%s started (period %.3fs)", self._name, self.period)

    def _cancel(self) -> threading.Thread | None:
        assert self._stop is not None
        self._stop.set()
        thread = self._thread
        self._thread = None
        logger.debug("%s cancelled", self._name)
        return thread

    def _join(self, thread: threading.Thread | None) -> None:
        # Never join from inside the timer thread itself
        if thread is not None and thread is not threading.current_thread():
            thread.join()

    def _loop(self, stop: threading.Event, period: float) -> None:
        while not stop.wait(period):
            try:
                self._tick_fn()
            except Exception as exc:
                logger.exception("%s: tick failed, stopping", self._name)
                stop.set()
                if self._on_error is not None:
                    self._on_error(exc)
                return
