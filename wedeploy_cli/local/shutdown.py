"""
Shutdown listener for the local infrastructure

First signal starts the cleanup in the background. Later signals print
escalating warnings; once the grace window has passed, one more signal
force-exits the process.
"""

import os
import signal
import threading
import time
from typing import Callable, Optional

from rich.console import Console

from wedeploy_cli.constants import (
    SHUTDOWN_FORCED,
    SHUTDOWN_GRACE_HINT,
    SHUTDOWN_GRACE_WINDOW,
    SHUTDOWN_PLEASE_WAIT,
    SHUTDOWN_STARTED,
)
from wedeploy_cli.logger import debug


class ShutdownListener:
    def __init__(
        self,
        on_shutdown: Callable[[], None],
        on_detach: Optional[Callable[[], None]] = None,
        view_mode: bool = False,
        grace_window: float = SHUTDOWN_GRACE_WINDOW,
        exit_fn: Callable[[int], None] = os._exit,
        clock: Callable[[], float] = time.monotonic,
        console: Optional[Console] = None,
    ):
        self.on_shutdown = on_shutdown
        self.on_detach = on_detach
        self.view_mode = view_mode
        self.grace_window = grace_window
        self.exit_fn = exit_fn
        self.clock = clock
        self.console = console or Console(stderr=True)

        self.signals = 0
        self.requested = threading.Event()
        self.done = threading.Event()
        self._grace_deadline: Optional[float] = None
        self._lock = threading.Lock()
        self._worker: Optional[threading.Thread] = None
        self._previous = {}

    def install(self) -> None:
        """Route SIGINT and SIGTERM to handle(). Main thread only."""
        for sig in (signal.SIGINT, signal.SIGTERM):
            self._previous[sig] = signal.signal(sig, self.handle)

    def restore(self) -> None:
        for sig, handler in self._previous.items():
            signal.signal(sig, handler)
        self._previous = {}

    def handle(self, signum=None, frame=None) -> None:
        with self._lock:
            self.signals += 1
            count = self.signals

        debug(f"Shutdown signal #{count} received")

        if count == 1:
            self.requested.set()
            if self.view_mode:
                self._run(self.on_detach)
                return
            self.console.print(SHUTDOWN_STARTED, markup=False)
            self._worker = threading.Thread(
                target=self._run, args=(self.on_shutdown,), name="shutdown", daemon=True
            )
            self._worker.start()
        elif count == 2:
            self.console.print(SHUTDOWN_PLEASE_WAIT, markup=False)
        elif count == 3:
            self.console.print(
                SHUTDOWN_GRACE_HINT.format(seconds=int(self.grace_window)), markup=False
            )
            self._grace_deadline = self.clock() + self.grace_window
        elif self._grace_deadline is not None and self.clock() >= self._grace_deadline:
            self.console.print(SHUTDOWN_FORCED, markup=False)
            self.exit_fn(1)

    def _run(self, callback: Optional[Callable[[], None]]) -> None:
        try:
            if callback is not None:
                callback()
        finally:
            self.done.set()

    def wait(self, timeout: Optional[float] = None) -> bool:
        return self.done.wait(timeout)
