"""Signal handling for the watch loop.

SIGINT, SIGTERM, SIGHUP and SIGQUIT all end the watch loop by raising
ShutdownRequested (a KeyboardInterrupt) in the main thread. A signal that
arrives while a compile is in flight is held back until the compile
returns, so no compile is cut off half way through.

Usage:
    handler = ShutdownHandler(is_busy=lambda: coordinator.busy)
    with handler:
        for event in backend.events():
            coordinator.trigger(event.path)
            handler.raise_if_pending()
"""

import logging
import signal
from typing import Callable, Dict, List, Optional

SHUTDOWN_SIGNAL_NAMES = ("SIGINT", "SIGTERM", "SIGHUP", "SIGQUIT")


class ShutdownRequested(KeyboardInterrupt):
    """Raised in the main thread when a shutdown signal is received."""

    def __init__(self, signum: int):
        super().__init__(signum)
        self.signum = signum


def shutdown_signals() -> List[signal.Signals]:
    """Return the shutdown signals supported on this platform."""
    return [getattr(signal, name) for name in SHUTDOWN_SIGNAL_NAMES if hasattr(signal, name)]


class ShutdownHandler:
    """Installs shutdown signal handlers and restores the previous ones on exit."""

    def __init__(self, is_busy: Callable[[], bool] = lambda: False):
        """
        Args:
            is_busy: Returns True while a compile is in flight
        """
        self.is_busy = is_busy
        self.pending: Optional[int] = None
        self._previous: Dict[int, object] = {}

    def install(self) -> None:
        for sig in shutdown_signals():
            self._previous[sig] = signal.getsignal(sig)
            signal.signal(sig, self.handle)

    def restore(self) -> None:
        for sig, previous in self._previous.items():
            signal.signal(sig, previous)
        self._previous.clear()

    def handle(self, signum: int, frame: object = None) -> None:
        """Signal handler: raise now, or defer while a compile is running."""
        if self.is_busy():
            logging.debug(f"Signal {signum} received during compile, deferring shutdown")
            self.pending = signum
            return
        raise ShutdownRequested(signum)

    def raise_if_pending(self) -> None:
        """Raise ShutdownRequested for a signal deferred during a compile."""
        if self.pending is not None:
            signum, self.pending = self.pending, None
            raise ShutdownRequested(signum)

    def __enter__(self) -> "ShutdownHandler":
        self.install()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.restore()
