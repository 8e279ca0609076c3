"""
Watch backend selection.

Backends are probed once, in priority order:
1. watchman     (always-on service, coalesces bursts)
2. fswatch      (native notification, macOS)
3. inotifywait  (kernel notification, Linux)
4. polling      (unconditional fallback)

A backend whose tool is missing is skipped; a backend whose setup fails is
closed and skipped with a warning.
"""

import logging
import shutil
from pathlib import Path
from typing import Callable, Optional, Sequence, Type

from .backend import BackendSetupError, WatchBackend
from .fswatch import FswatchBackend
from .inotify import InotifywaitBackend
from .polling import PollingBackend
from .watchman import WatchmanBackend

BACKEND_PRIORITY = (WatchmanBackend, FswatchBackend, InotifywaitBackend)


class BackendSelector:
    """
    Picks exactly one watch backend for a directory.

    Example usage:
        backend = BackendSelector(Path(".")).select()
        with backend:
            for event in backend.events():
                ...
    """

    def __init__(
        self,
        working_dir: Path,
        backends: Sequence[Type[WatchBackend]] = BACKEND_PRIORITY,
        fallback: Type[WatchBackend] = PollingBackend,
        which: Callable[[str], Optional[str]] = shutil.which
    ):
        """
        Initialize backend selector.

        Args:
            working_dir: Directory to watch
            backends: Candidate backends, highest priority first
            fallback: Backend used when no candidate can be set up
            which: Tool lookup (shutil.which signature)
        """
        self.working_dir = Path(working_dir)
        self.backends = list(backends)
        self.fallback = fallback
        self.which = which

    def select(self) -> WatchBackend:
        """
        Set up and return the highest-priority usable backend.

        Returns:
            A backend whose setup() has completed
        """
        for backend_cls in self.backends:
            if not backend_cls.is_available(self.which):
                logging.debug(f"{backend_cls.name} not found on PATH")
                continue

            backend = backend_cls(self.working_dir)
            try:
                backend.setup()
            except BackendSetupError as e:
                logging.warning(f"{backend_cls.name} setup failed, falling back: {e}")
                backend.close()
                continue
            except BaseException:
                # Interrupted mid-setup: release what was acquired so far
                backend.close()
                raise

            return backend

        backend = self.fallback(self.working_dir)
        try:
            backend.setup()
        except BaseException:
            backend.close()
            raise
        return backend
