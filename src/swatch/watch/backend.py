"""
Watch backend base class.

A backend turns one directory into a stream of ChangeEvent objects. It is
set up once, iterated by the orchestrator and closed on every exit path:

    with backend:
        for event in backend.events():
            coordinator.trigger(event.path)
"""

import shutil
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Iterator, Optional

from .events import ChangeEvent


class BackendSetupError(Exception):
    """Raised when a backend cannot be set up; the selector falls through."""
    pass


class WatchBackendError(Exception):
    """Raised when a running backend's watcher fails."""
    pass


class WatchBackend(ABC):
    """Produces change events for a single directory.

    Subclasses set `name` (shown to the user) and `tool` (the executable
    probed on PATH, or None when no tool is required).
    """

    name: str = ""
    tool: Optional[str] = None

    def __init__(self, working_dir: Path):
        """
        Args:
            working_dir: Directory to watch (non-recursive)
        """
        self.working_dir = Path(working_dir)

    @classmethod
    def is_available(cls, which=shutil.which) -> bool:
        """Check whether the backend's tool is installed.

        Args:
            which: Lookup function with the signature of shutil.which

        Returns:
            True if the backend can be tried
        """
        if cls.tool is None:
            return True
        return which(cls.tool) is not None

    def setup(self) -> None:
        """Prepare the backend.

        Raises:
            BackendSetupError: If the backend cannot be used
        """

    @abstractmethod
    def events(self) -> Iterator[ChangeEvent]:
        """Yield change events until interrupted.

        Raises:
            WatchBackendError: If the underlying watcher fails
        """

    def close(self) -> None:
        """Release resources acquired by setup()."""

    def __enter__(self) -> "WatchBackend":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
