"""
Polling backend.

Works everywhere, at the cost of one directory scan per interval. Tracked
files are all *.css sources in the directory (partials included, build
artifacts excluded); the directory is re-globbed on every tick so new
files are picked up.
"""

import logging
import time
from pathlib import Path
from typing import Callable, Dict, Iterator, List, Optional

from ..build.main_file import is_trigger_worthy
from .backend import WatchBackend
from .events import ChangeEvent, ChangeKind

POLL_INTERVAL = 1.0


class PollingBackend(WatchBackend):
    """Compares modification times on a fixed interval."""

    name = "polling"
    tool = None

    def __init__(
        self,
        working_dir: Path,
        interval: float = POLL_INTERVAL,
        sleep: Callable[[float], None] = time.sleep
    ):
        super().__init__(working_dir)
        self.interval = interval
        self._sleep = sleep
        self._mtimes: Optional[Dict[Path, int]] = None

    def tracked_files(self) -> List[Path]:
        """List the CSS sources currently in the directory."""
        return sorted(
            path for path in self.working_dir.glob("*.css")
            if path.is_file() and is_trigger_worthy(path)
        )

    def snapshot(self) -> Dict[Path, int]:
        """Map each tracked file to its modification time."""
        mtimes = {}
        for path in self.tracked_files():
            mtime = _read_mtime(path)
            if mtime is not None:
                mtimes[path] = mtime
        return mtimes

    def setup(self) -> None:
        self._mtimes = self.snapshot()
        logging.debug(f"Polling {len(self._mtimes)} CSS files every {self.interval}s")

    def poll_once(self) -> List[Path]:
        """Re-read timestamps and record the files that changed.

        Each changed file is reported once per tick; its stored timestamp is
        updated so the same change is not reported again.

        Returns:
            Sorted list of changed files
        """
        if self._mtimes is None:
            self.setup()

        changed = []
        for path in self.tracked_files():
            mtime = _read_mtime(path)
            if mtime is None:
                continue
            if self._mtimes.get(path) != mtime:
                self._mtimes[path] = mtime
                changed.append(path)
        return changed

    def events(self) -> Iterator[ChangeEvent]:
        if self._mtimes is None:
            self.setup()

        while True:
            self._sleep(self.interval)
            changed = self.poll_once()
            if not changed:
                continue
            for other in changed[1:]:
                logging.debug(f"Also changed this tick: {other}")
            # One compile per tick covers every file that changed in it
            yield ChangeEvent(changed[0], ChangeKind.MODIFIED)


def _read_mtime(path: Path) -> Optional[int]:
    try:
        return path.stat().st_mtime_ns
    except OSError as e:
        # Vanished between glob and stat, or unreadable
        logging.debug(f"Skipping {path}: {e}")
        return None
