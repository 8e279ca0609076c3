"""
inotifywait backend (Linux kernel notification).

Each wait runs `inotifywait` for exactly one event and is re-armed after
the event has been handled.
"""

import subprocess
from pathlib import Path
from typing import Iterator, List, Optional

from ..build.main_file import is_trigger_worthy
from ..process_utils import terminate_process_tree
from .backend import WatchBackend, WatchBackendError
from .events import ChangeEvent, ChangeKind

WATCHED_EVENTS = "modify,create,delete,move"
EXCLUDE_PATTERN = r".*\.compiled\.css$|.*\.map$"

_KIND_BY_EVENT = {
    "DELETE": ChangeKind.DELETED,
    "MOVED_FROM": ChangeKind.RENAMED,
    "MOVED_TO": ChangeKind.RENAMED,
    "MOVE": ChangeKind.RENAMED,
    "CREATE": ChangeKind.CREATED,
    "MODIFY": ChangeKind.MODIFIED,
}


def parse_inotify_line(line: str, working_dir: Path) -> Optional[ChangeEvent]:
    """Parse one line of `inotifywait --format '%e %f'` output.

    Args:
        line: e.g. "MODIFY styles.css" or "MOVED_TO,ISDIR assets"
        working_dir: Watched directory the file name is relative to

    Returns:
        ChangeEvent for CSS sources, None for anything else
    """
    line = line.rstrip("\n")
    if " " not in line:
        return None

    event_names, name = line.split(" ", 1)
    names = event_names.split(",")
    if "ISDIR" in names or not is_trigger_worthy(name):
        return None

    kind = ChangeKind.UNKNOWN
    for event_name in names:
        if event_name in _KIND_BY_EVENT:
            kind = _KIND_BY_EVENT[event_name]
            break
    return ChangeEvent(working_dir / name, kind)


class InotifywaitBackend(WatchBackend):
    """Watches the directory with one inotifywait call per event."""

    name = "inotifywait"
    tool = "inotifywait"

    def __init__(self, working_dir: Path):
        super().__init__(working_dir)
        self._proc: Optional[subprocess.Popen] = None

    def build_command(self) -> List[str]:
        return [
            self.tool,
            "-q",
            "-e", WATCHED_EVENTS,
            "--exclude", EXCLUDE_PATTERN,
            "--format", "%e %f",
            str(self.working_dir),
        ]

    def wait_for_event(self) -> Optional[ChangeEvent]:
        """Block until inotifywait reports one event.

        Returns:
            ChangeEvent, or None when the event is not a CSS source change

        Raises:
            WatchBackendError: If inotifywait cannot be run or fails
        """
        try:
            self._proc = subprocess.Popen(
                self.build_command(),
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                text=True,
            )
        except OSError as e:
            raise WatchBackendError(f"Failed to run inotifywait: {e}")

        # Left set if communicate() is interrupted so close() can reap it
        stdout, stderr = self._proc.communicate()
        returncode = self._proc.returncode
        self._proc = None

        # Exit status 2 means the wait timed out; nothing happened
        if returncode == 2:
            return None
        if returncode != 0:
            raise WatchBackendError(f"inotifywait failed with code {returncode}: {stderr.strip()}")

        return parse_inotify_line(stdout, self.working_dir)

    def events(self) -> Iterator[ChangeEvent]:
        while True:
            event = self.wait_for_event()
            if event is not None:
                yield event

    def close(self) -> None:
        if self._proc is not None:
            terminate_process_tree(self._proc)
            self._proc = None
