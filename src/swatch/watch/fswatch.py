"""
fswatch backend (native notification on macOS, also available on Linux).

A single long-running `fswatch --event-flags` process prints one line per
change: the path followed by its event flags.
"""

import logging
import subprocess
from pathlib import Path
from typing import Iterator, List, Optional

from ..build.main_file import is_trigger_worthy
from ..process_utils import terminate_process_tree
from .backend import BackendSetupError, WatchBackend, WatchBackendError
from .events import ChangeEvent, ChangeKind

EXCLUDE_PATTERNS = [r"\.compiled\.css$", r"\.map$"]

KNOWN_FLAGS = {
    "NoOp", "PlatformSpecific", "Created", "Updated", "Removed", "Renamed",
    "OwnerModified", "AttributeModified", "MovedFrom", "MovedTo",
    "IsFile", "IsDir", "IsSymLink", "Link", "Overflow",
}


def _kind_from_flags(flags: List[str]) -> ChangeKind:
    if "Removed" in flags:
        return ChangeKind.DELETED
    if {"Renamed", "MovedFrom", "MovedTo"} & set(flags):
        return ChangeKind.RENAMED
    if "Created" in flags:
        return ChangeKind.CREATED
    if {"Updated", "AttributeModified", "OwnerModified"} & set(flags):
        return ChangeKind.MODIFIED
    return ChangeKind.UNKNOWN


def parse_fswatch_line(line: str) -> Optional[ChangeEvent]:
    """Parse one line of `fswatch --event-flags` output.

    Args:
        line: e.g. "/site/styles.css Updated IsFile"

    Returns:
        ChangeEvent for CSS sources, None for anything else
    """
    tokens = line.rstrip("\n").split(" ")
    flags = []
    while len(tokens) > 1 and tokens[-1] in KNOWN_FLAGS:
        flags.append(tokens.pop())

    path = " ".join(tokens).strip()
    if not path or "IsDir" in flags or not is_trigger_worthy(path):
        return None
    return ChangeEvent(Path(path), _kind_from_flags(flags))


class FswatchBackend(WatchBackend):
    """Watches the directory with a long-running fswatch process."""

    name = "fswatch"
    tool = "fswatch"

    def __init__(self, working_dir: Path):
        super().__init__(working_dir)
        self._proc: Optional[subprocess.Popen] = None

    def build_command(self) -> List[str]:
        cmd = [self.tool, "--event-flags"]
        for pattern in EXCLUDE_PATTERNS:
            cmd.extend(["--exclude", pattern])
        cmd.append(str(self.working_dir))
        return cmd

    def setup(self) -> None:
        try:
            self._proc = subprocess.Popen(
                self.build_command(),
                stdout=subprocess.PIPE,
                stderr=subprocess.DEVNULL,
                text=True,
            )
        except OSError as e:
            raise BackendSetupError(f"Failed to start fswatch: {e}")

    def events(self) -> Iterator[ChangeEvent]:
        if self._proc is None:
            raise WatchBackendError("fswatch backend used before setup()")

        for line in self._proc.stdout:
            event = parse_fswatch_line(line)
            if event is None:
                continue
            if not event.path.is_absolute():
                event = ChangeEvent(self.working_dir / event.path, event.kind)
            if event.path.parent.resolve() != self.working_dir.resolve():
                logging.debug(f"Ignoring change outside working directory: {event.path}")
                continue
            yield event

        raise WatchBackendError(f"fswatch exited with code {self._proc.wait()}")

    def close(self) -> None:
        if self._proc is not None:
            terminate_process_tree(self._proc)
            self._proc = None
