"""
Watchman backend.

Watchman keeps the directory watched as an always-on service and coalesces
bursts of saves with a settle window, so one burst arrives as one event.

Setup is two steps:
1. `watchman watch <dir>` registers the directory with the service
2. A persistent `watchman` client subscribes to *.css changes, excluding
   build artifacts and source maps

Either step failing raises BackendSetupError so the selector can fall back.
The directory registration is released again in close().
"""

import json
import logging
import subprocess
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional

from ..process_utils import terminate_process_tree
from .backend import BackendSetupError, WatchBackend, WatchBackendError
from .events import ChangeEvent, ChangeKind

SUBSCRIPTION_NAME = "css-watch"
SETTLE_MS = 20


def build_subscription_query(settle_ms: int = SETTLE_MS, relative_root: Optional[str] = None) -> Dict[str, Any]:
    """Build the watchman subscription query for top-level CSS sources.

    Args:
        settle_ms: Settle window in milliseconds
        relative_root: Subdirectory of the watch root to restrict to

    Returns:
        Query dictionary for the `subscribe` command
    """
    query: Dict[str, Any] = {
        "expression": [
            "allof",
            ["type", "f"],
            ["dirname", "", ["depth", "eq", 0]],
            ["match", "*.css"],
            ["not", ["match", "*.compiled.css"]],
            ["not", ["match", "*.map"]],
        ],
        "fields": ["name", "exists", "new"],
        "settle": settle_ms,
    }
    if relative_root:
        query["relative_root"] = relative_root
    return query


class WatchmanBackend(WatchBackend):
    """Watches the directory through a watchman subscription."""

    name = "Watchman"
    tool = "watchman"

    def __init__(self, working_dir: Path, settle_ms: int = SETTLE_MS):
        super().__init__(working_dir)
        self.settle_ms = settle_ms
        self.watch_root: Optional[str] = None
        self.relative_path: Optional[str] = None
        self._registered = False
        self._client: Optional[subprocess.Popen] = None

    def setup(self) -> None:
        self._register_watch()
        self._subscribe()

    def _register_watch(self) -> None:
        """Step 1: register the working directory with the watchman service."""
        try:
            result = subprocess.run(
                [self.tool, "watch", str(self.working_dir)],
                capture_output=True,
                text=True,
            )
        except OSError as e:
            raise BackendSetupError(f"Failed to run watchman: {e}")

        if result.returncode != 0:
            raise BackendSetupError(
                f"watchman watch failed with code {result.returncode}: {result.stderr.strip()}"
            )

        try:
            response = json.loads(result.stdout)
        except json.JSONDecodeError as e:
            raise BackendSetupError(f"Unexpected watchman response: {e}")

        if "error" in response:
            raise BackendSetupError(f"watchman watch failed: {response['error']}")

        self.watch_root = response.get("watch", str(self.working_dir))
        self.relative_path = response.get("relative_path")
        self._registered = True
        logging.debug(f"watchman watching {self.watch_root} (relative_path={self.relative_path})")

    def _subscribe(self) -> None:
        """Step 2: open a persistent client and subscribe to CSS changes."""
        command = [
            "subscribe",
            self.watch_root,
            SUBSCRIPTION_NAME,
            build_subscription_query(self.settle_ms, self.relative_path),
        ]
        try:
            self._client = subprocess.Popen(
                [
                    self.tool,
                    "--persistent",
                    "--json-command",
                    "--server-encoding=json",
                    "--output-encoding=json",
                    "--no-pretty",
                ],
                stdin=subprocess.PIPE,
                stdout=subprocess.PIPE,
                stderr=subprocess.DEVNULL,
                text=True,
            )
            self._client.stdin.write(json.dumps(command) + "\n")
            self._client.stdin.close()
        except OSError as e:
            raise BackendSetupError(f"Failed to start watchman client: {e}")

        line = self._client.stdout.readline()
        if not line:
            raise BackendSetupError("watchman client exited before acknowledging the subscription")

        try:
            response = json.loads(line)
        except json.JSONDecodeError as e:
            raise BackendSetupError(f"Unexpected watchman response: {e}")

        if "error" in response:
            raise BackendSetupError(f"watchman subscribe failed: {response['error']}")
        if response.get("subscribe") != SUBSCRIPTION_NAME:
            raise BackendSetupError(f"watchman did not acknowledge the subscription: {response}")

    def events(self) -> Iterator[ChangeEvent]:
        if self._client is None:
            raise WatchBackendError("watchman backend used before setup()")

        for line in self._client.stdout:
            line = line.strip()
            if not line:
                continue
            try:
                pdu = json.loads(line)
            except json.JSONDecodeError:
                logging.warning(f"Ignoring malformed watchman output: {line[:200]}")
                continue

            event = self.parse_pdu(pdu)
            if event is not None:
                yield event

        raise WatchBackendError(f"watchman client exited with code {self._client.wait()}")

    def parse_pdu(self, pdu: Dict[str, Any]) -> Optional[ChangeEvent]:
        """Turn one subscription PDU into at most one change event.

        The settle window already coalesced the burst, so only the first file
        of the PDU is reported.

        Args:
            pdu: Decoded watchman response

        Returns:
            ChangeEvent, or None for PDUs that carry no relevant change

        Raises:
            WatchBackendError: If watchman cancelled the subscription
        """
        if pdu.get("subscription") != SUBSCRIPTION_NAME:
            return None
        if pdu.get("canceled"):
            raise WatchBackendError("watchman cancelled the subscription")
        if pdu.get("is_fresh_instance"):
            return None

        files: List[Any] = pdu.get("files") or []
        if not files:
            return None
        if len(files) > 1:
            logging.debug(f"watchman reported {len(files)} files, coalescing into one event")

        first = files[0]
        if isinstance(first, str):
            return ChangeEvent(self.working_dir / first, ChangeKind.MODIFIED)

        if not first.get("exists", True):
            kind = ChangeKind.DELETED
        elif first.get("new"):
            kind = ChangeKind.CREATED
        else:
            kind = ChangeKind.MODIFIED
        return ChangeEvent(self.working_dir / first["name"], kind)

    def close(self) -> None:
        if self._client is not None:
            terminate_process_tree(self._client)
            self._client = None

        # A parent project root picked by watchman may be shared; only drop our own
        if self._registered and not self.relative_path:
            try:
                subprocess.run(
                    [self.tool, "watch-del", self.watch_root],
                    stdout=subprocess.DEVNULL,
                    stderr=subprocess.DEVNULL,
                )
            except OSError as e:
                logging.warning(f"Failed to release watchman watch: {e}")
        self._registered = False
