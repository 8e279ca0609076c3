"""
File watching for swatch.

This module provides interchangeable watch backends and the selector that
picks one of them at startup:
- WatchmanBackend (preferred)
- FswatchBackend (macOS)
- InotifywaitBackend (Linux)
- PollingBackend (fallback)
"""

from .backend import BackendSetupError, WatchBackend, WatchBackendError
from .events import ChangeEvent, ChangeKind
from .fswatch import FswatchBackend
from .inotify import InotifywaitBackend
from .polling import POLL_INTERVAL, PollingBackend
from .selector import BACKEND_PRIORITY, BackendSelector
from .watchman import WatchmanBackend

__all__ = [
    'BackendSetupError',
    'WatchBackend',
    'WatchBackendError',
    'ChangeEvent',
    'ChangeKind',
    'FswatchBackend',
    'InotifywaitBackend',
    'POLL_INTERVAL',
    'PollingBackend',
    'BACKEND_PRIORITY',
    'BackendSelector',
    'WatchmanBackend',
]
