"""Change events produced by watch backends."""

from dataclasses import dataclass
from enum import Enum
from pathlib import Path


class ChangeKind(Enum):
    """Kind of filesystem change, where the backend can tell."""

    MODIFIED = "modified"
    CREATED = "created"
    DELETED = "deleted"
    RENAMED = "renamed"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class ChangeEvent:
    """A relevant file in the working directory changed."""

    path: Path
    kind: ChangeKind = ChangeKind.UNKNOWN
