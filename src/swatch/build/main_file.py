"""
Main CSS file discovery.

This module handles:
- Classifying CSS files as partials, build artifacts or entry candidates
- Resolving which file in the working directory is the compile entry point

Naming rules:
    _*.css          partial, pulled in via @import, never compiled directly
    *.compiled.css  build artifact, never an entry point and never a trigger
    *.css           any other CSS file is an entry candidate
"""

from pathlib import Path
from typing import List, Optional, Union

CSS_SUFFIX = ".css"
ARTIFACT_SUFFIX = ".compiled.css"
SOURCE_MAP_SUFFIX = ".map"
PARTIAL_PREFIX = "_"

PathLike = Union[str, Path]


def is_partial(path: PathLike) -> bool:
    """Check whether a file is a partial (basename starts with an underscore)."""
    return Path(path).name.startswith(PARTIAL_PREFIX)


def is_build_artifact(path: PathLike) -> bool:
    """Check whether a file is previously compiled output."""
    return Path(path).name.endswith(ARTIFACT_SUFFIX)


def is_css_file(path: PathLike) -> bool:
    return Path(path).name.endswith(CSS_SUFFIX)


def is_entry_candidate(path: PathLike) -> bool:
    """Check whether a file may be used as the compile entry point.

    Args:
        path: File path (only the basename is inspected)

    Returns:
        True for *.css files that are neither partials nor build artifacts
    """
    return is_css_file(path) and not is_partial(path) and not is_build_artifact(path)


def is_trigger_worthy(path: PathLike) -> bool:
    """Check whether a change to this file should start a compile.

    Partials count (they are imported by the entry file); build artifacts
    and source maps do not.
    """
    name = Path(path).name
    if name.endswith(SOURCE_MAP_SUFFIX):
        return False
    return is_css_file(name) and not is_build_artifact(name)


class MainFileResolver:
    """
    Resolves the compile entry point for a working directory.

    The resolver:
    1. Returns the changed file directly when it is an entry candidate
    2. Otherwise scans the directory (non-recursive, sorted by name)
    3. Returns the first entry candidate, or None when there is none

    Example usage:
        resolver = MainFileResolver(Path("."))
        entry = resolver.resolve(changed_path=Path("_base.css"))
        if entry is None:
            print("No main CSS file found")
    """

    def __init__(self, working_dir: Path):
        """
        Initialize main file resolver.

        Args:
            working_dir: Directory containing the CSS sources
        """
        self.working_dir = Path(working_dir)

    def resolve(self, changed_path: Optional[PathLike] = None) -> Optional[Path]:
        """
        Determine which file to compile.

        Args:
            changed_path: File that just changed (optional hint)

        Returns:
            Path to the entry file, or None if no eligible file exists
        """
        if changed_path is not None and is_entry_candidate(changed_path):
            changed = Path(changed_path)
            if not changed.is_absolute():
                changed = self.working_dir / changed
            # Deleted or renamed away: fall back to the directory scan
            if changed.is_file():
                return changed

        for css_file in self.scan():
            if is_entry_candidate(css_file):
                return css_file

        return None

    def scan(self) -> List[Path]:
        """
        List CSS files directly inside the working directory.

        Returns:
            Sorted list of *.css files (partials and artifacts included)
        """
        if not self.working_dir.is_dir():
            return []
        return sorted(
            path for path in self.working_dir.glob(f"*{CSS_SUFFIX}") if path.is_file()
        )
