"""Compile coordination.

Wraps main file resolution and compilation with a non-reentrant guard so
that at most one compile is in flight. A trigger that arrives while a
compile is running is dropped, not queued.
"""

import logging
import threading
from pathlib import Path
from typing import Optional

from .compiler import CompileAttempt, CompileOutcome, LightningCSSCompiler
from .main_file import MainFileResolver, PathLike


class CompileGuard:
    """Single-slot token marking a compile as in flight."""

    def __init__(self):
        self._lock = threading.Lock()

    def try_acquire(self) -> bool:
        """Take the token without blocking.

        Returns:
            True if the token was free and is now held
        """
        return self._lock.acquire(blocking=False)

    def release(self) -> None:
        self._lock.release()

    @property
    def held(self) -> bool:
        return self._lock.locked()


class CompileCoordinator:
    """
    Serializes compiles triggered by change events.

    Example usage:
        coordinator = CompileCoordinator(resolver, compiler)
        attempt = coordinator.trigger(Path("_base.css"))
        if attempt is None:
            pass  # another compile was in flight; change dropped
    """

    def __init__(
        self,
        resolver: MainFileResolver,
        compiler: LightningCSSCompiler,
        guard: Optional[CompileGuard] = None
    ):
        """
        Initialize compile coordinator.

        Args:
            resolver: Resolves the entry file for each trigger
            compiler: Runs the compiler for the resolved entry file
            guard: Guard token (a fresh one is created if omitted)
        """
        self.resolver = resolver
        self.compiler = compiler
        self.guard = guard if guard is not None else CompileGuard()

    @property
    def busy(self) -> bool:
        return self.guard.held

    def trigger(self, changed_path: Optional[PathLike] = None, initial: bool = False) -> Optional[CompileAttempt]:
        """
        Resolve the entry file and compile it, unless a compile is in flight.

        Args:
            changed_path: File that changed (hint for the resolver)
            initial: Whether this is the startup compile

        Returns:
            CompileAttempt, or None if the trigger was dropped
        """
        if not self.guard.try_acquire():
            logging.debug(f"Compile in flight, dropping change: {changed_path}")
            return None

        try:
            entry_file = self.resolver.resolve(changed_path)
            if entry_file is None:
                print("No main CSS file found", flush=True)
                print("Looking for: *.css (not _*.css or *.compiled.css)", flush=True)
                return CompileAttempt(outcome=CompileOutcome.NO_ENTRY_FOUND)

            return self.compiler.compile(Path(entry_file), initial=initial)
        finally:
            self.guard.release()
