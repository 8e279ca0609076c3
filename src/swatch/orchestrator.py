"""
Watch orchestration for swatch.

This module runs the change-detection-to-build pipeline:
- Validate the output directory
- Compile once at startup
- In watch mode, select a watch backend and feed its change events into
  the compile coordinator until a shutdown signal arrives
"""

from enum import Enum
from pathlib import Path
from typing import Optional

from .build import CompileCoordinator, CompileOutcome, LightningCSSCompiler, MainFileResolver
from .cli_utils import ErrorFormatter, PathValidator, StatusFormatter
from .interrupt_utils import ShutdownHandler
from .watch import BackendSelector, PollingBackend, WatchBackend, WatchBackendError


class OrchestratorState(Enum):
    """Lifecycle of an orchestrator run."""

    STARTING = "starting"
    WATCHING = "watching"
    STOPPED = "stopped"


class Orchestrator:
    """
    Compiles on startup and, in watch mode, on every relevant change.

    Example usage:
        compiler = LightningCSSCompiler(Path("/usr/bin/lightningcss"), options, output_dir)
        orchestrator = Orchestrator(Path.cwd(), output_dir, compiler, watch=True)
        sys.exit(orchestrator.run())
    """

    def __init__(
        self,
        working_dir: Path,
        output_dir: Path,
        compiler: LightningCSSCompiler,
        watch: bool = True,
        selector: Optional[BackendSelector] = None
    ):
        """
        Initialize orchestrator.

        Args:
            working_dir: Directory containing the CSS sources
            output_dir: Directory receiving compiled output
            compiler: Compiler wrapper for the run
            watch: Keep watching after the initial compile
            selector: Backend selector (defaults to the standard priority order)
        """
        self.working_dir = Path(working_dir)
        self.output_dir = Path(output_dir)
        self.watch = watch
        self.coordinator = CompileCoordinator(MainFileResolver(self.working_dir), compiler)
        self.selector = selector if selector is not None else BackendSelector(self.working_dir)
        self.state = OrchestratorState.STARTING

    def run(self) -> int:
        """
        Run the initial compile and, in watch mode, the watch loop.

        Returns:
            Process exit code
        """
        self.state = OrchestratorState.STARTING

        problem = PathValidator.find_output_dir_problem(self.output_dir)
        if problem:
            ErrorFormatter.print_error(problem)
            self.state = OrchestratorState.STOPPED
            return 1

        attempt = self.coordinator.trigger(initial=True)

        if not self.watch:
            self.state = OrchestratorState.STOPPED
            # A failed compile still completes normally; only a missing entry is fatal
            if attempt is not None and attempt.outcome is CompileOutcome.NO_ENTRY_FOUND:
                return 1
            return 0

        return self._watch()

    def _watch(self) -> int:
        self.state = OrchestratorState.WATCHING

        print()
        StatusFormatter.print_bullet("Watching for changes in current directory")
        StatusFormatter.print_bullet(f"Output directory: {self.output_dir}")

        handler = ShutdownHandler(is_busy=lambda: self.coordinator.busy)
        try:
            with handler:
                backend = self.selector.select()
                with backend:
                    self._announce(backend)
                    for event in backend.events():
                        print(StatusFormatter.format_changed(event.path), flush=True)
                        self.coordinator.trigger(event.path)
                        handler.raise_if_pending()
        except KeyboardInterrupt:
            print()
            StatusFormatter.print_info("Stopping...")
            return 0
        except WatchBackendError as e:
            ErrorFormatter.print_error("File watcher stopped", str(e))
            return 1
        finally:
            self.state = OrchestratorState.STOPPED

        # A finite event stream ends the watch cleanly
        return 0

    def _announce(self, backend: WatchBackend) -> None:
        if isinstance(backend, PollingBackend):
            StatusFormatter.print_bullet("No file watcher found (watchman, fswatch, or inotifywait)")
            StatusFormatter.print_bullet("Using polling (less efficient but works everywhere)")
            StatusFormatter.print_bullet("Tip: Install watchman for best performance:")
            StatusFormatter.print_info("     macOS: brew install watchman")
            StatusFormatter.print_info("     Linux: apt-get install watchman")
        else:
            StatusFormatter.print_bullet(f"Using {backend.name} for file watching")
        StatusFormatter.print_bullet("Press Ctrl+C to stop watching")
        print(flush=True)
