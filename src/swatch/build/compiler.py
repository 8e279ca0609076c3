"""Lightning CSS compiler invocation.

This module handles running the external `lightningcss` executable for one
entry file and classifying the result.

Design:
    - Builds a structured argument list (never a shell string)
    - Output is written next to the configured output directory as
      <basename>.compiled.css, which the main file resolver never picks up
    - The first run is silent; on failure the command is run once more with
      inherited stdio so the compiler's diagnostics reach the user
"""

import logging
import shlex
import subprocess
import time
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import List, Optional

from ..cli_utils import StatusFormatter
from ..config import CompileOptions
from .main_file import ARTIFACT_SUFFIX, CSS_SUFFIX


class CompilerError(Exception):
    """Raised when the compiler cannot be launched at all."""
    pass


class CompileOutcome(Enum):
    """Classification of a compile attempt."""

    SUCCESS = "success"
    FAILURE = "failure"
    NO_ENTRY_FOUND = "no_entry_found"


@dataclass
class CompileAttempt:
    """Result of one compile attempt."""

    outcome: CompileOutcome
    entry_file: Optional[Path] = None
    output_file: Optional[Path] = None
    duration_ms: int = 0

    @property
    def success(self) -> bool:
        return self.outcome is CompileOutcome.SUCCESS


def output_path_for(entry_file: Path, output_dir: Path) -> Path:
    """
    Derive the output file for an entry file.

    Args:
        entry_file: Entry CSS file (e.g. styles.css)
        output_dir: Directory receiving compiled output

    Returns:
        output_dir / "<stem>.compiled.css"
    """
    name = entry_file.name
    if name.endswith(CSS_SUFFIX):
        name = name[: -len(CSS_SUFFIX)]
    return Path(output_dir) / f"{name}{ARTIFACT_SUFFIX}"


class LightningCSSCompiler:
    """Runs Lightning CSS for a single entry file.

    This class handles:
    - Assembling the compiler argument list from CompileOptions
    - Timing the compiler subprocess at millisecond resolution
    - Printing one status line per attempt
    - Re-running failed compiles unsuppressed to surface diagnostics
    """

    def __init__(
        self,
        compiler_path: Path,
        options: CompileOptions,
        output_dir: Path,
        debug: bool = False,
        timeout: Optional[float] = None
    ):
        """Initialize the compiler wrapper.

        Args:
            compiler_path: Path to the lightningcss executable
            options: Compile options for the whole run
            output_dir: Directory for compiled output
            debug: Echo the command line before each invocation
            timeout: Optional subprocess timeout in seconds
        """
        self.compiler_path = Path(compiler_path)
        self.options = options
        self.output_dir = Path(output_dir)
        self.debug = debug
        self.timeout = timeout

    def build_command(self, entry_file: Path, output_file: Path) -> List[str]:
        """Build the compiler argument list.

        Args:
            entry_file: Entry CSS file
            output_file: Output file path

        Returns:
            Argument list suitable for subprocess
        """
        cmd = [str(self.compiler_path)]
        if self.options.bundle:
            cmd.append("--bundle")
        if self.options.minify:
            cmd.append("--minify")
        if self.options.source_map_inline:
            cmd.append("--sourcemap=inline")
        cmd.extend(["--targets", self.options.browser_targets])
        cmd.extend([str(entry_file), "-o", str(output_file)])
        return cmd

    def compile(self, entry_file: Path, initial: bool = False) -> CompileAttempt:
        """Compile one entry file.

        Args:
            entry_file: Entry CSS file to compile
            initial: Whether this is the startup compile (affects the status line only)

        Returns:
            CompileAttempt describing the outcome

        Raises:
            CompilerError: If the compiler executable cannot be launched
        """
        output_file = output_path_for(entry_file, self.output_dir)
        cmd = self.build_command(entry_file, output_file)

        if self.debug:
            StatusFormatter.print_info(f"$ {shlex.join(cmd)}")
        logging.debug(f"Running compiler: {cmd}")

        start_time = time.perf_counter()
        try:
            result = subprocess.run(
                cmd,
                stdout=subprocess.DEVNULL,
                stderr=subprocess.DEVNULL,
                timeout=self.timeout,
            )
        except subprocess.TimeoutExpired:
            StatusFormatter.print_info(f"Compilation timed out after {self.timeout}s")
            return CompileAttempt(
                outcome=CompileOutcome.FAILURE,
                entry_file=entry_file,
                output_file=output_file,
                duration_ms=_elapsed_ms(start_time),
            )
        except OSError as e:
            raise CompilerError(f"Failed to run {self.compiler_path}: {e}")
        duration_ms = _elapsed_ms(start_time)

        if result.returncode == 0:
            print(
                StatusFormatter.format_compiled(entry_file, output_file, duration_ms, initial=initial),
                flush=True,
            )
            return CompileAttempt(
                outcome=CompileOutcome.SUCCESS,
                entry_file=entry_file,
                output_file=output_file,
                duration_ms=duration_ms,
            )

        print("Compilation failed", flush=True)
        # A compiler killed by a signal (e.g. Ctrl+C) has no diagnostics to show
        if result.returncode > 0:
            self._show_diagnostics(cmd)
        return CompileAttempt(
            outcome=CompileOutcome.FAILURE,
            entry_file=entry_file,
            output_file=output_file,
            duration_ms=duration_ms,
        )

    def _show_diagnostics(self, cmd: List[str]) -> None:
        """Re-run a failed command with inherited stdio."""
        try:
            subprocess.run(cmd, timeout=self.timeout)
        except subprocess.TimeoutExpired:
            logging.warning("Diagnostic compiler run timed out")
        except OSError as e:
            raise CompilerError(f"Failed to run {self.compiler_path}: {e}")


def _elapsed_ms(start_time: float) -> int:
    return int(round((time.perf_counter() - start_time) * 1000))
