"""CLI utility functions for swatch.

This module provides common utilities used by the CLI and the build loop:
- Status line formatting with ANSI color codes
- Error handling and formatting
- Output directory and compiler validation
"""

import os
import shutil
import sys
from datetime import datetime
from pathlib import Path
from typing import Optional, TextIO

from swatch.config import CompileOptions

COMPILER_NAME = "lightningcss"


def _use_color(stream: TextIO) -> bool:
    if os.environ.get("NO_COLOR"):
        return False
    isatty = getattr(stream, "isatty", None)
    return bool(isatty and isatty())


class StatusFormatter:
    """Formats status lines with ANSI color codes.

    Colors are only emitted when stdout is a terminal.
    """

    # ANSI color codes
    GRAY = "\033[0;90m"
    WHITE = "\033[1;97m"
    RESET = "\033[0m"

    @staticmethod
    def _paint(code: str) -> str:
        return code if _use_color(sys.stdout) else ""

    @staticmethod
    def gray(text: str) -> str:
        """Wrap text in the gray color used for most output."""
        return f"{StatusFormatter._paint(StatusFormatter.GRAY)}{text}{StatusFormatter._paint(StatusFormatter.RESET)}"

    @staticmethod
    def highlight(text: str) -> str:
        """Wrap text in bright white (used for file names), returning to gray."""
        return f"{StatusFormatter._paint(StatusFormatter.WHITE)}{text}{StatusFormatter._paint(StatusFormatter.GRAY)}"

    @staticmethod
    def format_compiled(entry_file: Path, output_file: Path, duration_ms: int, initial: bool = False) -> str:
        """Format the status line for a successful compile.

        Args:
            entry_file: Compiled entry file
            output_file: Written output file
            duration_ms: Wall-clock compile time in milliseconds
            initial: Whether this is the startup compile

        Returns:
            Formatted status line
        """
        arrow = f"{StatusFormatter.highlight(entry_file.name)} → {StatusFormatter.highlight(output_file.name)} ({duration_ms}ms)"
        if initial:
            return StatusFormatter.gray(f"Recompiling {arrow}")
        return "  " + StatusFormatter.gray(f"↘ {arrow}")

    @staticmethod
    def format_changed(path: Path, when: Optional[datetime] = None) -> str:
        """Format the "file changed" line printed for each change event."""
        if when is None:
            when = datetime.now()
        return StatusFormatter.gray(f"{StatusFormatter.highlight(path.name)} changed ({when:%H:%M})")

    @staticmethod
    def format_settings(options: CompileOptions, watch: bool) -> str:
        """Format the settings summary shown at startup."""
        def mark(enabled: bool) -> str:
            return "✓" if enabled else "𐄂"

        lines = [
            "Settings:",
            f"{mark(options.minify)} Minify",
            f"{mark(options.source_map_inline)} Source Maps",
            f"{mark(watch)} Watch Mode",
        ]
        return "\n".join(StatusFormatter.gray(line) for line in lines)

    @staticmethod
    def print_info(message: str) -> None:
        print(StatusFormatter.gray(message), flush=True)

    @staticmethod
    def print_bullet(message: str) -> None:
        print(StatusFormatter.gray(f"• {message}"), flush=True)


class ErrorFormatter:
    """Formats and displays error messages with ANSI color codes."""

    # ANSI color codes
    RED = "\033[1;31m"
    RESET = "\033[0m"

    @staticmethod
    def print_error(title: str, message: str = "") -> None:
        """Print formatted error message to stderr.

        Args:
            title: Error title (e.g., "Output directory not found")
            message: Error message details
        """
        red = ErrorFormatter.RED if _use_color(sys.stderr) else ""
        reset = ErrorFormatter.RESET if red else ""
        print(f"{red}✗ {title}{reset}", file=sys.stderr)
        if message:
            print(message, file=sys.stderr)

    @staticmethod
    def handle_unexpected_error(error: Exception, verbose: bool = False) -> None:
        """Handle unexpected errors with standard formatting.

        Args:
            error: The exception to handle
            verbose: Whether to print traceback
        """
        message = f"{type(error).__name__}: {error}"
        ErrorFormatter.print_error("Unexpected error", message)

        if verbose:
            import traceback

            print("Traceback:", file=sys.stderr)
            print(traceback.format_exc(), file=sys.stderr)

        sys.exit(1)


class PathValidator:
    """Validates the output directory."""

    @staticmethod
    def find_output_dir_problem(output_dir: Path) -> Optional[str]:
        """Check that the output directory exists and is writable.

        Args:
            output_dir: Path to check

        Returns:
            Description of the problem, or None if the directory is usable
        """
        if not output_dir.exists():
            return f"Output directory does not exist: {output_dir}"
        if not output_dir.is_dir():
            return f"Output path is not a directory: {output_dir}"
        if not os.access(output_dir, os.W_OK):
            return f"Output directory is not writable: {output_dir}"
        return None


class DependencyChecker:
    """Locates required external tools."""

    @staticmethod
    def find_compiler(name: str = COMPILER_NAME) -> Path:
        """Locate the Lightning CSS executable on PATH.

        Args:
            name: Executable name

        Returns:
            Path to the compiler

        Raises:
            SystemExit: If the compiler is not installed
        """
        found = shutil.which(name)
        if found is None:
            ErrorFormatter.print_error(
                "Lightning CSS is not installed",
                "   Install with: npm install -g lightningcss-cli\n"
                "   or: brew install lightningcss",
            )
            sys.exit(1)
        return Path(found)
