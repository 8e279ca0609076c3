"""
Command-line interface for swatch.

This module provides the `swatch` CLI tool that compiles the CSS entry file
in the current directory with Lightning CSS and recompiles it on change.
"""

import argparse
import logging
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import List, NoReturn, Optional

from swatch import __version__
from swatch.build import CompilerError, LightningCSSCompiler
from swatch.cli_utils import DependencyChecker, ErrorFormatter, StatusFormatter
from swatch.config import CompileOptions
from swatch.orchestrator import Orchestrator

EPILOG = """\
examples:
    swatch                    # Default: watch + minify, no source maps
    swatch --no-watch         # Compile once and exit
    swatch -s                 # Include source maps for debugging
    swatch --no-minify -s     # Debug mode: readable + source maps
    swatch -o ../public       # Write output to another directory

output:
    Automatically detects main CSS file (non-partial)
    Outputs to: [filename].compiled.css

notes:
    - Partials (files starting with _) are imported but not compiled directly
    - Source maps are embedded inline when enabled (-s flag)
    - Default mode is optimized for production (minified, no maps)
    - Uses Watchman for fastest possible file watching (if available)
    - BROWSER_TARGETS overrides the default browser targets (">= 0.25%")
"""

_log_handler: Optional[logging.Handler] = None


@dataclass
class WatchArgs:
    """Arguments for a swatch run."""

    output_dir: Optional[Path] = None
    watch: bool = True
    minify: bool = True
    sourcemap: bool = False
    debug: bool = False
    timeout: Optional[float] = None


class SwatchArgumentParser(argparse.ArgumentParser):
    """Argument parser that exits with status 1 on unknown options."""

    def error(self, message: str) -> NoReturn:
        sys.stderr.write(f"{self.prog}: {message}\n")
        sys.stderr.write("Use --help for usage information\n")
        sys.exit(1)


def setup_logging(debug: bool = False) -> None:
    """Setup logging for the CLI.

    Status lines are printed directly; logging carries warnings and, with
    --debug, diagnostic detail.
    """
    global _log_handler

    logger = logging.getLogger()
    if _log_handler is not None:
        logger.removeHandler(_log_handler)

    level = logging.DEBUG if debug else logging.WARNING
    logger.setLevel(level)

    _log_handler = logging.StreamHandler(sys.stderr)
    _log_handler.setLevel(level)
    _log_handler.setFormatter(logging.Formatter("swatch: %(levelname)s: %(message)s"))
    logger.addHandler(_log_handler)


def build_parser() -> argparse.ArgumentParser:
    parser = SwatchArgumentParser(
        prog="swatch",
        allow_abbrev=False,
        description="swatch - Modern CSS Compiler (Lightning CSS)",
        epilog=EPILOG,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "-v",
        "--version",
        action="version",
        version=f"swatch {__version__}",
    )
    parser.add_argument(
        "-w",
        "--watch",
        dest="watch",
        action="store_true",
        default=True,
        help="Watch for file changes (default: on)",
    )
    parser.add_argument(
        "--no-watch",
        dest="watch",
        action="store_false",
        help="Compile once and exit",
    )
    parser.add_argument(
        "-s",
        "--sourcemap",
        action="store_true",
        default=False,
        help="Include inline source maps (for debugging)",
    )
    parser.add_argument(
        "-m",
        "--minify",
        dest="minify",
        action="store_true",
        default=True,
        help="Minify the output (default: on)",
    )
    parser.add_argument(
        "--no-minify",
        dest="minify",
        action="store_false",
        help="Don't minify (keep readable)",
    )
    parser.add_argument(
        "-d",
        "--debug",
        action="store_true",
        default=False,
        help="Echo the compiler command line before each compile",
    )
    parser.add_argument(
        "-o",
        "--output-dir",
        type=Path,
        default=None,
        help="Directory for compiled output (default: current directory)",
    )
    parser.add_argument(
        "--timeout",
        type=float,
        default=None,
        help="Abort a compile that runs longer than this many seconds (default: no timeout)",
    )
    return parser


def watch_command(args: WatchArgs) -> None:
    """Compile the current directory's CSS entry file, then watch for changes.

    Examples:
        swatch                    # Watch + minify
        swatch --no-watch         # Compile once and exit
        swatch -d                 # Echo each compiler command
    """
    setup_logging(args.debug)

    compiler_path = DependencyChecker.find_compiler()

    working_dir = Path.cwd()
    output_dir = args.output_dir if args.output_dir is not None else working_dir
    if not output_dir.is_absolute():
        output_dir = working_dir / output_dir

    options = CompileOptions.from_flags(minify=args.minify, source_map=args.sourcemap)

    StatusFormatter.print_info("⚡ Lightning CSS + Watchman = 🚀")
    print()
    if args.watch and output_dir == working_dir:
        StatusFormatter.print_info("Using current directory for output")
    elif output_dir != working_dir:
        StatusFormatter.print_info(f"Selected output directory: {output_dir}")
    print()
    print(StatusFormatter.format_settings(options, args.watch))
    print(flush=True)

    try:
        compiler = LightningCSSCompiler(
            compiler_path=compiler_path,
            options=options,
            output_dir=output_dir,
            debug=args.debug,
            timeout=args.timeout,
        )
        orchestrator = Orchestrator(
            working_dir=working_dir,
            output_dir=output_dir,
            compiler=compiler,
            watch=args.watch,
        )
        exit_code = orchestrator.run()
    except CompilerError as e:
        ErrorFormatter.print_error("Compiler error", str(e))
        sys.exit(1)
    except KeyboardInterrupt:
        print()
        StatusFormatter.print_info("Stopping...")
        sys.exit(0)
    except Exception as e:
        ErrorFormatter.handle_unexpected_error(e, args.debug)

    sys.exit(exit_code)


def main(argv: Optional[List[str]] = None) -> None:
    """swatch - Modern CSS Compiler using Lightning CSS."""
    parser = build_parser()
    parsed_args = parser.parse_args(argv)

    watch_args = WatchArgs(
        output_dir=parsed_args.output_dir,
        watch=parsed_args.watch,
        minify=parsed_args.minify,
        sourcemap=parsed_args.sourcemap,
        debug=parsed_args.debug,
        timeout=parsed_args.timeout,
    )
    watch_command(watch_args)


if __name__ == "__main__":
    main()
