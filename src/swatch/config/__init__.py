"""
Configuration for swatch.

This module provides the compile options that are fixed for the whole run.
"""

from .compile_options import (
    DEFAULT_BROWSER_TARGETS,
    BROWSER_TARGETS_ENV,
    CompileOptions,
)

__all__ = [
    'DEFAULT_BROWSER_TARGETS',
    'BROWSER_TARGETS_ENV',
    'CompileOptions',
]
