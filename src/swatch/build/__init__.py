"""
Build components for swatch.

This module provides the change-to-build pipeline pieces:
- Main CSS file resolution (partials and build artifacts are skipped)
- Lightning CSS invocation
- Compile coordination (one compile in flight at a time)
"""

from .main_file import (
    MainFileResolver,
    is_build_artifact,
    is_entry_candidate,
    is_partial,
    is_trigger_worthy,
)
from .compiler import (
    CompileAttempt,
    CompileOutcome,
    CompilerError,
    LightningCSSCompiler,
    output_path_for,
)
from .coordinator import CompileCoordinator, CompileGuard

__all__ = [
    'MainFileResolver',
    'is_build_artifact',
    'is_entry_candidate',
    'is_partial',
    'is_trigger_worthy',
    'CompileAttempt',
    'CompileOutcome',
    'CompilerError',
    'LightningCSSCompiler',
    'output_path_for',
    'CompileCoordinator',
    'CompileGuard',
]
