"""Compile options passed to Lightning CSS.

Options are created once from the parsed command line and stay read-only
for the lifetime of the process.
"""

import os
from dataclasses import dataclass
from typing import Mapping, Optional

DEFAULT_BROWSER_TARGETS = ">= 0.25%"
BROWSER_TARGETS_ENV = "BROWSER_TARGETS"


@dataclass(frozen=True)
class CompileOptions:
    """Options controlling a single Lightning CSS invocation.

    Attributes:
        minify: Pass --minify to the compiler
        source_map_inline: Embed an inline source map
        browser_targets: Browserslist query passed via --targets
        bundle: Inline @import rules (always on)
    """

    minify: bool = True
    source_map_inline: bool = False
    browser_targets: str = DEFAULT_BROWSER_TARGETS
    bundle: bool = True

    @classmethod
    def from_flags(
        cls,
        minify: bool = True,
        source_map: bool = False,
        env: Optional[Mapping[str, str]] = None
    ) -> "CompileOptions":
        """Build options from CLI flags and the environment.

        Args:
            minify: Whether --minify was requested
            source_map: Whether inline source maps were requested
            env: Environment mapping (defaults to os.environ)

        Returns:
            CompileOptions instance
        """
        if env is None:
            env = os.environ

        targets = env.get(BROWSER_TARGETS_ENV, "").strip() or DEFAULT_BROWSER_TARGETS

        return cls(
            minify=minify,
            source_map_inline=source_map,
            browser_targets=targets,
        )
