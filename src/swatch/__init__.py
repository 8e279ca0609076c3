"""swatch - watch a directory of CSS sources and rebuild them with Lightning CSS."""

__version__ = "0.1.0"
