"""Compile a git repository into a static, browsable website."""

__version__ = "0.1.0"
