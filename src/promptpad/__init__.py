"""Promptpad: compose tagged multi-role prompts and stream completions into the editor."""

__version__ = "0.1.0"
