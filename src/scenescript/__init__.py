"""Scene scripting language: parser and resumable execution engine."""
from __future__ import annotations

__version__ = "0.1.0"
