"""
fmtconv package

This package implements formatted console I/O and explicit type conversion as
a small library with a CLI on top.

Key responsibilities are split across modules:
- `kinds.py`: value kinds and the `TypedValue` call-site tag
- `formatter.py`: template rendering (`render`) and output (`Console`)
- `scanner.py`: reading tokens, lines and formatted input (`Scanner`)
- `converter.py`: fixed-width wraparound, int/float conversion, text <-> number parsing
- `config.py`: settings from YAML and environment variables
- `cli.py`: CLI entrypoint and orchestration
"""

from __future__ import annotations

__all__ = ["__version__"]

__version__ = "0.1.0"
