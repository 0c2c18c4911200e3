"""I/O utilities for bundlehost.

- Core: directory management
- YAML: tolerant and strict readers, string dumping
"""
from __future__ import annotations

from .core import PathLike, ensure_directory
from .yaml import (
    HAS_YAML,
    dump_yaml_string,
    read_yaml,
    resolve_yaml_path,
)

__all__ = [
    # core
    "PathLike",
    "ensure_directory",
    # yaml
    "HAS_YAML",
    "read_yaml",
    "dump_yaml_string",
    "resolve_yaml_path",
]
