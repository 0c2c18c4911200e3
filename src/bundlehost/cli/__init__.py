"""
bundlehost CLI package.

Provides the command-line interface with auto-discovery of commands from
``cli/commands/`` (top-level) and domain subfolders such as ``config/``.

Framework utilities for building CLI commands:
- _output: Output formatting (JSON/text modes)
- _args: Common argument registration helpers
- _utils: Shared CLI utilities
"""
from ._output import OutputFormatter
from ._args import (
    add_config_flag,
    add_json_flag,
    add_repo_root_flag,
    add_standard_flags,
)
from ._utils import get_config_manager, get_repo_root

__all__ = [
    # Output formatting
    "OutputFormatter",
    # Argument helpers
    "add_config_flag",
    "add_json_flag",
    "add_repo_root_flag",
    "add_standard_flags",
    # Utilities
    "get_config_manager",
    "get_repo_root",
]
