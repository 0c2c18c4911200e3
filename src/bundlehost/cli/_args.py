"""Common CLI argument registration utilities."""
from __future__ import annotations

import argparse


def add_json_flag(parser: argparse.ArgumentParser) -> None:
    """Add --json flag for JSON output mode."""
    parser.add_argument(
        "--json",
        action="store_true",
        help="Output as JSON",
    )


def add_repo_root_flag(parser: argparse.ArgumentParser) -> None:
    """Add --repo-root flag for project root override."""
    parser.add_argument(
        "--repo-root",
        type=str,
        help="Override project root path (default: current directory)",
    )


def add_config_flag(parser: argparse.ArgumentParser) -> None:
    """Add --config flag for an explicit config file."""
    parser.add_argument(
        "--config",
        type=str,
        help="Config file (default: <repo-root>/bundlehost.yaml when present)",
    )


def add_standard_flags(parser: argparse.ArgumentParser) -> None:
    """Add the flags every config-aware command accepts."""
    add_json_flag(parser)
    add_repo_root_flag(parser)
    add_config_flag(parser)


__all__ = [
    "add_json_flag",
    "add_repo_root_flag",
    "add_config_flag",
    "add_standard_flags",
]
