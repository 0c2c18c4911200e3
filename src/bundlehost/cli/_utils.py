"""Shared CLI helpers."""
from __future__ import annotations

import argparse
from pathlib import Path

from bundlehost.core.config import ConfigManager


def get_repo_root(args: argparse.Namespace) -> Path:
    """Project root from ``--repo-root``, else the current directory."""
    if getattr(args, "repo_root", None):
        return Path(args.repo_root).expanduser().resolve()
    return Path.cwd().resolve()


def get_config_manager(args: argparse.Namespace) -> ConfigManager:
    config_path = getattr(args, "config", None)
    return ConfigManager(
        repo_root=get_repo_root(args),
        config_path=Path(config_path) if config_path else None,
    )


__all__ = ["get_repo_root", "get_config_manager"]
