"""
bundlehost config show command.

SUMMARY: Show the merged configuration

Displays the configuration merged from bundled defaults, the project file,
BUNDLEHOST_* environment variables and any overrides.
"""

from __future__ import annotations

import argparse
import sys
from typing import Any

from bundlehost.cli import OutputFormatter, add_standard_flags, get_config_manager
from bundlehost.core.utils.io import dump_yaml_string

SUMMARY = "Show the merged configuration"


def register_args(parser: argparse.ArgumentParser) -> None:
    """Register command-specific arguments."""
    parser.add_argument(
        "key",
        nargs="?",
        help="Specific configuration key to show (e.g., 'server.port')",
    )
    add_standard_flags(parser)


def _lookup(cfg: dict[str, Any], key: str) -> Any:
    value: Any = cfg
    for part in [p for p in key.split(".") if p]:
        if not isinstance(value, dict) or part not in value:
            raise KeyError(key)
        value = value[part]
    return value


def main(args: argparse.Namespace) -> int:
    formatter = OutputFormatter(json_mode=getattr(args, "json", False))
    try:
        manager = get_config_manager(args)
        cfg = manager.load_config(validate=False)
        value: Any = cfg
        if args.key:
            try:
                value = _lookup(cfg, args.key)
            except KeyError:
                formatter.error(KeyError(args.key), f"Configuration key not found: {args.key}", error_code="config_key_not_found")
                return 1

        if formatter.json_mode:
            formatter.json_output(value)
        elif isinstance(value, (dict, list)):
            formatter.text(dump_yaml_string(value, sort_keys=False).rstrip())
        else:
            formatter.text(str(value))
        return 0
    except Exception as e:
        formatter.error(e, error_code="config_show_error")
        return 1


if __name__ == "__main__":
    parser = argparse.ArgumentParser()
    register_args(parser)
    cli_args = parser.parse_args()
    sys.exit(main(cli_args))
