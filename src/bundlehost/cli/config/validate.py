"""
bundlehost config validate command.

SUMMARY: Validate the merged configuration
"""

from __future__ import annotations

import argparse
import sys

from bundlehost.cli import OutputFormatter, add_standard_flags, get_config_manager

SUMMARY = "Validate the merged configuration"


def register_args(parser: argparse.ArgumentParser) -> None:
    add_standard_flags(parser)


def main(args: argparse.Namespace) -> int:
    formatter = OutputFormatter(json_mode=getattr(args, "json", False))
    try:
        manager = get_config_manager(args)
        cfg = manager.load_config(validate=False)
        errors = manager.collect_errors(cfg)

        payload = {
            "configFile": str(manager.project_config_path) if manager.project_config_path.exists() else None,
            "valid": not errors,
            "errors": errors,
        }
        if formatter.json_mode:
            formatter.json_output(payload)
        elif errors:
            formatter.text("Configuration is invalid:")
            for err in errors:
                formatter.text(f"  - {err}")
        else:
            formatter.text("Configuration is valid")
        return 0 if not errors else 1
    except Exception as e:
        formatter.error(e, error_code="config_validate_error")
        return 1


if __name__ == "__main__":
    parser = argparse.ArgumentParser()
    register_args(parser)
    cli_args = parser.parse_args()
    sys.exit(main(cli_args))
