"""
bundlehost serve command.

SUMMARY: Serve a build output directory for development

Loads the layered configuration, binds the dev server and serves until
interrupted. The main asset used for app-route fallback is the configured
``entry`` file.
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import Any

from bundlehost.cli import OutputFormatter, add_standard_flags, get_config_manager
from bundlehost.core.build import BuildTracker, BundleAsset
from bundlehost.core.exceptions import BundlehostError
from bundlehost.core.server import start
from bundlehost.core.server.bootstrap import status_line
from bundlehost.core.stdlib_logging import configure_logging

SUMMARY = "Serve a build output directory for development"


def register_args(parser: argparse.ArgumentParser) -> None:
    """Register command-specific arguments."""
    parser.add_argument("--out-dir", "-d", help="Build output directory to serve")
    parser.add_argument("--public-url", help="URL prefix assets are served under (e.g. /public)")
    parser.add_argument("--port", "-p", type=int, help="Preferred port (a free one is picked if taken)")
    parser.add_argument("--host", help="Interface to bind (default: all interfaces)")
    parser.add_argument("--entry", help="Main bundle served for app routes (default: index.html)")
    parser.add_argument(
        "--strict-public-prefix",
        action="store_true",
        default=None,
        help="Match --public-url by whole path segments instead of a raw prefix",
    )
    tls = parser.add_argument_group("https")
    tls.add_argument("--cert", help="PEM certificate file (requires --key)")
    tls.add_argument("--key", help="PEM private key file (requires --cert)")
    tls.add_argument("--pfx", help="PKCS#12 bundle with key and certificate")
    tls.add_argument("--pfx-passphrase", help="Passphrase for --pfx")
    parser.add_argument("--log-level", help="Logging level (default: from config, INFO)")
    parser.add_argument("--log-file", help="Also write logs to this file")
    add_standard_flags(parser)


def _overrides_from_args(args: argparse.Namespace) -> dict[str, Any]:
    server: dict[str, Any] = {}
    if args.out_dir:
        server["out_dir"] = str(Path(args.out_dir).expanduser().resolve())
    if args.public_url:
        server["public_url"] = args.public_url
    if args.port is not None:
        server["port"] = args.port
    if args.host is not None:
        server["host"] = args.host
    if args.entry:
        server["entry"] = args.entry
    if args.strict_public_prefix:
        server["strict_public_prefix"] = True

    if args.pfx:
        https: dict[str, Any] = {"pfx": str(Path(args.pfx).expanduser().resolve())}
        if args.pfx_passphrase:
            https["passphrase"] = args.pfx_passphrase
        server["https"] = https
    elif args.cert or args.key:
        if not (args.cert and args.key):
            raise BundlehostError("--cert and --key must be given together")
        server["https"] = {
            "key": str(Path(args.key).expanduser().resolve()),
            "cert": str(Path(args.cert).expanduser().resolve()),
        }

    logging_cfg: dict[str, Any] = {}
    if args.log_level:
        logging_cfg["level"] = args.log_level.upper()
    if args.log_file:
        logging_cfg["file"] = str(Path(args.log_file).expanduser().resolve())

    overrides: dict[str, Any] = {}
    if server:
        overrides["server"] = server
    if logging_cfg:
        overrides["logging"] = logging_cfg
    return overrides


def main(args: argparse.Namespace) -> int:
    formatter = OutputFormatter(json_mode=getattr(args, "json", False))
    try:
        manager = get_config_manager(args)
        cfg = manager.load_config(_overrides_from_args(args))
        config = manager.server_config(cfg)

        logging_cfg = cfg.get("logging") or {}
        log_file = logging_cfg.get("file")
        log = configure_logging(
            level=str(logging_cfg.get("level") or "INFO"),
            log_path=Path(log_file) if log_file else None,
            stream=None if formatter.json_mode else sys.stderr,
        )

        if not config.out_dir.is_dir():
            log.warning("Output directory %s does not exist yet", config.out_dir)

        tracker = BuildTracker(main_asset=BundleAsset.from_entry(config.entry))
        server = start(config, tracker, log=log.getChild("server"))
    except (BundlehostError, FileNotFoundError) as e:
        formatter.error(e, error_code="serve_error")
        return 1

    # Text mode: the status line was already logged by start().
    if formatter.json_mode:
        formatter.success(
            {**server.listen_result.to_dict(), "outDir": str(config.out_dir)},
            status_line(server.listen_result),
            status="listening",
        )
    else:
        formatter.text_kv("Serving", config.out_dir)
    try:
        server.serve_forever()
    except KeyboardInterrupt:
        if not formatter.json_mode:
            formatter.text("\nShutting down dev server...")
    finally:
        server.close()
    return 0


if __name__ == "__main__":
    parser = argparse.ArgumentParser()
    register_args(parser)
    cli_args = parser.parse_args()
    sys.exit(main(cli_args))
