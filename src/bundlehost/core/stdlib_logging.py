from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import TextIO

from bundlehost.core.utils.io import ensure_directory

LOGGER_NAME = "bundlehost"

_STREAM_HANDLER: logging.Handler | None = None
_FILE_HANDLER: logging.Handler | None = None
_CONFIGURED_LOG_PATH: str | None = None


def _level_from_name(name: str) -> int:
    level = logging.getLevelName(str(name).upper())
    return level if isinstance(level, int) else logging.INFO


def configure_logging(
    *,
    level: str = "INFO",
    log_path: Path | None = None,
    stream: TextIO | None = sys.stderr,
) -> logging.Logger:
    """Configure the ``bundlehost`` logger.

    Installs at most one stream handler and one file handler; calling again
    replaces them. Pass ``stream=None`` to keep stdout/stderr clean (JSON mode).
    """
    global _STREAM_HANDLER, _FILE_HANDLER, _CONFIGURED_LOG_PATH

    log = logging.getLogger(LOGGER_NAME)
    log.setLevel(_level_from_name(level))
    log.propagate = False

    if _STREAM_HANDLER is not None:
        log.removeHandler(_STREAM_HANDLER)
        _STREAM_HANDLER = None
    if stream is not None:
        sh = logging.StreamHandler(stream)
        sh.setFormatter(logging.Formatter("%(message)s"))
        log.addHandler(sh)
        _STREAM_HANDLER = sh

    resolved = str(Path(log_path).resolve()) if log_path is not None else None
    if _FILE_HANDLER is not None and resolved != _CONFIGURED_LOG_PATH:
        log.removeHandler(_FILE_HANDLER)
        _FILE_HANDLER.close()
        _FILE_HANDLER = None
        _CONFIGURED_LOG_PATH = None

    if resolved is not None and _FILE_HANDLER is None:
        ensure_directory(Path(resolved).parent)
        fh = logging.FileHandler(resolved, encoding="utf-8")
        fh.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s"))
        log.addHandler(fh)
        _FILE_HANDLER = fh
        _CONFIGURED_LOG_PATH = resolved

    if not log.handlers:
        log.addHandler(logging.NullHandler())
    return log


def reset_logging_for_tests() -> None:
    """Test-only: clear configured handlers."""
    global _STREAM_HANDLER, _FILE_HANDLER, _CONFIGURED_LOG_PATH
    log = logging.getLogger(LOGGER_NAME)
    for h in list(log.handlers):
        log.removeHandler(h)
        h.close()
    log.setLevel(logging.NOTSET)
    log.propagate = True
    _STREAM_HANDLER = None
    _FILE_HANDLER = None
    _CONFIGURED_LOG_PATH = None


__all__ = ["LOGGER_NAME", "configure_logging", "reset_logging_for_tests"]
