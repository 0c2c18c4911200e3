from __future__ import annotations

import io
import logging
from pathlib import Path

from bundlehost.core.stdlib_logging import LOGGER_NAME, configure_logging


def test_stream_handler_uses_bare_messages() -> None:
    stream = io.StringIO()
    log = configure_logging(level="INFO", stream=stream)

    log.getChild("server").info("Server running at %s", "http://localhost:1234")
    log.debug("hidden")

    assert stream.getvalue() == "Server running at http://localhost:1234\n"
    assert log.propagate is False


def test_reconfiguring_replaces_the_stream_handler() -> None:
    first = io.StringIO()
    second = io.StringIO()
    configure_logging(level="INFO", stream=first)
    log = configure_logging(level="DEBUG", stream=second)

    log.debug("only once")

    assert first.getvalue() == ""
    assert second.getvalue() == "only once\n"
    assert log.level == logging.DEBUG


def test_file_handler_writes_timestamped_lines(tmp_path: Path) -> None:
    log_path = tmp_path / "logs" / "bundlehost.log"
    log = configure_logging(level="WARNING", log_path=log_path, stream=None)

    log.warning("port busy")
    log.info("ignored")
    for handler in log.handlers:
        handler.flush()

    content = log_path.read_text(encoding="utf-8")
    assert f"WARNING {LOGGER_NAME}: port busy" in content
    assert "ignored" not in content


def test_no_outputs_installs_null_handler() -> None:
    log = configure_logging(level="INFO", stream=None)

    assert [type(h) for h in log.handlers] == [logging.NullHandler]


def test_unknown_level_falls_back_to_info() -> None:
    log = configure_logging(level="chatty", stream=None)

    assert log.level == logging.INFO
