from __future__ import annotations

import io
import logging
from pathlib import Path

from dashboard_pipeline.logging_config import configure_logging


def test_configure_logging_adds_stream_handler() -> None:
    # Ensure configuring logging doesn't raise and attaches a StreamHandler
    configure_logging(None)
    root = logging.getLogger()
    assert any(isinstance(h, logging.StreamHandler) for h in root.handlers)


def test_configure_logging_writes_file_and_custom_stream(tmp_path: Path) -> None:
    buf = io.StringIO()
    log_path = tmp_path / "logs" / "pipeline.log"
    configure_logging(log_path, stream=buf)

    logging.getLogger("dashboard_pipeline.test").info("hello %s", "world")
    for h in logging.getLogger().handlers:
        h.flush()

    assert "| INFO | dashboard_pipeline.test | hello world" in buf.getvalue()
    assert "hello world" in log_path.read_text(encoding="utf-8")
    configure_logging(None)
