"""Tests for logging configuration."""

from __future__ import annotations

import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path

from readmark import setup_logging


class TestSetupLogging:
    def test_console_and_rotating_file(self, tmp_path: Path) -> None:
        """A console handler plus a 10MB x5 rotating file under log_dir."""
        root = logging.getLogger()
        before = list(root.handlers)
        level = root.level
        try:
            setup_logging(tmp_path / "logs", "warning")
            added = [h for h in root.handlers if h not in before]
            assert len(added) == 2
            (file_handler,) = [h for h in added if isinstance(h, RotatingFileHandler)]
            assert file_handler.maxBytes == 10 * 1024 * 1024
            assert file_handler.backupCount == 5
            assert (tmp_path / "logs" / "readmark.log").exists()
            (console,) = [h for h in added if h is not file_handler]
            assert console.level == logging.WARNING
        finally:
            for handler in root.handlers[:]:
                if handler not in before:
                    root.removeHandler(handler)
                    handler.close()
            root.setLevel(level)

    def test_console_only(self) -> None:
        """Without a log directory only the console handler is added."""
        root = logging.getLogger()
        before = list(root.handlers)
        level = root.level
        try:
            setup_logging()
            added = [h for h in root.handlers if h not in before]
            assert len(added) == 1
            assert not isinstance(added[0], RotatingFileHandler)
        finally:
            for handler in root.handlers[:]:
                if handler not in before:
                    root.removeHandler(handler)
            root.setLevel(level)
