"""
Tests for logging setup: console handler, execution log format, levels.
"""

import logging
import re
from pathlib import Path

from provisioner.core.observability.logging_config import _parse_level, setup_logging

_LINE = re.compile(r"^\d{4}-\d{2}-\d{2} \d{2}:\d{2}:\d{2} \[(\w+)\] - (.*)$")


class TestSetupLogging:
    def test_file_format(self, log_file: Path):
        setup_logging(log_file=log_file, console=False)
        logging.getLogger("provisioner.x").info("Configuration loaded from /etc/provisioner/config.conf.")
        logging.getLogger("provisioner.x").error("Module 'install/nginx' failed")

        lines = log_file.read_text().splitlines()
        assert [_LINE.match(line).groups() for line in lines] == [
            ("INFO", "Configuration loaded from /etc/provisioner/config.conf."),
            ("ERROR", "Module 'install/nginx' failed"),
        ]

    def test_file_skips_debug(self, log_file: Path):
        setup_logging(log_file=log_file, console=False)
        logging.getLogger("provisioner.x").debug("noise")
        assert log_file.read_text() == ""

    def test_creates_log_directory(self, tmp_path: Path):
        path = tmp_path / "deep" / "dir" / "p.log"
        setup_logging(log_file=path, console=False)
        assert path.parent.is_dir()

    def test_replaces_previous_handlers(self, log_file: Path):
        setup_logging(level="INFO")
        setup_logging(level="INFO")
        streams = [h for h in logging.getLogger().handlers if type(h) is logging.StreamHandler]
        assert len(streams) == 1

    def test_console_disabled(self, log_file: Path):
        setup_logging(log_file=log_file, console=False)
        handlers = logging.getLogger().handlers
        assert len(handlers) == 1
        assert isinstance(handlers[0], logging.FileHandler)

    def test_console_level(self):
        setup_logging(level="DEBUG")
        assert logging.getLogger().level == logging.DEBUG


class TestParseLevel:
    def test_names(self):
        assert _parse_level("info") == logging.INFO
        assert _parse_level("DEBUG") == logging.DEBUG

    def test_fallback(self):
        assert _parse_level(None) == logging.WARNING
        assert _parse_level("chatty") == logging.WARNING
