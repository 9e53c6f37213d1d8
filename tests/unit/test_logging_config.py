"""
Unit tests for logging setup.
"""

import logging
from logging.handlers import RotatingFileHandler

from speakly.logging_config import setup_logging


def _file_handlers(logger):
    return [h for h in logger.handlers if isinstance(h, RotatingFileHandler)]


class TestSetupLogging:
    def test_attaches_rotating_file_handler_once(self, tmp_path):
        logger = setup_logging(tmp_path)
        before = len(_file_handlers(logger))
        setup_logging(tmp_path)
        assert len(_file_handlers(logger)) == before
        assert logger.name == "speakly"
        assert (tmp_path / "speakly.log").exists()

    def test_package_loggers_reach_the_file(self, tmp_path):
        setup_logging(tmp_path)
        logging.getLogger("speakly.tests").warning("hello from the tests")
        for handler in _file_handlers(logging.getLogger("speakly")):
            handler.flush()
        assert "hello from the tests" in (tmp_path / "speakly.log").read_text(encoding="utf-8")
