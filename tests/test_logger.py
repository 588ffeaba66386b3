"""
Unit Tests for Logging Setup

Author: dirmirror Project
License: MIT
"""

import json
import logging
import pytest

from dirmirror.utils.logger import ROOT_LOGGER_NAME, get_logger, setup_logging


@pytest.fixture(autouse=True)
def restore_logging():
    yield
    logger = logging.getLogger(ROOT_LOGGER_NAME)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.propagate = True
    logger.setLevel(logging.NOTSET)


class TestSetupLogging:

    def test_console_only(self):
        logger = setup_logging(log_level="WARNING")

        assert logger.name == ROOT_LOGGER_NAME
        assert logger.level == logging.WARNING
        assert len(logger.handlers) == 1
        assert logger.propagate is False

    def test_repeated_setup_replaces_handlers(self):
        setup_logging()
        logger = setup_logging()

        assert len(logger.handlers) == 1

    def test_file_logging(self, tmp_path):
        """Test that messages reach the rotating log file without colour codes."""
        log_file = tmp_path / "logs" / "dirmirror.log"

        logger = setup_logging(log_to_file=True, log_file_path=str(log_file))
        get_logger("tests").error("Error copying file from a to b")
        for handler in logger.handlers:
            handler.flush()

        content = log_file.read_text()
        assert "Error copying file from a to b" in content
        assert "\033[" not in content

    def test_json_file_logging(self, tmp_path):
        """Test that JSON output carries extra fields."""
        log_file = tmp_path / "mirror.log"

        logger = setup_logging(log_to_file=True, log_file_path=str(log_file), json_format=True)
        logger.info("Copied a to b", extra={"operation": "copy_file", "source": "a"})
        for handler in logger.handlers:
            handler.flush()

        records = [json.loads(line) for line in log_file.read_text().splitlines()]
        copied = [r for r in records if r["message"] == "Copied a to b"]
        assert copied[0]["operation"] == "copy_file"
        assert copied[0]["levelname"] == "INFO"

    def test_invalid_level_raises(self):
        with pytest.raises(ValueError, match="Unknown log level"):
            setup_logging(log_level="LOUD")

    def test_level_name_case_insensitive(self):
        logger = setup_logging(log_level="debug")

        assert logger.level == logging.DEBUG

    def test_text_file_logging_includes_context(self, tmp_path):
        """Test that operation context is appended to text records."""
        log_file = tmp_path / "mirror.log"

        logger = setup_logging(log_to_file=True, log_file_path=str(log_file))
        logger.error("Error copying file", extra={"operation": "copy_file", "source": "/src/a"})
        for handler in logger.handlers:
            handler.flush()

        assert "Error copying file [operation=copy_file source=/src/a]" in log_file.read_text()


class TestGetLogger:

    def test_module_name_prefixed(self):
        assert get_logger("tests").name == "dirmirror.tests"

    def test_package_name_kept(self):
        assert get_logger("dirmirror.core.mirror").name == "dirmirror.core.mirror"
        assert get_logger("dirmirror").name == "dirmirror"


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
