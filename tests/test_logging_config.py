"""
Tests for the loguru setup.
"""

import pytest

from quadstream.config import reset_config
from quadstream.logging_config import logger, setup_logging

pytestmark = pytest.mark.fast


class TestSetupLogging:
    """Sinks follow the arguments and the environment."""

    def test_second_call_is_ignored_without_force(self):
        setup_logging(suppress_console=True, force=True)
        assert setup_logging(enable_file_logging=True) is None

    def test_file_sink_in_configured_log_dir(self, temp_dir, monkeypatch):
        monkeypatch.setenv("QUADSTREAM_LOG_DIR", str(temp_dir / "logs"))
        reset_config()

        log_file = setup_logging(suppress_console=True, enable_file_logging=True, force=True)
        logger.info("written to the file sink")
        logger.debug("below the file level")

        assert log_file == temp_dir / "logs" / "quadstream.log"
        content = log_file.read_text(encoding="utf-8")
        assert "written to the file sink" in content
        assert "below the file level" not in content

    def test_file_logging_from_environment(self, temp_dir, monkeypatch):
        monkeypatch.setenv("QUADSTREAM_LOG_DIR", str(temp_dir))
        monkeypatch.setenv("QUADSTREAM_FILE_LOGGING", "yes")
        reset_config()
        assert setup_logging(suppress_console=True, force=True) == temp_dir / "quadstream.log"

    def test_no_file_sink_by_default(self, monkeypatch):
        monkeypatch.delenv("QUADSTREAM_FILE_LOGGING", raising=False)
        assert setup_logging(suppress_console=True, force=True) is None
