"""Tests for logging configuration."""

import logging
from pathlib import Path

from scripto.logging_config import SecretFilter, get_log_dir, setup_logging


def read_log(log_dir, name):
    for handler in logging.getLogger(name).handlers:
        handler.flush()
    return (log_dir / f"{name}.log").read_text(encoding="utf-8")


class TestSetupLogging:
    """Tests for setup_logging function."""

    def test_creates_logger(self, temp_log_dir):
        """setup_logging should create a logger instance."""
        logger = setup_logging(name="test", log_dir=str(temp_log_dir))
        assert isinstance(logger, logging.Logger)
        assert logger.name == "test"

    def test_includes_wiki_id_in_filename(self, temp_log_dir):
        """setup_logging should include wiki_id in filename when provided."""
        logger = setup_logging(name="sync", wiki_id="scripto-wiki", log_dir=str(temp_log_dir))
        logger.info("Test message")

        assert (temp_log_dir / "scripto-wiki-sync.log").exists()

    def test_respects_level_name(self, temp_log_dir):
        """Level may be given by name."""
        logger = setup_logging(name="test", log_dir=str(temp_log_dir), level="WARNING", console=False)
        logger.info("Info message")
        logger.warning("Warning message")

        content = read_log(temp_log_dir, "test")
        assert "Info message" not in content
        assert "Warning message" in content

    def test_level_from_environment(self, temp_log_dir, monkeypatch):
        monkeypatch.setenv("LOG_LEVEL", "DEBUG")
        logger = setup_logging(name="test", log_dir=str(temp_log_dir), console=False)
        assert logger.level == logging.DEBUG

    def test_child_loggers_reach_file(self, temp_log_dir):
        """Client loggers are children of the configured logger."""
        setup_logging(name="test", log_dir=str(temp_log_dir), console=False)
        logging.getLogger("test.client").info("From the client")

        assert "From the client" in read_log(temp_log_dir, "test")

    def test_masks_secrets(self, temp_log_dir):
        logger = setup_logging(name="test", log_dir=str(temp_log_dir), console=False)
        logger.info("POST %s", {"action": "clientlogin", "username": "Bob", "password": "hunter2"})

        content = read_log(temp_log_dir, "test")
        assert "hunter2" not in content
        assert "'username': 'Bob'" in content

    def test_reinitialization_replaces_handlers(self, temp_log_dir):
        setup_logging(name="test", log_dir=str(temp_log_dir))
        logger = setup_logging(name="test", log_dir=str(temp_log_dir))
        assert len(logger.handlers) == 2

    def test_creates_log_directory(self, tmp_path):
        """setup_logging should create log directory if it doesn't exist."""
        log_dir = tmp_path / "new_logs"
        setup_logging(name="test", log_dir=str(log_dir))
        assert log_dir.exists()


class TestSecretFilter:
    """Tests for SecretFilter."""

    def _message(self, msg, *args):
        record = logging.LogRecord("test", logging.INFO, __file__, 1, msg, args, None)
        SecretFilter().filter(record)
        return record.getMessage()

    def test_masks_query_string(self):
        assert self._message("lgpassword=abc&lgname=Bob") == "lgpassword=***&lgname=Bob"

    def test_masks_token_in_dict(self):
        message = self._message("%s", {"token": "d41d8cd98f+\\", "title": "A"})
        assert "d41d8cd98f" not in message
        assert "'title': 'A'" in message

    def test_leaves_plain_messages(self):
        assert self._message("Fetching csrf token failed: %s", "readonly") == "Fetching csrf token failed: readonly"


class TestGetLogDir:
    """Tests for get_log_dir function."""

    def test_returns_default(self, monkeypatch):
        monkeypatch.delenv("LOG_DIR", raising=False)
        assert get_log_dir() == Path("./logs")

    def test_returns_env_var(self, monkeypatch):
        monkeypatch.setenv("LOG_DIR", "/custom/logs")
        assert get_log_dir() == Path("/custom/logs")
