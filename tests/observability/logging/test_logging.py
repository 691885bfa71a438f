import json
import logging
import logging.handlers

import pytest

from localchat.internal import logging as localchat_logging
from localchat.internal.logging import get_logger, setup_logging

# --- Fixtures ---

@pytest.fixture(autouse=True)
def reset_logging(monkeypatch):
    """Ensure logging state is clean for each test."""
    monkeypatch.setattr(localchat_logging, "_LOGGING_CONFIGURED", False)
    monkeypatch.delenv("LOCALCHAT_LOG_LEVEL", raising=False)
    root = logging.getLogger()
    before = list(root.handlers)
    level = root.level
    yield
    for handler in root.handlers[:]:
        if handler not in before:
            handler.close()
            root.removeHandler(handler)
    root.setLevel(level)

# --- Tests ---

def test_logging_is_structured_json(tmp_path):
    """Logs are emitted as JSON lines to the file."""
    log_file = tmp_path / "logs" / "test.log.json"
    setup_logging("INFO", log_file_path=log_file)
    logger = get_logger("test.module")

    logger.info("Test event", key="value", another_key=123)

    log_entry = json.loads(log_file.read_text().splitlines()[0])
    assert log_entry["event"] == "Test event"
    assert log_entry["key"] == "value"
    assert log_entry["another_key"] == 123
    assert log_entry["level"] == "info"
    assert log_entry["logger"] == "test.module"
    assert "timestamp" in log_entry

def test_level_from_environment(tmp_path, monkeypatch):
    monkeypatch.setenv("LOCALCHAT_LOG_LEVEL", "warning")
    log_file = tmp_path / "test.log.json"
    setup_logging(log_file_path=log_file)
    logger = get_logger("test.level")

    logger.info("dropped")
    logger.warning("kept")

    events = [json.loads(line)["event"] for line in log_file.read_text().splitlines()]
    assert events == ["kept"]

def test_explicit_level_wins_over_environment(tmp_path, monkeypatch):
    monkeypatch.setenv("LOCALCHAT_LOG_LEVEL", "WARNING")
    log_file = tmp_path / "test.log.json"
    setup_logging("DEBUG", log_file_path=log_file)
    get_logger("test.level").debug("kept")

    assert logging.getLogger().level == logging.DEBUG
    assert json.loads(log_file.read_text().splitlines()[0])["event"] == "kept"

def test_setup_is_idempotent(tmp_path):
    setup_logging(log_file_path=tmp_path / "a.log.json")
    handlers = len(logging.getLogger().handlers)

    setup_logging(log_file_path=tmp_path / "b.log.json")

    assert len(logging.getLogger().handlers) == handlers
    assert not (tmp_path / "b.log.json").exists()

def test_file_handler_rotates(tmp_path):
    setup_logging(log_file_path=tmp_path / "rotating.log.json")

    handlers = [h for h in logging.getLogger().handlers if isinstance(h, logging.handlers.RotatingFileHandler)]
    assert handlers[-1].maxBytes == 5 * 1024 * 1024
    assert handlers[-1].backupCount == 5
