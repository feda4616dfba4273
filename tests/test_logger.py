"""Tests for logging setup and session-tagged records."""
import json
import logging

import pytest

from watchrun.utils.logger import (
    ColorFormatter,
    JsonFormatter,
    TEXT_FORMAT,
    log_exception,
    session_logger,
    setup_logging,
)


@pytest.fixture()
def restore_root_logger():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield root
    for handler in list(root.handlers):
        root.removeHandler(handler)
        handler.close()
    for handler in handlers:
        root.addHandler(handler)
    root.setLevel(level)


def make_record(msg="hello", level=logging.INFO, **attrs):
    record = logging.LogRecord("watchrun.test", level, __file__, 1, msg, None, None)
    for key, value in attrs.items():
        setattr(record, key, value)
    return record


def test_session_logger_tags_records(caplog):
    log = session_logger("watchrun.test", "build")

    with caplog.at_level(logging.INFO, logger="watchrun.test"):
        log.info("Restored 3 watches")

    (record,) = caplog.records
    assert record.getMessage() == "[build] Restored 3 watches"
    assert record.session == "build"


def test_json_formatter_includes_session():
    entry = json.loads(JsonFormatter().format(make_record(session="build")))

    assert entry['message'] == "hello"
    assert entry['level'] == "INFO"
    assert entry['session'] == "build"
    assert 'exception' not in entry


def test_color_formatter_leaves_record_plain():
    record = make_record(level=logging.WARNING)

    text = ColorFormatter(fmt=TEXT_FORMAT).format(record)

    assert "\033[33mWARNING\033[0m" in text
    assert record.levelname == "WARNING"


def test_log_exception_keeps_traceback(caplog):
    logger = logging.getLogger("watchrun.test")
    try:
        raise ValueError("bad value")
    except ValueError as e:
        error = e

    with caplog.at_level(logging.ERROR, logger="watchrun.test"):
        log_exception(logger, error, message="Action failed")

    (record,) = caplog.records
    assert record.exc_info[1] is error
    assert "bad value" in caplog.text


def test_setup_logging_json_file(tmp_path, restore_root_logger):
    log_file = tmp_path / "logs" / "watchrun.log"

    setup_logging(log_level="DEBUG", log_file=str(log_file), log_format="json")
    session_logger("watchrun.test", "build").info("Triggered")
    for handler in restore_root_logger.handlers:
        handler.flush()

    lines = [json.loads(line) for line in log_file.read_text().splitlines()]
    assert lines[-1]['message'] == "[build] Triggered"
    assert lines[-1]['session'] == "build"
    assert logging.getLogger("watchdog").level == logging.WARNING


def test_setup_logging_rejects_unknown_format(restore_root_logger):
    with pytest.raises(ValueError):
        setup_logging(log_format="xml")
