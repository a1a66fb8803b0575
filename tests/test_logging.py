"""Tests for structured JSON logging."""

import json
import logging

import pytest

from cephsource.utils.logging import JSONFormatter, configure_logging


def _record(msg, *args, level=logging.ERROR, **extra):
    record = logging.LogRecord("cephsource.delivery", level, __file__, 1, msg, args, None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


def test_formats_core_fields():
    entry = json.loads(JSONFormatter().format(_record("sent %s", "abc")))
    assert entry["level"] == "ERROR"
    assert entry["component"] == "cephsource.delivery"
    assert entry["message"] == "sent abc"
    assert "timestamp" in entry


def test_includes_extra_fields():
    entry = json.loads(JSONFormatter().format(
        _record("failed", event_id="abc123", source="ceph:s3.r.b", subject="k")
    ))
    assert entry["event_id"] == "abc123"
    assert entry["source"] == "ceph:s3.r.b"
    assert entry["subject"] == "k"
    assert "args" not in entry


@pytest.fixture
def restore_logger():
    logger = logging.getLogger("cephsource")
    saved = (logger.handlers[:], logger.level, logger.propagate)
    yield logger
    logger.handlers, logger.propagate = saved[0], saved[2]
    logger.setLevel(saved[1])


def test_configure_logging_is_idempotent(restore_logger):
    configure_logging("debug")
    configure_logging("debug")
    assert restore_logger.level == logging.DEBUG
    assert len(restore_logger.handlers) == 1
    assert isinstance(restore_logger.handlers[0].formatter, JSONFormatter)


def test_unknown_level_defaults_to_info(restore_logger):
    configure_logging("chatty")
    assert restore_logger.level == logging.INFO
