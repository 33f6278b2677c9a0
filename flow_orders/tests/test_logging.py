"""Tests for logging configuration and credential redaction."""

import logging
from io import StringIO

import pytest

from ..logging_config import build_logging_config
from ..utils.structured_logging import (
    CorrelationIdFilter,
    CredentialRedactionFilter,
    clear_correlation_id,
    correlation_context,
    get_correlation_id,
    set_correlation_id,
)


@pytest.fixture
def capture():
    logger = logging.getLogger("flow_orders_test_redaction")
    logger.setLevel(logging.DEBUG)
    stream = StringIO()
    handler = logging.StreamHandler(stream)
    handler.setFormatter(logging.Formatter('%(message)s'))
    handler.addFilter(CredentialRedactionFilter())
    logger.addHandler(handler)
    yield logger, stream
    logger.removeHandler(handler)


def test_redacts_named_private_key(capture):
    logger, stream = capture
    key = "0x" + "a" * 64
    logger.info(f"loading private_key={key}")

    assert key not in stream.getvalue()
    assert "private_key=[REDACTED]" in stream.getvalue()


def test_redacts_key_in_args(capture):
    logger, stream = capture
    key = "b" * 64
    logger.info("config %s", f'{{"privateKey": "{key}"}}')

    assert key not in stream.getvalue()


def test_redacts_secrets(capture):
    logger, stream = capture
    logger.info("mnemonic: twelve-words-go-here password=hunter2hunter2")

    output = stream.getvalue()
    assert "twelve-words-go-here" not in output
    assert "hunter2hunter2" not in output


def test_keeps_hashes_and_signatures(capture):
    """Order hashes and signatures are not credentials."""
    logger, stream = capture
    root = "0x" + "c" * 64
    sig = "0x" + "d" * 130
    logger.info(f"Bulk signed 3 orders (root={root}) sig={sig}")

    assert root in stream.getvalue()
    assert sig in stream.getvalue()


def test_correlation_id_filter():
    record = logging.LogRecord("x", logging.INFO, __file__, 1, "msg", None, None)

    clear_correlation_id()
    CorrelationIdFilter().filter(record)
    assert record.correlation_id == "-"

    batch_id = set_correlation_id()
    assert batch_id.startswith("batch_")
    assert get_correlation_id() == batch_id
    CorrelationIdFilter().filter(record)
    assert record.correlation_id == batch_id
    clear_correlation_id()


def test_correlation_context_restores_previous_id():
    clear_correlation_id()

    with correlation_context() as batch_id:
        assert get_correlation_id() == batch_id
    assert get_correlation_id() is None

    set_correlation_id("batch_outer")
    with pytest.raises(RuntimeError):
        with correlation_context("batch_inner"):
            assert get_correlation_id() == "batch_inner"
            raise RuntimeError("boom")
    assert get_correlation_id() == "batch_outer"
    clear_correlation_id()


def test_build_logging_config_defaults():
    config = build_logging_config()

    assert config["loggers"]["flow_orders"]["handlers"] == ["console"]
    assert config["handlers"]["console"]["filters"] == ["correlation", "redact"]


def test_build_logging_config_file_and_json(tmp_path):
    log_file = str(tmp_path / "flow.log")
    config = build_logging_config(level="debug", log_file=log_file, json_format=True)

    assert config["loggers"]["flow_orders"]["level"] == "DEBUG"
    assert config["handlers"]["error_file"]["filename"] == str(tmp_path / "flow_errors.log")
    assert all(config["handlers"][h]["formatter"] == "json" for h in ("console", "file", "error_file"))


def test_build_logging_config_does_not_mutate_defaults():
    build_logging_config(level="ERROR", log_file="x.log", json_format=True)
    config = build_logging_config()

    assert config["loggers"]["flow_orders"]["level"] == "INFO"
    assert "file" not in config["handlers"]
