import json
import logging
import sys

from shared.logging_config import CorrelationFilter, JsonFormatter, correlation_id_var, setup_logging


def _record(msg: str = "Cart item added", level: int = logging.INFO, exc_info=None) -> logging.LogRecord:
    return logging.LogRecord(
        name="services.resource_service.repository",
        level=level,
        pathname=__file__,
        lineno=1,
        msg=msg,
        args=(),
        exc_info=exc_info,
    )


def test_formatter_emits_json_fields():
    record = _record()
    record.service_name = "resource-service"
    record.correlation_id = "abc-123"

    data = json.loads(JsonFormatter().format(record))

    assert data["level"] == "INFO"
    assert data["logger"] == "services.resource_service.repository"
    assert data["message"] == "Cart item added"
    assert data["service_name"] == "resource-service"
    assert data["correlation_id"] == "abc-123"
    assert data["timestamp"].endswith("+00:00")


def test_formatter_uses_configured_timezone():
    data = json.loads(JsonFormatter("Asia/Kolkata").format(_record()))

    assert data["timestamp"].endswith("+05:30")


def test_formatter_includes_exception():
    try:
        raise ValueError("boom")
    except ValueError:
        record = _record("failed", logging.ERROR, exc_info=sys.exc_info())

    data = json.loads(JsonFormatter().format(record))

    assert "ValueError: boom" in data["exception"]


def test_filter_reads_correlation_id_from_context():
    token = correlation_id_var.set("req-42")
    try:
        record = _record()
        CorrelationFilter("resource-service").filter(record)
    finally:
        correlation_id_var.reset(token)

    assert record.correlation_id == "req-42"
    assert record.service_name == "resource-service"


def test_filter_outside_request_leaves_correlation_empty():
    record = _record()
    CorrelationFilter("resource-service").filter(record)

    data = json.loads(JsonFormatter().format(record))

    assert "correlation_id" not in data


def test_setup_logging_installs_a_single_handler():
    setup_logging("resource-service")
    setup_logging("resource-service", level="DEBUG")

    root = logging.getLogger()
    handlers = [h for h in root.handlers if isinstance(h.formatter, JsonFormatter)]
    assert len(handlers) == 1
    assert root.level == logging.DEBUG
