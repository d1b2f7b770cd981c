"""
logging_config.py - Centralized JSON Logging Configuration

PURPOSE:
    Provides structured JSON logging for the resource service with timezone-aware
    timestamps, per-request correlation tracking and service name injection.

JSON LOG FIELDS:
    - timestamp: ISO 8601 format in the configured timezone (default UTC)
    - level: Log level (INFO, ERROR, WARNING, DEBUG, CRITICAL)
    - logger: Module name where log originated (e.g., "services.resource_service.repository")
    - message: The actual log message
    - service_name: Name of the service (injected automatically)
    - correlation_id: Id of the HTTP request being served, when there is one
    - exception: Full stack trace (only when exc_info is set)

USAGE:
    from shared.logging_config import setup_logging
    setup_logging("resource-service", level="INFO")

    logger = logging.getLogger(__name__)
    logger.info("Address created")

    # Inside a request the middleware binds the correlation id:
    token = correlation_id_var.set("9a63a606-fbef-4a4b-a5a4-ef1f127bc304")
    ...
    correlation_id_var.reset(token)

EXAMPLE JSON OUTPUT:
    {
        "timestamp": "2026-10-18T09:12:44.120331+00:00",
        "level": "INFO",
        "logger": "services.resource_service.repository",
        "message": "Incremented cart item p1 for user u1 by 3",
        "service_name": "resource-service",
        "correlation_id": "9a63a606-fbef-4a4b-a5a4-ef1f127bc304"
    }
"""

import json
import logging
import sys
from contextvars import ContextVar
from datetime import datetime
from typing import Any, Dict, Optional
from zoneinfo import ZoneInfo

# Set by the request middleware, read by CorrelationFilter
correlation_id_var: ContextVar[Optional[str]] = ContextVar("correlation_id", default=None)

_HANDLER_NAME = "json-stdout"


class JsonFormatter(logging.Formatter):
    """Custom formatter that outputs JSON logs with correlation context."""

    def __init__(self, tz: str = "UTC"):
        super().__init__()
        self.tz = ZoneInfo(tz)

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON."""
        log_data: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, self.tz).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        if getattr(record, "service_name", None):
            log_data["service_name"] = record.service_name
        if getattr(record, "correlation_id", None):
            log_data["correlation_id"] = record.correlation_id

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_data, default=str)


class CorrelationFilter(logging.Filter):
    """Injects service_name and the current request's correlation id into records."""

    def __init__(self, service_name: str):
        super().__init__()
        self.service_name = service_name

    def filter(self, record: logging.LogRecord) -> bool:
        record.service_name = self.service_name
        if not hasattr(record, "correlation_id"):
            record.correlation_id = correlation_id_var.get()
        return True


def setup_logging(service_name: str, level: str = "INFO", tz: str = "UTC") -> None:
    """Setup JSON logging for a service. Calling it again replaces the handler."""
    root = logging.getLogger()
    root.setLevel(level)

    for existing in list(root.handlers):
        if existing.get_name() == _HANDLER_NAME:
            root.removeHandler(existing)

    handler = logging.StreamHandler(sys.stdout)
    handler.set_name(_HANDLER_NAME)
    handler.setFormatter(JsonFormatter(tz))
    # Filters on the handler also see records propagated from child loggers
    handler.addFilter(CorrelationFilter(service_name))
    root.addHandler(handler)
