from __future__ import annotations

import json
import logging
import sys
from contextvars import ContextVar
from datetime import datetime, timezone

from google.cloud import logging as cloud_logging

trace_id_var: ContextVar[str | None] = ContextVar("trace_id", default=None)
tenant_id_var: ContextVar[str | None] = ContextVar("tenant_id", default=None)

# Attributes every LogRecord carries; anything else was passed through ``extra=``.
_RESERVED_ATTRS = frozenset(vars(logging.LogRecord("", 0, "", 0, "", None, None))) | {"message", "asctime"}


class StructuredFormatter(logging.Formatter):
    """JSON formatter for structured logging compatible with Cloud Logging."""

    def format(self, record: logging.LogRecord) -> str:
        log_obj = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "severity": record.levelname,
            "message": record.getMessage(),
            "logger": record.name,
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }

        trace_id = trace_id_var.get()
        if trace_id:
            log_obj["logging.googleapis.com/trace"] = trace_id

        tenant_id = tenant_id_var.get()
        if tenant_id:
            log_obj["tenant_id"] = tenant_id

        for key, value in vars(record).items():
            if key not in _RESERVED_ATTRS and not key.startswith("_"):
                log_obj[key] = value

        if record.exc_info:
            log_obj["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_obj, default=str)


def setup_logging(
    *,
    environment: str = "dev",
    project_id: str | None = None,
    use_cloud_logging: bool = True,
) -> None:
    """Configure logging for the application.

    Args:
        environment: Environment name (dev, staging, prod)
        project_id: GCP project ID for Cloud Logging
        use_cloud_logging: Whether to use Cloud Logging client
    """
    log_level = logging.DEBUG if environment == "dev" else logging.INFO

    if use_cloud_logging and project_id and environment != "dev":
        client = cloud_logging.Client(project=project_id)
        client.setup_logging(log_level=log_level)
    else:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(StructuredFormatter())

        logging.basicConfig(
            level=log_level,
            handlers=[handler],
        )

    # Set levels for noisy libraries
    logging.getLogger("google").setLevel(logging.WARNING)
    logging.getLogger("urllib3").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)


def set_trace_id(trace_id: str) -> None:
    trace_id_var.set(trace_id)


def get_trace_id() -> str | None:
    return trace_id_var.get()


def set_tenant_id(tenant_id: str | None) -> None:
    """Attach the tenant being served to every log line of the current context."""
    tenant_id_var.set(tenant_id)


__all__ = ["setup_logging", "set_trace_id", "get_trace_id", "set_tenant_id", "StructuredFormatter"]
