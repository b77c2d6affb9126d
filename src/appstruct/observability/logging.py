"""Structured JSON logging with node execution context."""
import logging
import sys
from typing import Any

from pythonjsonlogger import jsonlogger

from appstruct.config import get_settings

NODE_CONTEXT_FIELDS = ("workflow_id", "node_name", "node_type", "item_index")


class NodeContextFilter(logging.Filter):
    """Add node context to log records."""

    def filter(self, record: logging.LogRecord) -> bool:
        """Add default node context fields if not present."""
        for field in NODE_CONTEXT_FIELDS:
            if not hasattr(record, field):
                setattr(record, field, None)
        return True


class CustomJsonFormatter(jsonlogger.JsonFormatter):
    """Custom JSON formatter with standardized field names."""

    def add_fields(
        self,
        log_record: dict[str, Any],
        record: logging.LogRecord,
        message_dict: dict[str, Any],
    ) -> None:
        """Add custom fields to the log record."""
        super().add_fields(log_record, record, message_dict)

        if not log_record.get("timestamp"):
            log_record["timestamp"] = self.formatTime(record, self.datefmt)

        log_record["level"] = record.levelname
        log_record["logger"] = record.name

        # Drop empty context so lines stay short
        for field in NODE_CONTEXT_FIELDS:
            if log_record.get(field) is None:
                log_record.pop(field, None)


def setup_logging() -> None:
    """Configure logging for a host process running the AppStruct nodes."""
    settings = get_settings()

    handler = logging.StreamHandler(sys.stdout)

    if settings.log_json:
        formatter: logging.Formatter = CustomJsonFormatter(
            "%(timestamp)s %(level)s %(name)s %(message)s",
            datefmt="%Y-%m-%dT%H:%M:%S",
        )
    else:
        formatter = logging.Formatter("%(asctime)s %(levelname)s %(name)s %(message)s")
    handler.setFormatter(formatter)
    handler.addFilter(NodeContextFilter())

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(settings.log_level)

    # Reduce noise from third-party libraries
    logging.getLogger("urllib3").setLevel(logging.WARNING)
    logging.getLogger("requests").setLevel(logging.WARNING)


def with_node_context(
    workflow_id: str | None = None,
    node_name: str | None = None,
    node_type: str | None = None,
    item_index: int | None = None,
    **kwargs: Any,
) -> dict[str, Any]:
    """
    Create an extra dict with node context for logging.

    Returns:
        Dict to pass as extra parameter to logger methods
    """
    extra = kwargs.copy()
    if workflow_id:
        extra["workflow_id"] = workflow_id
    if node_name:
        extra["node_name"] = node_name
    if node_type:
        extra["node_type"] = node_type
    if item_index is not None:
        extra["item_index"] = item_index
    return extra
